"""Insert the default scooter questions when none exist yet.

Usage:
    python -m scripts.seed_questions
"""

import asyncio

from evolve_support.core.database import create_tables, engine, session_scope
from evolve_support.repositories.question_repo import QuestionRepository

DEFAULT_QUESTIONS: list[tuple[str, str]] = [
    ("What are the different scooter models available?", "Products"),
    ("How long does the battery last?", "Battery"),
    ("How do I charge my scooter?", "Battery"),
    ("What's the maximum speed and range?", "Products"),
    ("How do I troubleshoot if my scooter won't start?", "Troubleshooting"),
    ("What's covered under warranty?", "Warranty"),
    ("How do I check my order status?", "Orders"),
    ("What safety gear do you recommend?", "Safety"),
]


async def seed_questions() -> int:
    """Returns the number of questions inserted."""
    await create_tables()
    try:
        async with session_scope() as session:
            repo = QuestionRepository(session)
            if await repo.find_all():
                return 0
            for question, category in DEFAULT_QUESTIONS:
                await repo.create(question=question, category=category, is_active=True)
            return len(DEFAULT_QUESTIONS)
    finally:
        await engine.dispose()


def main() -> None:
    inserted = asyncio.run(seed_questions())
    if inserted:
        print(f"Inserted {inserted} domain questions.")
    else:
        print("Domain questions already present; nothing to do.")


if __name__ == "__main__":
    main()
