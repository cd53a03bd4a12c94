"""Create an admin user, or promote an existing one.

Usage:
    python -m scripts.create_admin --phone 5551234567
"""

import argparse
import asyncio

from evolve_support.core.database import create_tables, engine, session_scope
from evolve_support.repositories.user_repo import UserRepository
from evolve_support.schemas.auth_schema import OtpRequest


async def create_admin(phone: str) -> str:
    """Ensure the user with this phone number exists with the admin role."""
    await create_tables()
    try:
        async with session_scope() as session:
            repo = UserRepository(session)
            existing = await repo.find_by_phone(phone)
            if existing is None:
                user = await repo.create(phone=phone, role="admin")
                return f"Admin user created: {phone} (id={user.id})"
            if existing.role == "admin":
                return f"User '{phone}' is already an admin (id={existing.id})."
            await repo.update_role(existing.id, "admin")
            return f"User '{phone}' promoted to admin (id={existing.id})."
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create or promote an admin user")
    parser.add_argument("--phone", required=True, help="10-digit mobile number")
    args = parser.parse_args()

    # Same normalization and validation as the sign-in endpoint.
    phone = OtpRequest(phone=args.phone).phone
    print(asyncio.run(create_admin(phone)))


if __name__ == "__main__":
    main()
