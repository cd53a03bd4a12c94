"""Shared test database, token and seed helpers."""

from collections.abc import AsyncGenerator
from datetime import datetime
from decimal import Decimal

import fakeredis.aioredis
from fastapi import FastAPI
from langchain_core.language_models import BaseChatModel
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from evolve_support.models.chat_message import ChatMessage
from evolve_support.models.chat_session import ChatSession
from evolve_support.models.order import Order
from evolve_support.models.user import User
from evolve_support.services.token_service import TokenService

# --- Test DB (SQLite in-memory) ---

test_engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
test_session_factory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a test database session."""
    async with test_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# --- Token helpers ---


def make_auth_headers(
    fake_redis: fakeredis.aioredis.FakeRedis,
    user_id: int = 1,
    phone: str = "5550000001",
    role: str = "user",
) -> dict[str, str]:
    """Generate Authorization headers with a valid access token."""
    ts = TokenService(fake_redis)
    token = ts.create_access_token(user_id=user_id, phone=phone, role=role)
    return {"Authorization": f"Bearer {token}"}


# --- Seed helpers ---


async def seed_user(phone: str = "5550000001", role: str = "user") -> int:
    """Insert a user and return its id."""
    async with test_session_factory() as session:
        user = User(phone=phone, role=role)
        session.add(user)
        await session.flush()
        user_id = user.id
        await session.commit()
    return user_id


async def seed_session(
    user_id: int,
    title: str = "Chat",
    updated_at: datetime | None = None,
) -> int:
    """Insert a chat session, optionally with an explicit updated_at."""
    async with test_session_factory() as session:
        chat = ChatSession(user_id=user_id, title=title)
        if updated_at is not None:
            chat.updated_at = updated_at
        session.add(chat)
        await session.flush()
        session_id = chat.id
        await session.commit()
    return session_id


async def seed_message(
    session_id: int,
    content: str,
    is_user: bool = True,
    created_at: datetime | None = None,
) -> int:
    """Insert a chat message and return its id."""
    async with test_session_factory() as session:
        message = ChatMessage(session_id=session_id, is_user=is_user, content=content)
        if created_at is not None:
            message.created_at = created_at
        session.add(message)
        await session.flush()
        message_id = message.id
        await session.commit()
    return message_id


async def seed_order(
    user_id: int,
    order_number: str,
    order_date: datetime,
    status: str = "shipped",
    delivery_date: datetime | None = None,
    total_amount: Decimal = Decimal("799.00"),
) -> int:
    async with test_session_factory() as session:
        order = Order(
            user_id=user_id,
            product_name="Evolve Glide",
            product_model="EG-200",
            order_number=order_number,
            status=status,
            order_date=order_date,
            delivery_date=delivery_date,
            shipping_address="1 Main St, Springfield",
            total_amount=total_amount,
        )
        session.add(order)
        await session.flush()
        order_id = order.id
        await session.commit()
    return order_id




# --- App ---


def build_app(llm: BaseChatModel | None = None) -> FastAPI:
    """Import the app lazily and point it at the test database and model."""
    from evolve_support.core.database import get_async_session as original_dep
    from evolve_support.dependencies import get_llm
    from evolve_support.main import app

    app.dependency_overrides[original_dep] = override_get_async_session
    if llm is not None:
        app.dependency_overrides[get_llm] = lambda: llm
    return app
