"""Order repository (read-only)."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from evolve_support.models.order import Order


class OrderRepository:
    """Read access to a user's scooter orders."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_user(self, user_id: int) -> list[Order]:
        """Return the user's orders, most recent order date first."""
        result = await self._session.execute(
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.order_date.desc(), Order.id.desc())
        )
        return list(result.scalars().all())
