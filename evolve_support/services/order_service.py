"""Order tracking queries."""

from evolve_support.repositories.order_repo import OrderRepository
from evolve_support.schemas.order_schema import OrderResponse


class OrderService:
    """Read-only view of the current user's orders."""

    def __init__(self, order_repo: OrderRepository, user_id: int) -> None:
        self._order_repo = order_repo
        self._user_id = user_id

    async def list_orders(self) -> list[OrderResponse]:
        """The user's orders, most recent first."""
        rows = await self._order_repo.find_by_user(self._user_id)
        return [OrderResponse.model_validate(r) for r in rows]
