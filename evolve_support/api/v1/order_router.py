"""Order tracking endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends

from evolve_support.dependencies import get_order_service, require_role
from evolve_support.schemas.order_schema import OrderResponse
from evolve_support.schemas.response_schema import ApiResponse, success_response
from evolve_support.services.order_service import OrderService

router = APIRouter(
    prefix="/api/v1/orders",
    tags=["orders"],
    dependencies=[Depends(require_role("user", "admin"))],
)

OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]


@router.get("", response_model=ApiResponse[list[OrderResponse]])
async def list_orders(service: OrderServiceDep) -> dict:
    result = await service.list_orders()
    return success_response(result)
