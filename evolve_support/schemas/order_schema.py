"""Order API schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict

OrderStatus = Literal["order accepted", "shipped", "in transit", "delivered"]


class OrderResponse(BaseModel):
    """A scooter order as shown on the order tracking screen."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    product_name: str
    product_model: str
    order_number: str
    status: OrderStatus
    order_date: datetime
    delivery_date: datetime | None = None
    shipping_address: str
    total_amount: Decimal
