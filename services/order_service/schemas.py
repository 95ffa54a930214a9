from datetime import datetime
from typing import List

from pydantic import BaseModel

from .models import OrderStatus


class OrderLineResponse(BaseModel):
    product_id: int
    quantity: int
    price: float

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    user_id: int
    total_price: float
    status: OrderStatus
    action: str
    created_at: datetime
    lines: List[OrderLineResponse] = []

    class Config:
        from_attributes = True


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
