from typing import List

from pydantic import BaseModel, Field


class CartItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    shop: str = Field(min_length=1)


class CartItemView(BaseModel):
    product_id: int
    name: str
    price: float
    quantity: int
    shop: str


class CartSummary(BaseModel):
    subtotal: float
    discounts: float = 0
    delivery_fee: float
    total: float


class CartShopGroup(BaseModel):
    shop: str
    items: List[CartItemView] = []
    summary: CartSummary


class CartTotalResponse(BaseModel):
    total_amount: float


class MessageResponse(BaseModel):
    message: str
