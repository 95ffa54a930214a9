from decimal import Decimal
from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, Field, StringConstraints

from .errors import CheckoutFailureKind

NonBlank = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CheckoutLineItem(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)


class ShopGroup(BaseModel):
    shop: NonBlank
    items: List[CheckoutLineItem] = Field(min_length=1)


class CheckoutRequest(BaseModel):
    user_id: int = Field(alias="userId", gt=0)
    cart_items: List[ShopGroup] = Field(alias="cartItems", min_length=1)
    payment_method_id: NonBlank = Field(alias="paymentMethodId")
    action: NonBlank

    class Config:
        populate_by_name = True


class PricedLine(BaseModel):
    """A validated cart line with the unit price read at validation time."""

    product_id: int
    quantity: int
    shop: str
    price: Decimal


class CheckoutSuccess(BaseModel):
    order_id: int
    total: Decimal
    amount: int # charged, in minor currency units
    payment_intent_id: Optional[str] = None


class CheckoutFailure(BaseModel):
    kind: CheckoutFailureKind
    message: str
    details: Any = None


CheckoutResult = Union[CheckoutSuccess, CheckoutFailure]
