from typing import Any, Optional

from pydantic import BaseModel, Field


class PaymentIntentCreate(BaseModel):
    amount: int = Field(gt=0) # minor currency units
    currency: str = Field(min_length=3, max_length=3)
    payment_method: str = Field(min_length=1)


class PaymentIntentResponse(BaseModel):
    id: str
    object: str = "payment_intent"
    amount: int
    currency: str
    payment_method: str
    status: str
    client_secret: str
    last_payment_error: Optional[dict[str, Any]] = None

    class Config:
        from_attributes = True
