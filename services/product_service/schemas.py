from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0, decimal_places=2)
    stock: int = Field(ge=0)
    shop: str = Field(min_length=1)
    category_id: Optional[int] = None


class StockUpdate(BaseModel):
    quantity: int = Field(gt=0)


class ProductResponse(BaseModel):
    id: int
    name: str
    price: float
    stock: int
    shop: str
    category_id: Optional[int]

    class Config:
        from_attributes = True


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]

    class Config:
        from_attributes = True
