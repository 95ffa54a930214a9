from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.config.settings import Settings, get_app_settings
from shared.security.dependencies import get_current_user

from .schemas import CartItemCreate, CartShopGroup, CartTotalResponse, MessageResponse
from .service import CartService

# Every cart route acts on the authenticated user's own cart
router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("/", response_model=list[CartShopGroup])
async def get_cart(
    user_id: str = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    db: AsyncSession = Depends(get_db),
):
    return await CartService.get_cart(db, int(user_id), settings.delivery_fee_per_shop)


@router.get("/total", response_model=CartTotalResponse)
async def get_cart_total(
    user_id: str = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    db: AsyncSession = Depends(get_db),
):
    total = await CartService.get_cart_total(db, int(user_id), settings.delivery_fee_per_shop)
    return CartTotalResponse(total_amount=total)


@router.post("/", response_model=MessageResponse)
async def add_item(
    item: CartItemCreate,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await CartService.add_item(db, int(user_id), item)
    return MessageResponse(message="Item added to cart")


@router.put("/", response_model=MessageResponse)
async def update_item(
    item: CartItemCreate,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await CartService.update_item(db, int(user_id), item)
    return MessageResponse(message="Cart item updated")


@router.delete("/items/{product_id}", response_model=MessageResponse)
async def remove_item(
    product_id: int,
    shop: str = Query(min_length=1),
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await CartService.remove_item(db, int(user_id), product_id, shop)
    return MessageResponse(message="Item removed from cart")
