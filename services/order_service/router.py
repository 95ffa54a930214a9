from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security.dependencies import get_current_user, verify_internal_api_key
from .schemas import OrderResponse, OrderStatusUpdate
from .service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])
# Status moves happen outside checkout (fulfilment, support tooling)
internal_router = APIRouter(prefix="/orders", tags=["Orders"], dependencies=[Depends(verify_internal_api_key)])


@router.get("/", response_model=list[OrderResponse])
async def list_orders(user_id: str = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await OrderService.list_orders(db, int(user_id))


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: int, user_id: str = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await OrderService.get_order(db, int(user_id), order_id)


@internal_router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_status(order_id: int, payload: OrderStatusUpdate, db: AsyncSession = Depends(get_db)):
    return await OrderService.update_status(db, order_id, payload.status)
