from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Order, OrderStatus
from .repository import OrderRepository


class OrderService:

    @staticmethod
    async def list_orders(db: AsyncSession, user_id: int) -> list[Order]:
        return await OrderRepository.get_orders_for_user(db, user_id)

    @staticmethod
    async def get_order(db: AsyncSession, user_id: int, order_id: int) -> Order:
        order = await OrderRepository.get_order(db, user_id, order_id)
        if not order:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
        return order

    @staticmethod
    async def update_status(db: AsyncSession, order_id: int, new_status: OrderStatus) -> Order:
        order = await OrderRepository.update_status(db, order_id, new_status)
        if not order:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
        await db.commit()
        return order
