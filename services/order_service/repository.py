from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Order, OrderLine, OrderStatus


class OrderRepository:

    @staticmethod
    async def create_order(
        db: AsyncSession,
        user_id: int,
        total: Decimal,
        status: OrderStatus,
        action: str,
    ) -> int:
        order = Order(user_id=user_id, total_price=total, status=status, action=action)
        db.add(order)
        await db.flush()
        return order.id

    @staticmethod
    async def add_order_line(db: AsyncSession, order_id: int, product_id: int, quantity: int, price: Decimal) -> OrderLine:
        line = OrderLine(order_id=order_id, product_id=product_id, quantity=quantity, price=price)
        db.add(line)
        await db.flush()
        return line

    @staticmethod
    async def get_orders_for_user(db: AsyncSession, user_id: int) -> list[Order]:
        result = await db.execute(
            select(Order).where(Order.user_id == user_id).order_by(Order.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_order(db: AsyncSession, user_id: int, order_id: int) -> Optional[Order]:
        result = await db.execute(
            select(Order).where(Order.id == order_id, Order.user_id == user_id)
        )
        return result.scalars().first()

    @staticmethod
    async def get_order_by_id(db: AsyncSession, order_id: int) -> Optional[Order]:
        result = await db.execute(select(Order).where(Order.id == order_id))
        return result.scalars().first()

    @staticmethod
    async def update_status(db: AsyncSession, order_id: int, status: OrderStatus) -> Optional[Order]:
        order = await OrderRepository.get_order_by_id(db, order_id)
        if not order:
            return None
        order.status = status
        await db.flush()
        return order
