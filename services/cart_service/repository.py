from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.product_service.models import Product

from .models import CartLine


class CartRepository:

    @staticmethod
    async def get_cart_lines(db: AsyncSession, user_id: int) -> list[CartLine]:
        result = await db.execute(
            select(CartLine)
            .where(CartLine.user_id == user_id)
            .order_by(CartLine.shop, CartLine.product_id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_cart_line(db: AsyncSession, user_id: int, product_id: int, shop: str) -> Optional[CartLine]:
        result = await db.execute(
            select(CartLine)
            .where(CartLine.user_id == user_id)
            .where(CartLine.product_id == product_id)
            .where(CartLine.shop == shop)
        )
        return result.scalars().first()

    @staticmethod
    async def upsert_cart_line(db: AsyncSession, user_id: int, product_id: int, shop: str, quantity: int) -> CartLine:
        """Sum ``quantity`` into an existing (user, product, shop) line, or create it."""
        line = await CartRepository.get_cart_line(db, user_id, product_id, shop)
        if line:
            line.quantity += quantity
        else:
            line = CartLine(user_id=user_id, product_id=product_id, shop=shop, quantity=quantity)
            db.add(line)
        await db.flush()
        return line

    @staticmethod
    async def delete_cart_line(db: AsyncSession, user_id: int, product_id: int, shop: str) -> bool:
        result = await db.execute(
            delete(CartLine).where(
                CartLine.user_id == user_id,
                CartLine.product_id == product_id,
                CartLine.shop == shop,
            )
        )
        return result.rowcount > 0

    @staticmethod
    async def delete_cart_lines(db: AsyncSession, user_id: int) -> int:
        result = await db.execute(delete(CartLine).where(CartLine.user_id == user_id))
        return result.rowcount

    @staticmethod
    async def get_cart_with_products(db: AsyncSession, user_id: int):
        """(CartLine, Product) pairs for the user's cart, grouped by shop."""
        result = await db.execute(
            select(CartLine, Product)
            .join(Product, Product.id == CartLine.product_id)
            .where(CartLine.user_id == user_id)
            .order_by(CartLine.shop, CartLine.product_id)
        )
        return result.all()
