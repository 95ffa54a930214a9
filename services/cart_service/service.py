from decimal import Decimal

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.product_service.repository import ProductRepository

from .repository import CartRepository
from .schemas import CartItemCreate, CartItemView, CartShopGroup, CartSummary


class CartService:

    @staticmethod
    async def _ensure_in_stock(db: AsyncSession, product_id: int, quantity: int) -> None:
        # Best effort: a concurrent checkout can still take the stock afterwards
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product or product.stock < quantity:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product out of stock")

    @staticmethod
    async def add_item(db: AsyncSession, user_id: int, data: CartItemCreate) -> None:
        existing = await CartRepository.get_cart_line(db, user_id, data.product_id, data.shop)
        wanted = data.quantity + (existing.quantity if existing else 0)
        await CartService._ensure_in_stock(db, data.product_id, wanted)

        await CartRepository.upsert_cart_line(db, user_id, data.product_id, data.shop, data.quantity)
        await db.commit()

    @staticmethod
    async def update_item(db: AsyncSession, user_id: int, data: CartItemCreate) -> None:
        line = await CartRepository.get_cart_line(db, user_id, data.product_id, data.shop)
        if not line:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found in cart")
        await CartService._ensure_in_stock(db, data.product_id, data.quantity)

        line.quantity = data.quantity
        await db.commit()

    @staticmethod
    async def remove_item(db: AsyncSession, user_id: int, product_id: int, shop: str) -> None:
        if not await CartRepository.delete_cart_line(db, user_id, product_id, shop):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found in cart")
        await db.commit()

    @staticmethod
    async def get_cart(db: AsyncSession, user_id: int, delivery_fee: int) -> list[CartShopGroup]:
        """The user's cart grouped by shop, each group with its own summary."""
        rows = await CartRepository.get_cart_with_products(db, user_id)

        groups: dict[str, dict] = {}
        for line, product in rows:
            group = groups.setdefault(line.shop, {"items": [], "subtotal": Decimal("0")})
            group["items"].append(
                CartItemView(
                    product_id=product.id,
                    name=product.name,
                    price=product.price,
                    quantity=line.quantity,
                    shop=line.shop,
                )
            )
            group["subtotal"] += product.price * line.quantity

        return [
            CartShopGroup(
                shop=shop,
                items=group["items"],
                summary=CartSummary(
                    subtotal=group["subtotal"],
                    discounts=0,
                    delivery_fee=delivery_fee,
                    total=group["subtotal"] + delivery_fee,
                ),
            )
            for shop, group in groups.items()
        ]

    @staticmethod
    async def get_cart_total(db: AsyncSession, user_id: int, delivery_fee: int) -> Decimal:
        rows = await CartRepository.get_cart_with_products(db, user_id)
        if not rows:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No items in cart")

        subtotal = sum((product.price * line.quantity for line, product in rows), Decimal("0"))
        shops = {line.shop for line, _ in rows}
        return subtotal + delivery_fee * len(shops)
