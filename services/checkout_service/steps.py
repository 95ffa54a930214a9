from collections import Counter
from decimal import Decimal

from services.cart_service.repository import CartRepository
from services.order_service.models import OrderStatus
from services.order_service.repository import OrderRepository
from services.product_service.repository import ProductRepository

from .errors import StockUnavailable
from .saga import SagaOrchestrator
from .schemas import PricedLine

# --- ACTIONS ---

async def validate_stock(ctx: dict):
    db, request = ctx["db"], ctx["request"]
    lines = [
        (group.shop, item)
        for group in request.cart_items
        for item in group.items
    ]

    products = await ProductRepository.get_products_by_ids(db, (item.product_id for _, item in lines))

    # The same product may show up under several shop groups
    requested = Counter()
    for _, item in lines:
        requested[item.product_id] += item.quantity

    priced = []
    for shop, item in lines:
        product = products.get(item.product_id)
        if product is None or requested[item.product_id] > product.stock:
            raise StockUnavailable()
        priced.append(
            PricedLine(product_id=item.product_id, quantity=item.quantity, shop=shop, price=product.price)
        )

    ctx["lines"] = priced
    ctx["total"] = sum((line.price * line.quantity for line in priced), Decimal("0"))
    # End the read transaction so no connection sits idle in one during the charge
    await db.commit()


async def charge_payment(ctx: dict):
    gateway, settings = ctx["gateway"], ctx["settings"]
    amount = int((ctx["total"] * settings.minor_unit_factor).to_integral_value())
    ctx["amount"] = amount
    ctx["intent"] = await gateway.create_payment_intent(
        amount, settings.payment_currency, ctx["request"].payment_method_id
    )


async def persist_order(ctx: dict):
    db, request = ctx["db"], ctx["request"]
    # Order, lines, stock and cart change together or not at all
    async with db.begin():
        order_id = await OrderRepository.create_order(
            db, request.user_id, ctx["total"], OrderStatus.PENDING, request.action
        )
        for line in ctx["lines"]:
            await OrderRepository.add_order_line(db, order_id, line.product_id, line.quantity, line.price)
            if not await ProductRepository.decrement_stock(db, line.product_id, line.quantity):
                # Another checkout took the stock after validation
                raise StockUnavailable()
        await CartRepository.delete_cart_lines(db, request.user_id)
    ctx["order_id"] = order_id


# --- COMPENSATIONS ---

async def refund_payment(ctx: dict):
    await ctx["gateway"].refund_payment_intent(ctx["intent"].intent_id)


def build_checkout_saga() -> SagaOrchestrator:
    saga = SagaOrchestrator()
    saga.add_step("validate_stock", validate_stock, None) # Read-only, no rollback needed
    saga.add_step("charge_payment", charge_payment, refund_payment)
    saga.add_step("persist_order", persist_order, None) # Rolled back by its own transaction
    return saga
