import os

# Must be set before the app (and its settings) are imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["INTERNAL_API_KEY"] = "test-internal-key"
os.environ["TRACING_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["PAYMENT_CURRENCY"] = "mur"
os.environ["PAYMENT_MINOR_UNIT_FACTOR"] = "100"
os.environ["DELIVERY_FEE_PER_SHOP"] = "150"

from decimal import Decimal

import httpx
import pytest
from sqlalchemy import func, select

from main import app
from shared.config.database import Database
from shared.security import create_access_token
from services.cart_service.repository import CartRepository
from services.checkout_service.errors import GatewayRejected, GatewayTimeout
from services.checkout_service.gateway import PaymentIntentResult
from services.order_service.models import Order, OrderLine
from services.product_service.models import Category, Product

INTERNAL_KEY = "test-internal-key"


class FakePaymentGateway:
    """Stands in for the payment-intent API and records every call."""

    def __init__(self):
        self.calls = []
        self.refunds = []
        self.decline_with = None
        self.timeout = False
        self.error = None
        self.on_charge = None

    async def create_payment_intent(self, amount, currency, payment_method_id):
        self.calls.append({"amount": amount, "currency": currency, "payment_method": payment_method_id})
        if self.on_charge:
            await self.on_charge()
        if self.error:
            raise self.error
        if self.timeout:
            raise GatewayTimeout()
        if self.decline_with is not None:
            raise GatewayRejected(self.decline_with)
        intent_id = f"pi_test_{len(self.calls)}"
        return PaymentIntentResult(
            intent_id=intent_id,
            status="succeeded",
            payload={"id": intent_id, "status": "succeeded", "amount": amount},
        )

    async def refund_payment_intent(self, intent_id):
        self.refunds.append(intent_id)


@pytest.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.create_all()
    previous = app.state.database
    app.state.database = db
    yield db
    app.state.database = previous
    await db.dispose()


@pytest.fixture
def gateway():
    fake = FakePaymentGateway()
    previous = app.state.payment_gateway
    app.state.payment_gateway = fake
    yield fake
    app.state.payment_gateway = previous


@pytest.fixture
async def client(database, gateway):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def auth_headers():
    def _headers(user_id: int) -> dict:
        token = create_access_token({"sub": str(user_id)}, app.state.settings)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def internal_headers():
    return {"X-Internal-API-Key": INTERNAL_KEY}


@pytest.fixture
def make_product(database):
    async def _make(price="100.00", stock=5, shop="shop-a", name="Widget", category_id=None) -> int:
        async with database.session() as session:
            product = Product(
                name=name, price=Decimal(price), stock=stock, shop=shop, category_id=category_id
            )
            session.add(product)
            await session.commit()
            return product.id
    return _make


@pytest.fixture
def make_category(database):
    async def _make(name: str, description: str | None = None) -> int:
        async with database.session() as session:
            category = Category(name=name, description=description)
            session.add(category)
            await session.commit()
            return category.id
    return _make


@pytest.fixture
def put_in_cart(database):
    async def _put(user_id: int, product_id: int, quantity: int, shop: str = "shop-a"):
        async with database.session() as session:
            await CartRepository.upsert_cart_line(session, user_id, product_id, shop, quantity)
            await session.commit()
    return _put


@pytest.fixture
def store(database):
    """Read-side helpers used to assert on persisted state."""

    class _Store:
        async def stock(self, product_id: int) -> int:
            async with database.session() as session:
                result = await session.execute(select(Product.stock).where(Product.id == product_id))
                return result.scalar_one()

        async def order_count(self) -> int:
            async with database.session() as session:
                result = await session.execute(select(func.count()).select_from(Order))
                return result.scalar_one()

        async def order_line_count(self) -> int:
            async with database.session() as session:
                result = await session.execute(select(func.count()).select_from(OrderLine))
                return result.scalar_one()

        async def orders(self):
            async with database.session() as session:
                result = await session.execute(select(Order).order_by(Order.id))
                return list(result.scalars().all())

        async def cart(self, user_id: int):
            async with database.session() as session:
                return await CartRepository.get_cart_lines(session, user_id)

    return _Store()
