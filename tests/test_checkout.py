from decimal import Decimal

import pytest
from structlog.testing import CapturingLogger
from prometheus_client import REGISTRY

from services.checkout_service import service as checkout_service_module
from services.product_service.repository import ProductRepository

USER_ID = 7


def checkout_body(cart_items, user_id=USER_ID, payment_method="pm_card_visa", action="buy"):
    return {
        "userId": user_id,
        "cartItems": cart_items,
        "paymentMethodId": payment_method,
        "action": action,
    }


async def test_checkout_places_order_and_clears_cart(client, gateway, make_product, put_in_cart, store, auth_headers):
    product_id = await make_product(price="100.00", stock=5)
    await put_in_cart(USER_ID, product_id, 3)

    response = await client.post(
        "/checkout",
        json=checkout_body([{"shop": "shop-a", "items": [{"product_id": product_id, "quantity": 3}]}]),
        headers=auth_headers(USER_ID),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Order placed successfully"

    orders = await store.orders()
    assert len(orders) == 1
    order = orders[0]
    assert body["orderId"] == order.id
    assert order.user_id == USER_ID
    assert order.total_price == Decimal("300.00")
    assert order.status.value == "pending"
    assert order.action == "buy"
    assert [(line.product_id, line.quantity, line.price) for line in order.lines] == [
        (product_id, 3, Decimal("100.00"))
    ]
    assert await store.stock(product_id) == 2
    assert await store.cart(USER_ID) == []
    assert gateway.calls == [{"amount": 30000, "currency": "mur", "payment_method": "pm_card_visa"}]


async def test_gateway_amount_is_total_in_minor_units_across_shops(client, gateway, make_product, store, auth_headers):
    pen = await make_product(price="19.99", stock=10, shop="stationery", name="Pen")
    tea = await make_product(price="5.50", stock=10, shop="grocer", name="Tea")
    mug = await make_product(price="12.25", stock=10, shop="grocer", name="Mug")

    response = await client.post(
        "/checkout",
        json=checkout_body([
            {"shop": "stationery", "items": [{"product_id": pen, "quantity": 2}]},
            {"shop": "grocer", "items": [
                {"product_id": tea, "quantity": 3},
                {"product_id": mug, "quantity": 1},
            ]},
        ]),
        headers=auth_headers(USER_ID),
    )

    assert response.status_code == 200
    # 2 * 19.99 + 3 * 5.50 + 1 * 12.25 = 68.73
    assert gateway.calls[0]["amount"] == 6873
    order = (await store.orders())[0]
    assert order.total_price == Decimal("68.73")
    assert sorted((line.product_id, line.quantity, line.price) for line in order.lines) == sorted([
        (pen, 2, Decimal("19.99")),
        (tea, 3, Decimal("5.50")),
        (mug, 1, Decimal("12.25")),
    ])
    assert [await store.stock(pid) for pid in (pen, tea, mug)] == [8, 7, 9]


async def test_insufficient_stock_is_rejected_without_side_effects(
    client, gateway, make_product, put_in_cart, store, auth_headers
):
    product_id = await make_product(stock=2)
    await put_in_cart(USER_ID, product_id, 2)

    response = await client.post(
        "/checkout",
        json=checkout_body([{"shop": "shop-a", "items": [{"product_id": product_id, "quantity": 5}]}]),
        headers=auth_headers(USER_ID),
    )

    assert response.status_code == 400
    assert response.json() == {"message": "Some items are out of stock"}
    assert await store.stock(product_id) == 2
    assert await store.order_count() == 0
    assert await store.order_line_count() == 0
    assert len(await store.cart(USER_ID)) == 1
    assert gateway.calls == []


async def test_unknown_product_is_out_of_stock(client, gateway, make_product, store, auth_headers):
    product_id = await make_product(stock=10)

    response = await client.post(
        "/checkout",
        json=checkout_body([{"shop": "shop-a", "items": [
            {"product_id": product_id, "quantity": 1},
            {"product_id": 9999, "quantity": 1},
        ]}]),
        headers=auth_headers(USER_ID),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Some items are out of stock"
    assert await store.stock(product_id) == 10
    assert gateway.calls == []


async def test_stock_check_counts_a_product_across_shop_groups(client, gateway, make_product, store, auth_headers):
    product_id = await make_product(stock=4)

    response = await client.post(
        "/checkout",
        json=checkout_body([
            {"shop": "shop-a", "items": [{"product_id": product_id, "quantity": 3}]},
            {"shop": "shop-b", "items": [{"product_id": product_id, "quantity": 2}]},
        ]),
        headers=auth_headers(USER_ID),
    )

    assert response.status_code == 400
    assert await store.stock(product_id) == 4
    assert gateway.calls == []


async def test_declined_payment_surfaces_gateway_details(
    client, gateway, make_product, put_in_cart, store, auth_headers
):
    product_id = await make_product(stock=5)
    await put_in_cart(USER_ID, product_id, 1)
    decline = {
        "id": "pi_declined",
        "status": "requires_payment_method",
        "last_payment_error": {"code": "card_declined", "decline_code": "generic_decline"},
    }
    gateway.decline_with = decline

    response = await client.post(
        "/checkout",
        json=checkout_body([{"shop": "shop-a", "items": [{"product_id": product_id, "quantity": 1}]}]),
        headers=auth_headers(USER_ID),
    )

    assert response.status_code == 400
    assert response.json() == {"message": "Payment failed", "details": decline}
    assert await store.order_count() == 0
    assert await store.stock(product_id) == 5
    assert len(await store.cart(USER_ID)) == 1
    assert gateway.refunds == []


async def test_gateway_timeout_is_distinct_from_rejection(client, gateway, make_product, store, auth_headers):
    product_id = await make_product(stock=5)
    gateway.timeout = True

    response = await client.post(
        "/checkout",
        json=checkout_body([{"shop": "shop-a", "items": [{"product_id": product_id, "quantity": 1}]}]),
        headers=auth_headers(USER_ID),
    )

    assert response.status_code == 504
    assert response.json() == {"message": "Payment gateway timeout"}
    assert await store.order_count() == 0
    assert await store.stock(product_id) == 5


async def test_stock_taken_during_payment_rolls_back_and_refunds(
    client, gateway, database, make_product, put_in_cart, store, auth_headers
):
    product_id = await make_product(stock=3)
    await put_in_cart(USER_ID, product_id, 3)

    async def concurrent_checkout():
        async with database.session() as session:
            assert await ProductRepository.decrement_stock(session, product_id, 2)
            await session.commit()

    gateway.on_charge = concurrent_checkout

    response = await client.post(
        "/checkout",
        json=checkout_body([{"shop": "shop-a", "items": [{"product_id": product_id, "quantity": 3}]}]),
        headers=auth_headers(USER_ID),
    )

    assert response.status_code == 400
    assert response.json() == {"message": "Some items are out of stock"}
    # Order and its line were rolled back together with the stock decrement
    assert await store.order_count() == 0
    assert await store.order_line_count() == 0
    assert await store.stock(product_id) == 1
    assert len(await store.cart(USER_ID)) == 1
    assert gateway.refunds == ["pi_test_1"]


async def test_unexpected_error_is_reported_generically(client, gateway, make_product, store, auth_headers):
    product_id = await make_product(stock=5)
    gateway.error = RuntimeError("connection reset by processor")

    response = await client.post(
        "/checkout",
        json=checkout_body([{"shop": "shop-a", "items": [{"product_id": product_id, "quantity": 1}]}]),
        headers=auth_headers(USER_ID),
    )

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}
    assert await store.order_count() == 0
    assert await store.stock(product_id) == 5


@pytest.mark.parametrize(
    "body",
    [
        {"cartItems": [{"shop": "s", "items": [{"product_id": 1, "quantity": 1}]}], "paymentMethodId": "pm", "action": "buy"},
        checkout_body([]),
        checkout_body([{"shop": "s", "items": []}]),
        checkout_body([{"shop": "", "items": [{"product_id": 1, "quantity": 1}]}]),
        checkout_body([{"shop": "s", "items": [{"product_id": 1, "quantity": 0}]}]),
        checkout_body([{"shop": "s", "items": [{"product_id": 1, "quantity": 1}]}], payment_method=""),
        checkout_body([{"shop": "s", "items": [{"product_id": 1, "quantity": 1}]}], action="   "),
        checkout_body("not-a-list"),
        ["not", "an", "object"],
    ],
)
async def test_invalid_payload_fails_before_store_and_gateway(client, gateway, store, auth_headers, body):
    response = await client.post("/checkout", json=body, headers=auth_headers(USER_ID))

    assert response.status_code == 400
    assert response.json() == {"message": "Invalid payload"}
    assert gateway.calls == []
    assert await store.order_count() == 0


async def test_malformed_json_is_invalid_payload(client, gateway, auth_headers):
    response = await client.post(
        "/checkout",
        content=b"{not json",
        headers={**auth_headers(USER_ID), "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"message": "Invalid payload"}


async def test_failed_checkout_retry_gives_same_failure(client, gateway, make_product, store, auth_headers):
    product_id = await make_product(stock=1)
    body = checkout_body([{"shop": "shop-a", "items": [{"product_id": product_id, "quantity": 2}]}])

    first = await client.post("/checkout", json=body, headers=auth_headers(USER_ID))
    second = await client.post("/checkout", json=body, headers=auth_headers(USER_ID))

    assert first.status_code == second.status_code == 400
    assert first.json() == second.json() == {"message": "Some items are out of stock"}
    assert await store.stock(product_id) == 1
    assert await store.order_count() == 0


async def test_checkout_requires_a_token(client):
    response = await client.post("/checkout", json=checkout_body([]))

    assert response.status_code == 401


async def test_checkout_for_another_user_is_forbidden(client, gateway, make_product, auth_headers):
    product_id = await make_product(stock=5)

    response = await client.post(
        "/checkout",
        json=checkout_body([{"shop": "shop-a", "items": [{"product_id": product_id, "quantity": 1}]}], user_id=8),
        headers=auth_headers(USER_ID),
    )

    assert response.status_code == 403
    assert gateway.calls == []


async def test_checkout_outcomes_are_counted(client, gateway, make_product, auth_headers):
    def count(status):
        return REGISTRY.get_sample_value("ecomm_checkout_total", {"status": status}) or 0

    product_id = await make_product(stock=1)
    success_before, stock_before = count("success"), count("out_of_stock")

    body = checkout_body([{"shop": "shop-a", "items": [{"product_id": product_id, "quantity": 1}]}])
    assert (await client.post("/checkout", json=body, headers=auth_headers(USER_ID))).status_code == 200
    assert (await client.post("/checkout", json=body, headers=auth_headers(USER_ID))).status_code == 400

    assert count("success") == success_before + 1
    assert count("out_of_stock") == stock_before + 1


@pytest.mark.parametrize("user_id", ["abc", None, 0, -3, 7.5])
async def test_malformed_user_id_is_invalid_payload_not_forbidden(client, gateway, make_product, auth_headers, user_id):
    product_id = await make_product(stock=5)

    response = await client.post(
        "/checkout",
        json=checkout_body([{"shop": "shop-a", "items": [{"product_id": product_id, "quantity": 1}]}], user_id=user_id),
        headers=auth_headers(USER_ID),
    )

    assert response.status_code == 400
    assert response.json() == {"message": "Invalid payload"}
    assert gateway.calls == []


async def test_placed_order_is_logged_with_its_payment_intent(
    client, gateway, make_product, auth_headers, monkeypatch
):
    captured = CapturingLogger()
    monkeypatch.setattr(checkout_service_module, "log", captured)
    product_id = await make_product(price="12.50", stock=5)

    response = await client.post(
        "/checkout",
        json=checkout_body([{"shop": "shop-a", "items": [{"product_id": product_id, "quantity": 2}]}]),
        headers=auth_headers(USER_ID),
    )

    assert response.status_code == 200
    placed = [call for call in captured.calls if call.args == ("order_placed",)]
    assert len(placed) == 1
    assert placed[0].kwargs["order_id"] == response.json()["orderId"]
    assert placed[0].kwargs["payment_intent_id"] == "pi_test_1"
    assert placed[0].kwargs["amount"] == 2500
