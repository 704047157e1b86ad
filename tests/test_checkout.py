from decimal import Decimal

from prometheus_client import REGISTRY
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from conftest import SHIPPING
from services.order_service import service as order_service
from services.order_service.models import Order, OrderItem
from services.order_service.repository import OrderRepository


async def _fill_cart(client, cart_id, make_product):
    lamp = await make_product(name="Desk Lamp", price=Decimal("10.00"), stock_quantity=5)
    mug = await make_product(name="Mug", price=Decimal("4.25"), stock_quantity=5)
    await client.post(f"/cart/{cart_id}/items", json={"product_id": lamp.id, "quantity": 2})
    await client.post(f"/cart/{cart_id}/items", json={"product_id": mug.id, "quantity": 1})
    return lamp, mug


async def _count(session_factory, model):
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


async def test_checkout_creates_pending_order_and_clears_cart(client, cart_id, make_product, shopper_headers):
    lamp, mug = await _fill_cart(client, cart_id, make_product)

    resp = await client.post(
        "/checkout",
        json={"session_id": cart_id, "shipping": SHIPPING},
        headers=shopper_headers,
    )

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["redirect_to"] == "/"
    order = body["order"]
    assert order["status"] == "pending"
    assert Decimal(order["total_amount"]) == Decimal("24.25")
    assert order["shipping_address"] == "Ada Lovelace, 555-0100, 12 Analytical Way, London, LDN N1 9GU"
    items = {item["product_id"]: item for item in order["items"]}
    assert items[lamp.id]["quantity"] == 2
    assert Decimal(items[lamp.id]["price"]) == Decimal("10.00")
    assert items[mug.id]["product_name"] == "Mug"

    cart = (await client.get(f"/cart/{cart_id}")).json()
    assert cart["items"] == []

    me = (await client.get("/auth/me", headers=shopper_headers)).json()
    assert order["user_id"] == me["id"]


async def test_checkout_with_empty_cart_is_refused(client, cart_id, shopper_headers, session_factory):
    resp = await client.post(
        "/checkout",
        json={"session_id": cart_id, "shipping": SHIPPING},
        headers=shopper_headers,
    )

    assert resp.status_code == 400
    assert resp.json()["detail"] == "No items to checkout"
    assert await _count(session_factory, Order) == 0


async def test_second_submit_cannot_create_second_order(client, cart_id, make_product, shopper_headers, session_factory):
    await _fill_cart(client, cart_id, make_product)
    payload = {"session_id": cart_id, "shipping": SHIPPING}

    first = await client.post("/checkout", json=payload, headers=shopper_headers)
    second = await client.post("/checkout", json=payload, headers=shopper_headers)

    assert first.status_code == 201
    assert second.status_code == 400
    assert await _count(session_factory, Order) == 1


async def test_checkout_in_progress_is_rejected(client, cart_id, make_product, shopper_headers):
    await _fill_cart(client, cart_id, make_product)
    order_service.active_checkouts.add(cart_id)
    try:
        resp = await client.post(
            "/checkout",
            json={"session_id": cart_id, "shipping": SHIPPING},
            headers=shopper_headers,
        )
    finally:
        order_service.active_checkouts.discard(cart_id)

    assert resp.status_code == 409
    assert len((await client.get(f"/cart/{cart_id}")).json()["items"]) == 2


async def test_missing_or_blank_shipping_fields_are_rejected(client, cart_id, make_product, shopper_headers):
    await _fill_cart(client, cart_id, make_product)

    missing = {k: v for k, v in SHIPPING.items() if k != "city"}
    resp = await client.post("/checkout", json={"session_id": cart_id, "shipping": missing}, headers=shopper_headers)
    assert resp.status_code == 422

    blank = {**SHIPPING, "zip_code": "   "}
    resp = await client.post("/checkout", json={"session_id": cart_id, "shipping": blank}, headers=shopper_headers)
    assert resp.status_code == 422

    assert len((await client.get(f"/cart/{cart_id}")).json()["items"]) == 2


async def test_checkout_requires_sign_in(client, cart_id, make_product):
    await _fill_cart(client, cart_id, make_product)

    resp = await client.post("/checkout", json={"session_id": cart_id, "shipping": SHIPPING})

    assert resp.status_code == 401


async def test_checkout_unknown_cart(client, shopper_headers):
    resp = await client.post(
        "/checkout",
        json={"session_id": "missing", "shipping": SHIPPING},
        headers=shopper_headers,
    )

    assert resp.status_code == 404


async def test_item_insert_failure_rolls_back_order_and_keeps_cart(
    client, cart_id, make_product, shopper_headers, session_factory, monkeypatch
):
    await _fill_cart(client, cart_id, make_product)

    async def broken_insert(db, items):
        raise OperationalError("INSERT INTO order_items", {}, Exception("connection reset"))

    monkeypatch.setattr(OrderRepository, "create_order_items", broken_insert)

    resp = await client.post(
        "/checkout",
        json={"session_id": cart_id, "shipping": SHIPPING},
        headers=shopper_headers,
    )

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to place order. Please try again."
    assert await _count(session_factory, Order) == 0
    assert await _count(session_factory, OrderItem) == 0

    cart = (await client.get(f"/cart/{cart_id}")).json()
    assert cart["total_items"] == 3


async def test_checkout_retires_cart_from_active_gauge(client, cart_id, make_product, shopper_headers):
    await _fill_cart(client, cart_id, make_product)
    before = REGISTRY.get_sample_value("ecomm_active_carts")

    resp = await client.post(
        "/checkout",
        json={"session_id": cart_id, "shipping": SHIPPING},
        headers=shopper_headers,
    )

    assert resp.status_code == 201
    assert REGISTRY.get_sample_value("ecomm_active_carts") == before - 1
