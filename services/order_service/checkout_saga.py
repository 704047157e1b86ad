"""
Checkout as a saga: the order header, its item rows and the cart clear are
three separate commits, each paired with a compensation so a failure part
way through never leaves an order without items behind.

ctx keys: db, session_id, user_id, cart, shipping_address.
Steps add: order_id.
"""
from services.cart_service.repository import CartRepository

from .models import Order, OrderItem, OrderStatus
from .repository import OrderRepository
from .saga import SagaOrchestrator

# --- ACTIONS ---


async def create_order(ctx: dict):
    db, cart = ctx["db"], ctx["cart"]
    order = Order(
        user_id=ctx["user_id"],
        total_amount=cart.total_price,
        shipping_address=ctx["shipping_address"],
        status=OrderStatus.PENDING.value,
    )
    order = await OrderRepository.create_order(db, order)
    ctx["order_id"] = order.id


async def create_order_items(ctx: dict):
    db, order_id = ctx["db"], ctx["order_id"]
    items = [
        OrderItem(
            order_id=order_id,
            product_id=line.product_id,
            quantity=line.quantity,
            price=line.price,
        )
        for line in ctx["cart"]
    ]
    await OrderRepository.create_order_items(db, items)


async def clear_cart(ctx: dict):
    await CartRepository.clear_cart(ctx["db"], ctx["session_id"])


# --- COMPENSATIONS (Rollbacks) ---


async def rollback_order(ctx: dict):
    db, order_id = ctx["db"], ctx.get("order_id")
    if order_id:
        # The session may still hold the failed flush
        await db.rollback()
        await OrderRepository.delete_order(db, order_id)


async def rollback_order_items(ctx: dict):
    db, order_id = ctx["db"], ctx.get("order_id")
    if order_id:
        await db.rollback()
        await OrderRepository.delete_order_items(db, order_id)


# --- BUILDER FACTORY ---


def build_checkout_saga() -> SagaOrchestrator:
    saga = SagaOrchestrator()
    saga.add_step("create_order", create_order, rollback_order)
    saga.add_step("create_order_items", create_order_items, rollback_order_items)
    saga.add_step("clear_cart", clear_cart, None)  # Last step; nothing after it can fail
    return saga
