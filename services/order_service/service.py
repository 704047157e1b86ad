import time

import structlog
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.models import User
from services.cart_service.repository import CartRepository
from shared.observability import (
    ecomm_active_carts,
    ecomm_checkout_duration_seconds,
    ecomm_checkout_total,
    ecomm_order_status_updates_total,
)

from .checkout_saga import build_checkout_saga
from .models import Order
from .repository import OrderRepository
from .schemas import (
    CheckoutRequest,
    CheckoutResponse,
    OrderResponse,
    OrderStatusUpdate,
    OrderStatusUpdateResponse,
)

logger = structlog.get_logger(__name__)

CHECKOUT_FAILED_DETAIL = "Failed to place order. Please try again."

# Application-layer lock against double-submitted checkouts for one cart
active_checkouts: set = set()


class CheckoutService:

    @staticmethod
    async def place_order(db: AsyncSession, user_id: str, data: CheckoutRequest) -> CheckoutResponse:
        session_id = data.session_id

        if session_id in active_checkouts:
            ecomm_checkout_total.labels(status="rejected").inc()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A checkout is already in progress for this cart.",
            )
        active_checkouts.add(session_id)

        try:
            session = await CartRepository.get_session(db, session_id)
            if not session:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cart not found")

            cart = await CartRepository.load_cart(db, session_id)
            if cart.is_empty:
                ecomm_checkout_total.labels(status="rejected").inc()
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No items to checkout")

            ctx = {
                "db": db,
                "session_id": session_id,
                "user_id": user_id,
                "cart": cart,
                "shipping_address": data.shipping.format(),
            }

            started = time.perf_counter()
            try:
                await build_checkout_saga().execute(ctx)
            except Exception:
                # Saga already rolled back internally; the cart rows are untouched
                ecomm_checkout_total.labels(status="failed").inc()
                logger.exception(
                    "checkout_failed",
                    session_id=session_id,
                    user_id=user_id,
                    failed_step=ctx.get("failed_step"),
                )
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=CHECKOUT_FAILED_DETAIL,
                )
            finally:
                ecomm_checkout_duration_seconds.observe(time.perf_counter() - started)

            ecomm_checkout_total.labels(status="success").inc()
            ecomm_active_carts.dec()
            logger.info(
                "order_placed",
                order_id=ctx["order_id"],
                user_id=user_id,
                total_amount=str(cart.total_price),
                lines=len(cart),
            )

            order = await OrderRepository.get_order(db, ctx["order_id"])
            return CheckoutResponse(order=OrderResponse.model_validate(order))
        finally:
            active_checkouts.discard(session_id)


class OrderService:

    @staticmethod
    async def list_orders(db: AsyncSession, user_id: str | None = None):
        return await OrderRepository.list_orders(db, user_id=user_id)

    @staticmethod
    async def get_order_or_404(db: AsyncSession, order_id: str) -> Order:
        order = await OrderRepository.get_order(db, order_id)
        if not order:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
        return order

    @staticmethod
    async def get_order_for_user(db: AsyncSession, order_id: str, user: User) -> Order:
        order = await OrderService.get_order_or_404(db, order_id)
        # Other shoppers' orders are reported as missing rather than forbidden
        if order.user_id != user.id and not user.is_admin:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
        return order

    @staticmethod
    async def update_status(
        db: AsyncSession, order_id: str, data: OrderStatusUpdate
    ) -> OrderStatusUpdateResponse:
        order = await OrderService.get_order_or_404(db, order_id)
        new_status = data.status.value

        if order.status == new_status:
            logger.info("order_status_unchanged", order_id=order_id, status=new_status)
            return OrderStatusUpdateResponse(order=OrderResponse.model_validate(order), updated=False)

        previous = order.status
        await OrderRepository.update_status(db, order, new_status)
        ecomm_order_status_updates_total.labels(status=new_status).inc()
        logger.info("order_status_updated", order_id=order_id, previous=previous, status=new_status)

        order = await OrderRepository.get_order(db, order_id)
        return OrderStatusUpdateResponse(order=OrderResponse.model_validate(order), updated=True)
