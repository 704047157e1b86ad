from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.dependencies import get_current_account, require_admin
from services.auth_service.models import User
from shared.config.database import get_db
from shared.security import limiter
from shared.security.rate_limiter import CHECKOUT_RATE_LIMIT

from .schemas import (
    CheckoutRequest,
    CheckoutResponse,
    OrderResponse,
    OrderStatusUpdate,
    OrderStatusUpdateResponse,
)
from .service import CheckoutService, OrderService

router = APIRouter(tags=["Orders"])

admin_router = APIRouter(
    prefix="/admin/orders",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)


@router.post("/checkout", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(CHECKOUT_RATE_LIMIT)
async def checkout(
    request: Request,                          # slowapi reads the key from the request
    payload: CheckoutRequest,
    user: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await CheckoutService.place_order(db, user.id, payload)


@router.get("/orders", response_model=list[OrderResponse])
async def list_my_orders(
    user: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.list_orders(db, user_id=user.id)


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    user: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.get_order_for_user(db, order_id, user)


@admin_router.get("/", response_model=list[OrderResponse])
async def admin_list_orders(db: AsyncSession = Depends(get_db)):
    return await OrderService.list_orders(db)


@admin_router.patch("/{order_id}/status", response_model=OrderStatusUpdateResponse)
async def admin_update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.update_status(db, order_id, payload)
