import uuid
from typing import Optional

import structlog
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.product_service.repository import ProductRepository
from shared.observability import ecomm_active_carts

from .cart import Cart
from .models import CartSession
from .repository import CartRepository
from .schemas import CartItemAdd, CartItemUpdate, CartResponse

logger = structlog.get_logger(__name__)


def _track_active(was_empty: bool, cart: Cart) -> None:
    """Keeps the active-carts gauge equal to the number of carts holding items."""
    if was_empty and not cart.is_empty:
        ecomm_active_carts.inc()
    elif not was_empty and cart.is_empty:
        ecomm_active_carts.dec()


class CartService:
    @staticmethod
    async def create_session(db: AsyncSession, user_id: Optional[str] = None) -> CartResponse:
        session = CartSession(
            session_id=str(uuid.uuid4()),
            user_id=user_id,
            is_active=True
        )
        session = await CartRepository.create_session(db, session)
        logger.info("cart_created", session_id=session.session_id, user_id=user_id)
        return CartResponse.build(session, Cart())

    @staticmethod
    async def get_session_or_404(db: AsyncSession, session_id: str) -> CartSession:
        session = await CartRepository.get_session(db, session_id)
        if not session:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cart not found")
        return session

    @staticmethod
    async def get_cart(db: AsyncSession, session_id: str) -> CartResponse:
        session = await CartService.get_session_or_404(db, session_id)
        cart = await CartRepository.load_cart(db, session_id)
        return CartResponse.build(session, cart)

    @staticmethod
    async def add_item(db: AsyncSession, session_id: str, item_data: CartItemAdd) -> CartResponse:
        session = await CartService.get_session_or_404(db, session_id)

        product = await ProductRepository.get_product_by_id(db, item_data.product_id)
        if not product:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        if product.stock_quantity == 0:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Product is out of stock")
        if item_data.quantity > product.stock_quantity:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Insufficient stock: only {product.stock_quantity} available",
            )

        cart = await CartRepository.load_cart(db, session_id)
        was_empty = cart.is_empty
        cart.add(
            product_id=product.id,
            name=product.name,
            price=product.price,
            quantity=item_data.quantity,
            image_url=product.image_url,
        )
        await CartRepository.save_cart(db, session_id, cart)
        _track_active(was_empty, cart)
        logger.info(
            "cart_item_added",
            session_id=session_id,
            product_id=product.id,
            quantity=item_data.quantity,
        )
        return CartResponse.build(session, cart)

    @staticmethod
    async def update_item(
        db: AsyncSession, session_id: str, product_id: str, item_data: CartItemUpdate
    ) -> CartResponse:
        session = await CartService.get_session_or_404(db, session_id)
        cart = await CartRepository.load_cart(db, session_id)
        was_empty = cart.is_empty
        cart.update_quantity(product_id, item_data.quantity)
        await CartRepository.save_cart(db, session_id, cart)
        _track_active(was_empty, cart)
        return CartResponse.build(session, cart)

    @staticmethod
    async def remove_item(db: AsyncSession, session_id: str, product_id: str) -> CartResponse:
        session = await CartService.get_session_or_404(db, session_id)
        cart = await CartRepository.load_cart(db, session_id)
        was_empty = cart.is_empty
        cart.remove(product_id)
        await CartRepository.save_cart(db, session_id, cart)
        _track_active(was_empty, cart)
        return CartResponse.build(session, cart)

    @staticmethod
    async def clear_cart(db: AsyncSession, session_id: str) -> CartResponse:
        session = await CartService.get_session_or_404(db, session_id)
        was_empty = (await CartRepository.load_cart(db, session_id)).is_empty
        await CartRepository.clear_cart(db, session_id)
        cart = Cart()
        _track_active(was_empty, cart)
        return CartResponse.build(session, cart)
