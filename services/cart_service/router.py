"""
Cart endpoints. Carts are guest-friendly: the opaque session id returned by
POST /cart/ is the only handle, so no bearer token is required here. A signed-in
shopper who sends one gets the cart stamped with their user id.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.dependencies import get_optional_account
from services.auth_service.models import User
from shared.config.database import get_db

from .schemas import CartItemAdd, CartItemUpdate, CartResponse
from .service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.post("/", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
async def create_cart(
    user: Optional[User] = Depends(get_optional_account),
    db: AsyncSession = Depends(get_db),
):
    return await CartService.create_session(db, user_id=user.id if user else None)


@router.get("/{session_id}", response_model=CartResponse)
async def get_cart(session_id: str, db: AsyncSession = Depends(get_db)):
    return await CartService.get_cart(db, session_id)


@router.post("/{session_id}/items", response_model=CartResponse)
async def add_item(
    session_id: str, item: CartItemAdd, db: AsyncSession = Depends(get_db)
):
    try:
        return await CartService.add_item(db, session_id, item)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/{session_id}/items/{product_id}", response_model=CartResponse)
async def update_item(
    session_id: str, product_id: str, item: CartItemUpdate, db: AsyncSession = Depends(get_db)
):
    return await CartService.update_item(db, session_id, product_id, item)


@router.delete("/{session_id}/items/{product_id}", response_model=CartResponse)
async def remove_item(
    session_id: str, product_id: str, db: AsyncSession = Depends(get_db)
):
    return await CartService.remove_item(db, session_id, product_id)


@router.delete("/{session_id}/items", response_model=CartResponse)
async def clear_cart(session_id: str, db: AsyncSession = Depends(get_db)):
    """Deletes all items in the session cart."""
    return await CartService.clear_cart(db, session_id)
