from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security.dependencies import get_token_payload, oauth2_scheme

from .models import User
from .repository import RevokedTokenRepository, UserRepository


async def get_current_account(
    request: Request,
    payload: dict = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolves the bearer token to a live, non-revoked, active user."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    jti = payload.get("jti")
    if jti and await RevokedTokenRepository.is_revoked(db, jti):
        raise credentials_exception

    user = await UserRepository.get_by_id(db, payload["sub"])
    if user is None:
        raise credentials_exception
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")

    request.state.user_id = user.id
    return user


async def require_admin(user: User = Depends(get_current_account)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user


async def get_optional_account(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Guests get None; a token that is sent must still be valid."""
    if not token:
        return None
    payload = await get_token_payload(token)
    return await get_current_account(request, payload, db)
