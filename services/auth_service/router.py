from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security.dependencies import get_token_payload

from .dependencies import get_current_account
from .models import User
from .schemas import TokenResponse, UserCreate, UserLogin, UserResponse
from .service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
)
async def register(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    return await AuthService.register(db, payload)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Authenticate and receive a JWT access token",
)
async def login(payload: UserLogin, db: AsyncSession = Depends(get_db)):
    return await AuthService.login(db, payload)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get the current authenticated user's profile",
)
async def get_me(user: User = Depends(get_current_account)):
    return user


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Sign out by revoking the presented access token",
)
async def logout(
    user: User = Depends(get_current_account),
    payload: dict = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db),
):
    await AuthService.logout(db, payload)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
