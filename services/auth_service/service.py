import structlog
from fastapi import HTTPException, status
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.settings import get_settings
from shared.security.jwt_handler import create_access_token

from .models import ROLE_ADMIN, ROLE_CUSTOMER, User
from .repository import RevokedTokenRepository, UserRepository
from .schemas import TokenResponse, UserCreate, UserLogin

logger = structlog.get_logger(__name__)

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthService:

    @staticmethod
    def _hash_password(password: str) -> str:
        return _pwd_context.hash(password)

    @staticmethod
    def _verify_password(plain: str, hashed: str) -> bool:
        return _pwd_context.verify(plain, hashed)

    @staticmethod
    async def register(db: AsyncSession, data: UserCreate) -> User:
        email = data.email.lower()
        existing = await UserRepository.get_by_email(db, email)
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered",
            )
        role = ROLE_ADMIN if email in get_settings().admin_emails else ROLE_CUSTOMER
        user = User(
            email=email,
            hashed_password=AuthService._hash_password(data.password),
            role=role,
        )
        user = await UserRepository.create(db, user)
        logger.info("user_registered", user_id=user.id, role=role)
        return user

    @staticmethod
    async def login(db: AsyncSession, data: UserLogin) -> TokenResponse:
        user = await UserRepository.get_by_email(db, data.email.lower())
        if not user or not AuthService._verify_password(data.password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
                headers={"WWW-Authenticate": "Bearer"},
            )
        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is disabled",
            )
        token = create_access_token(data={"sub": str(user.id)})
        return TokenResponse(access_token=token)

    @staticmethod
    async def logout(db: AsyncSession, payload: dict) -> None:
        """Sign-out: the token's jti goes on the revocation list until it expires."""
        jti = payload.get("jti")
        if not jti:
            # Tokens minted before jti claims existed cannot be revoked individually.
            logger.warning("logout_without_jti", user_id=payload.get("sub"))
            return
        await RevokedTokenRepository.revoke(db, jti, payload["sub"])
        logger.info("user_signed_out", user_id=payload["sub"])
