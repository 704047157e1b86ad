from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import RevokedToken, User


class UserRepository:

    @staticmethod
    async def create(db: AsyncSession, user: User) -> User:
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalars().first()


class RevokedTokenRepository:

    @staticmethod
    async def revoke(db: AsyncSession, jti: str, user_id: str) -> None:
        if await RevokedTokenRepository.is_revoked(db, jti):
            return
        db.add(RevokedToken(jti=jti, user_id=user_id))
        await db.commit()

    @staticmethod
    async def is_revoked(db: AsyncSession, jti: str) -> bool:
        result = await db.execute(select(RevokedToken.jti).where(RevokedToken.jti == jti))
        return result.scalar_one_or_none() is not None
