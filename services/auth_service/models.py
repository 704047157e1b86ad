import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, String

from shared.config.database import Base

ROLE_CUSTOMER = "customer"
ROLE_ADMIN = "admin"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=ROLE_CUSTOMER)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class RevokedToken(Base):
    __tablename__ = "revoked_tokens"

    jti = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    revoked_at = Column(DateTime(timezone=True), default=_utcnow)
