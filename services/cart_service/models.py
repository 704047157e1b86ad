from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String
from shared.config.database import Base


class CartSession(Base):
    __tablename__ = "cart_sessions"

    session_id = Column(String(36), primary_key=True, index=True)  # UUID string
    user_id = Column(String(36), nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class CartItem(Base):
    __tablename__ = "cart_items"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(
        String(36),
        ForeignKey("cart_sessions.session_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = Column(String(36), nullable=False)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)  # snapshot at add time
    image_url = Column(String(1024), nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
