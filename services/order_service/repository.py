from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from sqlalchemy.orm import selectinload
from .models import Order, OrderItem


def _with_items(stmt):
    # Async sessions cannot lazy-load; items and their product names are loaded up front.
    return stmt.options(
        selectinload(Order.items).selectinload(OrderItem.product)
    ).execution_options(populate_existing=True)


class OrderRepository:
    @staticmethod
    async def create_order(db: AsyncSession, order: Order):
        db.add(order)
        await db.commit()
        await db.refresh(order)
        return order

    @staticmethod
    async def create_order_items(db: AsyncSession, items: list[OrderItem]):
        db.add_all(items)
        await db.commit()
        return items

    @staticmethod
    async def get_order(db: AsyncSession, order_id: str) -> Optional[Order]:
        result = await db.execute(_with_items(select(Order).where(Order.id == order_id)))
        return result.scalars().first()

    @staticmethod
    async def list_orders(db: AsyncSession, user_id: Optional[str] = None):
        stmt = select(Order).order_by(Order.created_at.desc())
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        result = await db.execute(_with_items(stmt))
        return result.scalars().all()

    @staticmethod
    async def update_status(db: AsyncSession, order: Order, status: str):
        order.status = status
        await db.commit()
        return order

    @staticmethod
    async def delete_order_items(db: AsyncSession, order_id: str):
        await db.execute(delete(OrderItem).where(OrderItem.order_id == order_id))
        await db.commit()

    @staticmethod
    async def delete_order(db: AsyncSession, order_id: str):
        # Items first: SQLite does not enforce ON DELETE CASCADE without a pragma.
        await db.execute(delete(OrderItem).where(OrderItem.order_id == order_id))
        await db.execute(delete(Order).where(Order.id == order_id))
        await db.commit()
