from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from .cart import Cart, CartLine
from .models import CartSession, CartItem


class CartRepository:
    @staticmethod
    async def create_session(db: AsyncSession, session: CartSession):
        db.add(session)
        await db.commit()
        await db.refresh(session)
        return session

    @staticmethod
    async def get_session(db: AsyncSession, session_id: str):
        result = await db.execute(select(CartSession).where(CartSession.session_id == session_id))
        return result.scalars().first()

    @staticmethod
    async def load_cart(db: AsyncSession, session_id: str) -> Cart:
        result = await db.execute(
            select(CartItem)
            .where(CartItem.session_id == session_id)
            .order_by(CartItem.id)
        )
        return Cart([
            CartLine(
                product_id=row.product_id,
                name=row.name,
                price=row.price,
                quantity=row.quantity,
                image_url=row.image_url,
            )
            for row in result.scalars().all()
        ])

    @staticmethod
    async def save_cart(db: AsyncSession, session_id: str, cart: Cart):
        """Replaces the stored lines with the cart's current lines, in order."""
        await db.execute(delete(CartItem).where(CartItem.session_id == session_id))
        for line in cart:
            db.add(CartItem(
                session_id=session_id,
                product_id=line.product_id,
                name=line.name,
                price=line.price,
                image_url=line.image_url,
                quantity=line.quantity,
            ))
        await db.commit()

    @staticmethod
    async def clear_cart(db: AsyncSession, session_id: str):
        """Deletes all items for the session and forces a commit."""
        stmt = delete(CartItem).where(CartItem.session_id == session_id)
        await db.execute(stmt)
        await db.commit()
