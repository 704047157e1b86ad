import structlog
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Product
from .repository import ProductRepository
from .schemas import ProductCreate

logger = structlog.get_logger(__name__)


class ProductService:

    @staticmethod
    async def create_product(db: AsyncSession, data: ProductCreate):
        product = Product(
            name=data.name,
            description=data.description,
            price=data.price,
            image_url=data.image_url,
            stock_quantity=data.stock_quantity,
            category=data.category,
        )
        product = await ProductRepository.create_product(db, product)
        logger.info("product_created", product_id=product.id, category=product.category)
        return product

    @staticmethod
    async def list_products(db: AsyncSession, category: str | None = None, query: str | None = None):
        products = await ProductRepository.get_all_products(db, category)

        if query:
            query_words = set(query.lower().split())
            products = [
                p for p in products
                if query_words & set(p.name.lower().split())
            ]

        return products

    @staticmethod
    async def get_product_or_404(db: AsyncSession, product_id: str) -> Product:
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        return product
