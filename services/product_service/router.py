from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.dependencies import require_admin
from shared.config.database import get_db
from .schemas import ProductCreate, ProductResponse
from .service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

# Every admin route requires an admin account
admin_router = APIRouter(
    prefix="/admin/products",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)


@router.get("/", response_model=list[ProductResponse])
async def list_products(
    category: str | None = Query(default=None),
    query: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.list_products(db, category=category, query=query)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.get_product_or_404(db, product_id)


@admin_router.get("/", response_model=list[ProductResponse])
async def admin_list_products(db: AsyncSession = Depends(get_db)):
    return await ProductService.list_products(db)


@admin_router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def admin_create_product(
    product: ProductCreate,
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.create_product(db, product)
