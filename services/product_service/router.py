from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security.dependencies import verify_internal_api_key
from .schemas import CategoryCreate, CategoryResponse, ProductCreate, ProductResponse, StockUpdate
from .service import CategoryService, ProductService

router = APIRouter(prefix="/products", tags=["Products"])
# Catalogue writes are service-to-service only
admin_router = APIRouter(prefix="/products", tags=["Products"], dependencies=[Depends(verify_internal_api_key)])

category_router = APIRouter(prefix="/categories", tags=["Categories"])
category_admin_router = APIRouter(
    prefix="/categories", tags=["Categories"], dependencies=[Depends(verify_internal_api_key)]
)


@router.get("/", response_model=list[ProductResponse])
async def list_products(
    category_id: int | None = Query(default=None),
    query: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.list_products(db, category_id=category_id, query=query)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    return await ProductService.get_product(db, product_id)


@admin_router.post("/", response_model=ProductResponse, status_code=201)
async def create_product(product: ProductCreate, db: AsyncSession = Depends(get_db)):
    return await ProductService.create_product(db, product)


@admin_router.post("/{product_id}/restock", response_model=ProductResponse)
async def restock(product_id: int, payload: StockUpdate, db: AsyncSession = Depends(get_db)):
    return await ProductService.restock(db, product_id, payload.quantity)


@category_router.get("/", response_model=list[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    return await CategoryService.list_categories(db)


@category_admin_router.post("/", response_model=CategoryResponse, status_code=201)
async def create_category(category: CategoryCreate, db: AsyncSession = Depends(get_db)):
    return await CategoryService.create_category(db, category)
