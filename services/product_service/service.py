from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Category, Product
from .repository import CategoryRepository, ProductRepository
from .schemas import CategoryCreate, ProductCreate


class ProductService:

    @staticmethod
    async def create_product(db: AsyncSession, data: ProductCreate) -> Product:
        if data.category_id is not None and not await CategoryRepository.get_category_by_id(db, data.category_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")

        product = Product(
            name=data.name,
            price=data.price,
            stock=data.stock,
            shop=data.shop,
            category_id=data.category_id,
        )
        product = await ProductRepository.create_product(db, product)
        await db.commit()
        return product

    @staticmethod
    async def list_products(db: AsyncSession, category_id: int | None = None, query: str | None = None):
        products = await ProductRepository.get_products(db, category_id)
        if not query:
            return products

        # Word match on the product name
        query_words = set(query.lower().split())
        return [p for p in products if query_words & set(p.name.lower().split())]

    @staticmethod
    async def get_product(db: AsyncSession, product_id: int) -> Product:
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        return product

    @staticmethod
    async def restock(db: AsyncSession, product_id: int, quantity: int) -> Product:
        if not await ProductRepository.increment_stock(db, product_id, quantity):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        await db.commit()
        return await ProductRepository.get_product_by_id(db, product_id)


class CategoryService:

    @staticmethod
    async def list_categories(db: AsyncSession):
        return await CategoryRepository.get_categories(db)

    @staticmethod
    async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
        name = data.name.strip()
        if await CategoryRepository.get_category_by_name(db, name):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Category already exists")
        category = await CategoryRepository.create_category(
            db, Category(name=name, description=data.description)
        )
        await db.commit()
        return category
