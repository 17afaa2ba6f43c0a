"""Product service — the storefront carousel.

Plain CRUD. Reads are public; the routes that write go through
require_admin. Product codes are unique, enforced by the database.
"""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.db.models import Product
from rentdesk.errors import DuplicateIdentity, NotFound
from rentdesk.schemas.product import ProductCreate, ProductUpdate
from rentdesk.services.upload_service import UploadContext, UploadService

logger = structlog.get_logger()


class ProductService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_products(self, include_inactive: bool = False) -> list[Product]:
        q = select(Product).order_by(Product.created_at)
        if not include_inactive:
            q = q.where(Product.is_active.is_(True))
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def get_product(self, product_id: uuid.UUID) -> Product:
        product = await self.db.get(Product, product_id)
        if not product:
            raise NotFound("Product not found")
        return product

    async def create_product(self, body: ProductCreate) -> Product:
        product = Product(**body.model_dump())
        self.db.add(product)
        await self._commit()
        logger.info("product.created", product_id=str(product.id), code=product.code)
        return product

    async def update_product(
        self, product_id: uuid.UUID, body: ProductUpdate
    ) -> Product:
        product = await self.get_product(product_id)
        for field, value in body.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(product, field, value)
        await self._commit()
        return product

    async def delete_product(self, product_id: uuid.UUID) -> None:
        product = await self.get_product(product_id)
        await self.db.delete(product)
        await self.db.commit()
        logger.info("product.deleted", product_id=str(product_id))

    async def upload_image(
        self,
        product_id: uuid.UUID,
        uploads: UploadService,
        filename: str,
        content_type: str | None,
        data: bytes,
    ) -> Product:
        product = await self.get_product(product_id)
        stored = uploads.store(
            filename, content_type, data, UploadContext(product_id=product.id)
        )
        product.image_url = stored.url
        await self._commit()
        return product

    async def _commit(self) -> None:
        try:
            await self.db.flush()
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateIdentity("code", "Product code already exists")
