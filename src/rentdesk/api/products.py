"""Product API — carousel slides for the storefront.

Learn: Reads are open so the home page can render without a login;
writes and the unfiltered listing require an admin token (require_admin
runs the full gate first, then checks the account role).
- GET /products → active slides
- GET /products/all → every slide (admin)
- GET /products/:id → one slide
- POST /products, PUT /products/:id, DELETE /products/:id (admin)
- POST /products/:id/upload → slide image (admin)
"""

import uuid

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.api.users import read_upload
from rentdesk.auth.dependencies import require_admin
from rentdesk.db.engine import get_db
from rentdesk.schemas.envelope import Envelope
from rentdesk.schemas.product import (
    ProductCreate,
    ProductImage,
    ProductRead,
    ProductUpdate,
)
from rentdesk.services.product_service import ProductService
from rentdesk.services.upload_service import UploadService, get_upload_service

router = APIRouter(prefix="/products")

_admin = [Depends(require_admin)]


def _svc(db: AsyncSession = Depends(get_db)) -> ProductService:
    return ProductService(db)


@router.get("", response_model=Envelope[list[ProductRead]])
async def list_active(svc: ProductService = Depends(_svc)):
    products = await svc.list_products()
    return Envelope[list[ProductRead]](
        result=[ProductRead.model_validate(p) for p in products]
    )


@router.get("/all", response_model=Envelope[list[ProductRead]], dependencies=_admin)
async def list_all(svc: ProductService = Depends(_svc)):
    products = await svc.list_products(include_inactive=True)
    return Envelope[list[ProductRead]](
        result=[ProductRead.model_validate(p) for p in products]
    )


@router.get("/{product_id}", response_model=Envelope[ProductRead])
async def get_product(product_id: uuid.UUID, svc: ProductService = Depends(_svc)):
    product = await svc.get_product(product_id)
    return Envelope[ProductRead](result=ProductRead.model_validate(product))


@router.post(
    "", response_model=Envelope[ProductRead], dependencies=_admin
)
async def create_product(body: ProductCreate, svc: ProductService = Depends(_svc)):
    product = await svc.create_product(body)
    return Envelope[ProductRead](
        message="Product created", result=ProductRead.model_validate(product)
    )


@router.put("/{product_id}", response_model=Envelope[ProductRead], dependencies=_admin)
async def update_product(
    product_id: uuid.UUID,
    body: ProductUpdate,
    svc: ProductService = Depends(_svc),
):
    product = await svc.update_product(product_id, body)
    return Envelope[ProductRead](
        message="Product updated", result=ProductRead.model_validate(product)
    )


@router.delete("/{product_id}", response_model=Envelope[dict], dependencies=_admin)
async def delete_product(product_id: uuid.UUID, svc: ProductService = Depends(_svc)):
    await svc.delete_product(product_id)
    return Envelope[dict](message="Product deleted", result={})


@router.post(
    "/{product_id}/upload",
    response_model=Envelope[ProductImage],
    dependencies=_admin,
)
async def upload_image(
    product_id: uuid.UUID,
    image: UploadFile | None = File(None),
    svc: ProductService = Depends(_svc),
    uploads: UploadService = Depends(get_upload_service),
):
    filename, content_type, data = await read_upload(image, uploads.max_bytes)
    product = await svc.upload_image(product_id, uploads, filename, content_type, data)
    return Envelope[ProductImage](
        message="Product image uploaded",
        result=ProductImage(image_url=product.image_url),
    )
