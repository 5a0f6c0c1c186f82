"""
vtmsu.api.routers.shop

Online shop catalog.

Responsibilities:
- Public product listing/detail with images.
- Admin product management (create, patch, stock adjustments, images, delete).
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_204_NO_CONTENT, HTTP_404_NOT_FOUND, HTTP_409_CONFLICT

from vtmsu.api.deps import db_session
from vtmsu.auth.deps import require_roles
from vtmsu.auth.models import Role
from vtmsu.db.repositories.products import ProductRepo
from vtmsu.observability.logging import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/v1/shop/products", tags=["shop"])

_admin = [Depends(require_roles(Role.admin))]


class ProductFields(BaseModel):
    title: str | None = Field(default=None, max_length=256)
    subtitle: str | None = Field(default=None, max_length=256)
    description: str | None = None
    size: str | None = Field(default=None, max_length=256)
    price: float | None = Field(default=None, ge=0)
    color: str | None = Field(default=None, max_length=256)
    colors_available: str | None = Field(default=None, max_length=256)
    stock: int | None = Field(default=None, ge=0)


class ProductCreate(ProductFields):
    title: str = Field(min_length=1, max_length=256)
    images: list[str] = Field(default_factory=list)


class ImageIn(BaseModel):
    source: str = Field(min_length=1, max_length=255)


class StockDelta(BaseModel):
    delta: int


class ProductImageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    source: str | None


class ProductResponse(ProductFields):
    model_config = ConfigDict(from_attributes=True)

    id: int
    images: list[ProductImageResponse]
    created_at: datetime
    updated_at: datetime | None


@router.get("", response_model=list[ProductResponse])
async def list_products(
    in_stock: bool = False, session: AsyncSession = Depends(db_session)
) -> list[ProductResponse]:
    rows = await ProductRepo(session).list_products(in_stock_only=in_stock)
    return [ProductResponse.model_validate(p) for p in rows]


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, session: AsyncSession = Depends(db_session)) -> ProductResponse:
    product = await ProductRepo(session).get(product_id)
    if product is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Product not found")
    return ProductResponse.model_validate(product)


@router.post("", response_model=ProductResponse, status_code=201, dependencies=_admin)
async def create_product(
    body: ProductCreate, session: AsyncSession = Depends(db_session)
) -> ProductResponse:
    fields = body.model_dump(exclude={"images"})
    product = await ProductRepo(session).create(images=body.images, **fields)
    await session.commit()
    log.info("product_created", product_id=product.id)
    return ProductResponse.model_validate(product)


@router.patch("/{product_id}", response_model=ProductResponse, dependencies=_admin)
async def update_product(
    product_id: int, body: ProductFields, session: AsyncSession = Depends(db_session)
) -> ProductResponse:
    product = await ProductRepo(session).update(product_id, body.model_dump(exclude_unset=True))
    if product is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Product not found")
    await session.commit()
    return ProductResponse.model_validate(product)


@router.post("/{product_id}/stock", response_model=ProductResponse, dependencies=_admin)
async def adjust_stock(
    product_id: int, body: StockDelta, session: AsyncSession = Depends(db_session)
) -> ProductResponse:
    try:
        product = await ProductRepo(session).adjust_stock(product_id, body.delta)
    except ValueError as e:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail=str(e)) from e
    if product is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Product not found")
    await session.commit()
    return ProductResponse.model_validate(product)


@router.post(
    "/{product_id}/images", response_model=ProductResponse, status_code=201, dependencies=_admin
)
async def add_image(
    product_id: int, body: ImageIn, session: AsyncSession = Depends(db_session)
) -> ProductResponse:
    repo = ProductRepo(session)
    if await repo.get(product_id) is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Product not found")
    await repo.add_image(product_id=product_id, source=body.source)
    await session.commit()
    return ProductResponse.model_validate(await repo.get(product_id))


@router.delete("/{product_id}", status_code=HTTP_204_NO_CONTENT, dependencies=_admin)
async def delete_product(product_id: int, session: AsyncSession = Depends(db_session)) -> Response:
    if not await ProductRepo(session).delete(product_id):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Product not found")
    await session.commit()
    return Response(status_code=HTTP_204_NO_CONTENT)
