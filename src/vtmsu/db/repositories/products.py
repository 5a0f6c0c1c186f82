"""
vtmsu.db.repositories.products

Repository for the shop catalog (`Product` + `ProductImage`).

Responsibilities:
- Create products together with their images.
- List/fetch products with images eagerly loaded.
- Adjust stock, attach images, delete products (images cascade).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from vtmsu.db.models import Product, ProductImage
from vtmsu.db.repositories.common import apply_changes


class ProductRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, images: Iterable[str] = (), **fields: Any) -> Product:
        product = Product(images=[ProductImage(source=src) for src in images])
        apply_changes(product, fields)
        self._session.add(product)
        await self._session.flush()
        return await self._reload(product.id)

    async def get(self, product_id: int) -> Product | None:
        stmt = (
            select(Product)
            .where(Product.id == product_id)
            .options(selectinload(Product.images))
            .execution_options(populate_existing=True)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_products(self, *, in_stock_only: bool = False) -> list[Product]:
        stmt = select(Product).options(selectinload(Product.images)).order_by(Product.id)
        if in_stock_only:
            stmt = stmt.where(Product.stock > 0)
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(self, product_id: int, changes: dict[str, Any]) -> Product | None:
        product = await self._session.get(Product, product_id)
        if product is None:
            return None
        apply_changes(product, changes)
        await self._session.flush()
        return await self._reload(product_id)

    async def adjust_stock(self, product_id: int, delta: int) -> Product | None:
        product = await self._session.get(Product, product_id, with_for_update=True)
        if product is None:
            return None
        current = product.stock or 0
        if current + delta < 0:
            raise ValueError("stock cannot go negative")
        product.stock = current + delta
        await self._session.flush()
        return await self._reload(product_id)

    async def add_image(self, *, product_id: int, source: str) -> ProductImage:
        image = ProductImage(product_id=product_id, source=source)
        self._session.add(image)
        await self._session.flush()
        return image

    async def delete(self, product_id: int) -> bool:
        result = await self._session.execute(delete(Product).where(Product.id == product_id))
        return result.rowcount > 0

    async def _reload(self, product_id: int) -> Product:
        stmt = (
            select(Product)
            .where(Product.id == product_id)
            .options(selectinload(Product.images))
            .execution_options(populate_existing=True)
        )
        return (await self._session.execute(stmt)).scalar_one()


# --- Module Notes -----------------------------------------------------------
# `with_for_update` is a no-op on SQLite and a row lock on PostgreSQL.
