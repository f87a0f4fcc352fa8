"""
Product service - catalogue management and the public projection.
"""
import json
import logging
import uuid
from typing import Optional, List, Union

from fastapi import UploadFile
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.config import settings
from kvb_crm.core.exceptions import raise_not_found
from kvb_crm.models.product import Product
from kvb_crm.repositories.product_repo import ProductRepository
from kvb_crm.services.upload_service import UploadService

logger = logging.getLogger(__name__)

PRODUCT_FOLDER = "products"


def parse_specifications(value: Union[str, dict, None]) -> dict:
    """Specifications arrive as a JSON string from multipart forms; bad JSON becomes {}."""
    if value is None or value == "":
        return {}
    if isinstance(value, dict):
        return value
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


def public_view(product: Product) -> dict:
    """Anonymous view: name, description and the first image only."""
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "image": product.images[0] if product.images else settings.DEFAULT_PRODUCT_IMAGE,
    }


class ProductService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = ProductRepository(session)

    async def get_product(self, product_id: uuid.UUID) -> Product:
        product = await self.repo.get(product_id)
        if not product:
            raise_not_found("Product")
        return product

    async def list_products(self) -> List[Product]:
        return await self.repo.list_all()

    async def list_public(self) -> List[dict]:
        return [public_view(product) for product in await self.repo.list_all()]

    async def get_public(self, product_id: uuid.UUID) -> dict:
        return public_view(await self.get_product(product_id))

    async def _upload_image(self, image: Optional[UploadFile]) -> List[str]:
        if image is None or not image.filename:
            return []
        stored = await UploadService().upload_one(image, PRODUCT_FOLDER)
        return [stored["url"]]

    async def create_product(self, data: dict, image: Optional[UploadFile] = None) -> Product:
        """Create a product; an uploaded image becomes its only image."""
        data = dict(data)
        data["specifications"] = parse_specifications(data.get("specifications"))
        data["images"] = await self._upload_image(image)

        product = await self.repo.create(data)
        logger.info(f"Product created: {product.name} ({product.id})")
        return product

    async def update_product(
        self,
        product_id: uuid.UUID,
        data: dict,
        image: Optional[UploadFile] = None
    ) -> Product:
        """Update fields that were sent; a new image replaces the image list."""
        product = await self.get_product(product_id)

        for field, value in data.items():
            if value is None:
                continue
            if field == "specifications":
                value = parse_specifications(value)
            setattr(product, field, value)

        images = await self._upload_image(image)
        if images:
            product.images = images

        return await self.repo.save(product)

    async def delete_product(self, product_id: uuid.UUID) -> None:
        deleted = await self.repo.delete(product_id)
        if not deleted:
            raise_not_found("Product")
