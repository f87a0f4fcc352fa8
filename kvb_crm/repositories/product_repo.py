"""
Product repository.
"""
from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.models.product import Product
from kvb_crm.repositories.base import BaseRepository


class ProductRepository(BaseRepository[Product]):
    def __init__(self, session: AsyncSession):
        super().__init__(Product, session)

    async def bulk_create(self, products_data: List[dict]) -> List[Product]:
        """Create multiple products at once."""
        products = [Product(**data) for data in products_data]
        self.session.add_all(products)
        await self.session.commit()
        for product in products:
            await self.session.refresh(product)
        return products

    async def list_all(self) -> List[Product]:
        result = await self.session.exec(select(Product).order_by(Product.created_at.desc()))
        return result.all()
