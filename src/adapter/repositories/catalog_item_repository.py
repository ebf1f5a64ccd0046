from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.catalog_item_repository import ICatalogItemRepository
from src.domain.entities import CatalogItem


class CatalogItemRepository(ICatalogItemRepository):
    """Catalog item repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, item_id: UUID) -> Optional[CatalogItem]:
        """Get catalog item by ID"""
        stmt = select(CatalogItem).where(CatalogItem.id == item_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_workspace_and_sku(
        self, workspace_id: UUID, sku: str
    ) -> Optional[CatalogItem]:
        """Get catalog item by workspace and SKU"""
        stmt = select(CatalogItem).where(
            CatalogItem.workspace_id == workspace_id, CatalogItem.sku == sku
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, item: CatalogItem) -> CatalogItem:
        """Create a new catalog item"""
        self.session.add(item)
        await self.session.flush()
        await self.session.refresh(item)
        return item
