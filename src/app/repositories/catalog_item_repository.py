from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import CatalogItem


class ICatalogItemRepository(ABC):
    """Catalog item repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, item_id: UUID) -> Optional[CatalogItem]:
        """Get catalog item by ID"""
        pass

    @abstractmethod
    async def get_by_workspace_and_sku(
        self, workspace_id: UUID, sku: str
    ) -> Optional[CatalogItem]:
        """Get catalog item by workspace and SKU"""
        pass

    @abstractmethod
    async def create(self, item: CatalogItem) -> CatalogItem:
        """Create a new catalog item"""
        pass
