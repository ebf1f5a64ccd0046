from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
from uuid import UUID

from src.domain.entities import WebhookEvent


class IWebhookEventRepository(ABC):
    """Webhook event log repository interface - application layer"""

    @abstractmethod
    async def create(self, event: WebhookEvent) -> WebhookEvent:
        """Append a received event"""
        pass

    @abstractmethod
    async def get_by_id(self, event_id: UUID) -> Optional[WebhookEvent]:
        """Get a logged event by ID"""
        pass

    @abstractmethod
    async def update(self, event: WebhookEvent) -> WebhookEvent:
        """Update processing fields of a logged event"""
        pass

    @abstractmethod
    async def get_by_entity_ids(
        self, workspace_id: UUID, entity_ids: Sequence[str], limit: int = 100
    ) -> List[WebhookEvent]:
        """Logged events of a workspace carrying one of the entity ids, oldest first"""
        pass

    @abstractmethod
    async def get_unmatched(self, workspace_id: UUID, limit: int = 100) -> List[WebhookEvent]:
        """Logged events of a workspace that matched no issuance, newest first"""
        pass
