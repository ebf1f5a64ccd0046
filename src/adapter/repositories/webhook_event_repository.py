from typing import List, Optional, Sequence
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.webhook_event_repository import IWebhookEventRepository
from src.domain.entities import WebhookEvent


class WebhookEventRepository(IWebhookEventRepository):
    """Webhook event log repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, event: WebhookEvent) -> WebhookEvent:
        """Append a received event"""
        self.session.add(event)
        await self.session.flush()
        await self.session.refresh(event)
        return event

    async def get_by_id(self, event_id: UUID) -> Optional[WebhookEvent]:
        """Get a logged event by ID"""
        stmt = (
            select(WebhookEvent)
            .where(WebhookEvent.id == event_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def update(self, event: WebhookEvent) -> WebhookEvent:
        """Update processing fields of a logged event"""
        self.session.add(event)
        await self.session.flush()
        return event

    async def get_by_entity_ids(
        self, workspace_id: UUID, entity_ids: Sequence[str], limit: int = 100
    ) -> List[WebhookEvent]:
        """Logged events of a workspace carrying one of the entity ids, oldest first"""
        ids = [entity_id for entity_id in entity_ids if entity_id]
        if not ids:
            return []
        stmt = (
            select(WebhookEvent)
            .where(
                WebhookEvent.workspace_id == workspace_id,
                WebhookEvent.entity_id.in_(ids),
            )
            .order_by(WebhookEvent.received_at)
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def get_unmatched(self, workspace_id: UUID, limit: int = 100) -> List[WebhookEvent]:
        """Logged events of a workspace that matched no issuance, newest first"""
        stmt = (
            select(WebhookEvent)
            .where(
                WebhookEvent.workspace_id == workspace_id,
                WebhookEvent.matched_issuance_id.is_(None),
            )
            .order_by(WebhookEvent.received_at.desc())
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all())
