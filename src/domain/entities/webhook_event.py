"""
WebhookEvent Entity

Append-only log of deliveries received from the reward provider.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class WebhookEvent(SQLModel, table=True):
    """
    WebhookEvent entity.

    Business Rules:
    - Every authenticated delivery is appended, duplicates included
    - payload is stored verbatim; entity_id is extracted for indexed correlation
    - Events matching no issuance stay in the log for audit queries
    """

    __tablename__ = "webhook_events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", nullable=False)

    provider_event_id: Optional[str] = Field(default=None, max_length=128)
    event_type: Optional[str] = Field(default=None, max_length=100)
    entity_id: Optional[str] = Field(default=None, max_length=128)
    payload: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    processed: bool = Field(default=False)
    matched_issuance_id: Optional[UUID] = Field(default=None)
    error: Optional[str] = Field(default=None, max_length=500)

    # Timestamps
    received_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    processed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_webhook_workspace_entity", "workspace_id", "entity_id"),
        Index("idx_webhook_workspace_received", "workspace_id", "received_at"),
    )
