"""
AuditEvent Entity

Immutable activity log of domain events.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class AuditEvent(SQLModel, table=True):
    """
    AuditEvent entity - activity log consumed by notifications and dashboards.

    Business Rules:
    - Immutable (never updated or deleted)
    - workspace_id nullable for platform-level events
    - Not part of correctness; nothing reads it back to make decisions
    """

    __tablename__ = "audit_events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    workspace_id: Optional[UUID] = Field(default=None, index=True)
    user_id: Optional[UUID] = Field(default=None, index=True)
    actor_user_id: Optional[UUID] = Field(default=None)

    action: str = Field(max_length=100)  # e.g. "invite_redeemed", "reward_issued"
    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_audit_created_at", "created_at"),
        Index("idx_audit_workspace_action", "workspace_id", "action"),
    )
