"""
PointsLedgerEntry Entity

Immutable record of every points movement.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import LedgerEntryKind


class PointsLedgerEntry(SQLModel, table=True):
    __tablename__ = "points_ledger_entries"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", nullable=False)
    user_id: UUID = Field(foreign_key="users.id", nullable=False)

    kind: LedgerEntryKind = Field(nullable=False)
    amount: int = Field(nullable=False)
    reason: str = Field(max_length=100)

    # e.g. the reward issuance a debit/refund belongs to
    reference_id: Optional[UUID] = Field(default=None, index=True)
    actor_user_id: Optional[UUID] = Field(default=None)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_points_ledger_user_workspace", "user_id", "workspace_id"),
    )
