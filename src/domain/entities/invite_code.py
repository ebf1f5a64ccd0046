"""
InviteCode Entity

Capped, expiring token that grants workspace membership on redemption.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import WorkspaceRole


class InviteCode(SQLModel, table=True):
    """
    InviteCode entity.

    Business Rules:
    - code is stored upper-case; lookups are case-insensitive
    - used_count <= max_uses at all times
    - Unredeemable after expires_at or once used_count == max_uses
    - Never deleted (kept for audit)
    """

    __tablename__ = "invite_codes"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    code: str = Field(unique=True, index=True, max_length=32)

    workspace_id: UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)
    challenge_id: Optional[UUID] = Field(default=None, foreign_key="challenges.id")

    role: WorkspaceRole = Field(default=WorkspaceRole.participant)
    target_email: Optional[str] = Field(default=None, max_length=255)

    max_uses: int = Field(default=1)
    used_count: int = Field(default=0)

    created_by: Optional[UUID] = Field(default=None, foreign_key="users.id")

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        CheckConstraint("used_count <= max_uses", name="ck_invite_used_within_max"),
        CheckConstraint("max_uses >= 1", name="ck_invite_max_uses_positive"),
        Index("idx_invite_workspace", "workspace_id"),
    )

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def is_exhausted(self) -> bool:
        return self.used_count >= self.max_uses
