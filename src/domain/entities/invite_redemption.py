"""
InviteRedemption Entity

Which user consumed a slot of which invite code.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class InviteRedemption(SQLModel, table=True):
    """One row per (invite, user); a user consumes at most one slot per code"""

    __tablename__ = "invite_redemptions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    invite_id: UUID = Field(foreign_key="invite_codes.id", nullable=False)
    user_id: UUID = Field(foreign_key="users.id", nullable=False)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_invite_redemption_invite_user", "invite_id", "user_id", unique=True),
    )
