"""
Membership Entity

Binds a User to a Workspace with a role.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import text
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import MembershipStatus, WorkspaceRole


class Membership(SQLModel, table=True):
    """
    Membership entity - links User to Workspace with one role.

    Business Rules:
    - (user_id, workspace_id) is unique
    - A user may hold memberships in many workspaces, each with its own role
    - At most one membership per user is primary
    - Offboarding sets status=removed; rows are never cascaded away
    """

    __tablename__ = "memberships"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)

    role: WorkspaceRole = Field(nullable=False)
    status: MembershipStatus = Field(default=MembershipStatus.active)
    is_primary: bool = Field(default=False)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_membership_user_workspace", "user_id", "workspace_id", unique=True),
        Index(
            "idx_membership_primary_user",
            "user_id",
            unique=True,
            sqlite_where=text("is_primary = 1"),
            postgresql_where=text("is_primary"),
        ),
        Index("idx_membership_status", "status"),
    )
