"""
PointsBalance Entity

Per-user, per-workspace running balance.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class PointsBalance(SQLModel, table=True):
    """
    PointsBalance entity.

    Business Rules:
    - One row per (user_id, workspace_id), created lazily by an atomic upsert
    - total_points is lifetime earned and never reduced by spending
    - 0 <= available_points <= total_points
    - Mutated only through guarded UPDATE statements, never read-then-write
    """

    __tablename__ = "points_balances"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False)
    workspace_id: UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)

    total_points: int = Field(default=0)
    available_points: int = Field(default=0)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_points_balance_user_workspace", "user_id", "workspace_id", unique=True),
        CheckConstraint("available_points >= 0", name="ck_points_available_non_negative"),
        CheckConstraint(
            "available_points <= total_points", name="ck_points_available_within_total"
        ),
    )
