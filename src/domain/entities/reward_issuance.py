"""
RewardIssuance Entity

One attempt to grant a reward to a user, tracked through the reward provider.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import ProviderStatus, RewardStatus


class RewardIssuance(SQLModel, table=True):
    """
    RewardIssuance entity.

    Business Rules:
    - Created PENDING after the points debit succeeds, in the same transaction
    - status changes only through conditional updates guarded on the current status
    - Provider ids are assigned once the provider accepts the order
    - Never deleted (financial audit trail)
    """

    __tablename__ = "reward_issuances"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", nullable=False)
    catalog_item_id: Optional[UUID] = Field(default=None, foreign_key="catalog_items.id")

    sku: Optional[str] = Field(default=None, max_length=128)
    amount: int = Field(nullable=False)

    status: RewardStatus = Field(default=RewardStatus.pending)

    # Provider correlation
    provider_transaction_id: Optional[str] = Field(default=None, max_length=128)
    provider_adjustment_id: Optional[str] = Field(default=None, max_length=128)
    provider_status: Optional[ProviderStatus] = Field(default=None)
    webhook_received: bool = Field(default=False)
    error_message: Optional[str] = Field(default=None, max_length=500)
    reconcile_attempts: int = Field(default=0)

    # Shipping confirmation
    shipping_confirmed: bool = Field(default=False)
    shipping_confirmed_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Timestamps
    issued_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_issuance_workspace_transaction", "workspace_id", "provider_transaction_id"),
        Index("idx_issuance_workspace_adjustment", "workspace_id", "provider_adjustment_id"),
        Index("idx_issuance_status_created", "status", "created_at"),
    )
