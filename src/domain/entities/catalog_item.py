"""
CatalogItem Entity

A reward a participant can redeem points for.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class CatalogItem(SQLModel, table=True):
    __tablename__ = "catalog_items"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)

    sku: str = Field(max_length=128)
    name: str = Field(max_length=255)
    point_cost: int = Field(nullable=False)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_catalog_workspace_sku", "workspace_id", "sku", unique=True),
    )
