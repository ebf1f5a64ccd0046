"""
Workspace Entity

An isolated tenant. All domain data is scoped to exactly one workspace.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utcnow


class Workspace(SQLModel, table=True):
    """
    Workspace entity - isolated tenant.

    Business Rules:
    - slug is unique and immutable
    - reward_provider_enabled gates every reward issuance
    - webhook_secret, when set, is required to verify provider deliveries
    """

    __tablename__ = "workspaces"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    slug: str = Field(unique=True, index=True, max_length=64)
    name: str = Field(max_length=255)

    # Feature flags / provider integration
    reward_provider_enabled: bool = Field(default=False)
    provider_program_id: Optional[str] = Field(default=None, max_length=128)
    webhook_secret: Optional[str] = Field(default=None, max_length=255)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
