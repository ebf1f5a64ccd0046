"""
User Entity

The internal record behind an authenticated principal.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utcnow

from .enums import UserStatus


class User(SQLModel, table=True):
    """
    User entity - one row per identity-provider subject.

    Business Rules:
    - Created on first successful authentication
    - Never deleted, only deactivated
    - Deactivated users cannot act on any workspace
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    external_auth_id: str = Field(unique=True, index=True, max_length=255)
    email: str = Field(index=True, max_length=255)

    status: UserStatus = Field(default=UserStatus.active)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
