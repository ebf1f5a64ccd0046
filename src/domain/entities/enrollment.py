"""
Enrollment Entity

Links a user to a challenge.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import EnrollmentStatus


class Enrollment(SQLModel, table=True):
    __tablename__ = "enrollments"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False)
    challenge_id: UUID = Field(foreign_key="challenges.id", nullable=False, index=True)

    status: EnrollmentStatus = Field(default=EnrollmentStatus.enrolled)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_enrollment_user_challenge", "user_id", "challenge_id", unique=True),
    )
