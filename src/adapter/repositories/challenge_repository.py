from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.challenge_repository import IChallengeRepository
from src.domain.entities import Challenge, Enrollment


class ChallengeRepository(IChallengeRepository):
    """Challenge and enrollment repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, challenge_id: UUID) -> Optional[Challenge]:
        """Get challenge by ID"""
        stmt = select(Challenge).where(Challenge.id == challenge_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_enrollment(
        self, user_id: UUID, challenge_id: UUID
    ) -> Optional[Enrollment]:
        """Get a user's enrollment in a challenge"""
        stmt = select(Enrollment).where(
            Enrollment.user_id == user_id, Enrollment.challenge_id == challenge_id
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def save_enrollment(self, enrollment: Enrollment) -> Enrollment:
        """Create or update an enrollment"""
        self.session.add(enrollment)
        await self.session.flush()
        await self.session.refresh(enrollment)
        return enrollment
