from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import Challenge, Enrollment


class IChallengeRepository(ABC):
    """Challenge and enrollment repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, challenge_id: UUID) -> Optional[Challenge]:
        """Get challenge by ID"""
        pass

    @abstractmethod
    async def get_enrollment(
        self, user_id: UUID, challenge_id: UUID
    ) -> Optional[Enrollment]:
        """Get a user's enrollment in a challenge"""
        pass

    @abstractmethod
    async def save_enrollment(self, enrollment: Enrollment) -> Enrollment:
        """Create or update an enrollment"""
        pass
