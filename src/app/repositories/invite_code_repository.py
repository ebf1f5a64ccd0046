from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import InviteCode, InviteRedemption


class IInviteCodeRepository(ABC):
    """Invite code repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, invite_id: UUID) -> Optional[InviteCode]:
        """Get invite code by ID, bypassing any cached copy"""
        pass

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[InviteCode]:
        """Get invite code by its normalized code"""
        pass

    @abstractmethod
    async def create(self, invite: InviteCode) -> InviteCode:
        """Create a new invite code"""
        pass

    @abstractmethod
    async def try_consume(self, invite_id: UUID, expected_used_count: int) -> bool:
        """
        Compare-and-swap one slot of the code.

        Increments used_count only if it still equals expected_used_count and
        is below max_uses. Returns False when another redemption got there first.
        """
        pass

    @abstractmethod
    async def get_redemption(
        self, invite_id: UUID, user_id: UUID
    ) -> Optional[InviteRedemption]:
        """Get the redemption record of a user for a code"""
        pass

    @abstractmethod
    async def create_redemption(self, redemption: InviteRedemption) -> InviteRedemption:
        """Record that a user consumed a slot"""
        pass
