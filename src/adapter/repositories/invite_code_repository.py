from typing import Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.invite_code_repository import IInviteCodeRepository
from src.domain.entities import InviteCode, InviteRedemption


class InviteCodeRepository(IInviteCodeRepository):
    """Invite code repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, invite_id: UUID) -> Optional[InviteCode]:
        """Get invite code by ID, bypassing any cached copy"""
        stmt = (
            select(InviteCode)
            .where(InviteCode.id == invite_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_code(self, code: str) -> Optional[InviteCode]:
        """Get invite code by its normalized code"""
        stmt = (
            select(InviteCode)
            .where(InviteCode.code == code)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, invite: InviteCode) -> InviteCode:
        """Create a new invite code"""
        self.session.add(invite)
        await self.session.flush()
        await self.session.refresh(invite)
        return invite

    async def try_consume(self, invite_id: UUID, expected_used_count: int) -> bool:
        """Compare-and-swap one slot of the code"""
        stmt = (
            update(InviteCode)
            .where(
                InviteCode.id == invite_id,
                InviteCode.used_count == expected_used_count,
                InviteCode.used_count < InviteCode.max_uses,
            )
            .values(used_count=expected_used_count + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def get_redemption(
        self, invite_id: UUID, user_id: UUID
    ) -> Optional[InviteRedemption]:
        """Get the redemption record of a user for a code"""
        stmt = select(InviteRedemption).where(
            InviteRedemption.invite_id == invite_id,
            InviteRedemption.user_id == user_id,
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create_redemption(self, redemption: InviteRedemption) -> InviteRedemption:
        """Record that a user consumed a slot"""
        self.session.add(redemption)
        await self.session.flush()
        return redemption
