from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.points_balance_repository import IPointsBalanceRepository
from src.domain.base import utcnow
from src.domain.entities import PointsBalance, PointsLedgerEntry


class PointsBalanceRepository(IPointsBalanceRepository):
    """Points balance repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: UUID, workspace_id: UUID) -> Optional[PointsBalance]:
        """Get the current balance row, bypassing any cached copy"""
        stmt = (
            select(PointsBalance)
            .where(
                PointsBalance.user_id == user_id,
                PointsBalance.workspace_id == workspace_id,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_or_create(self, user_id: UUID, workspace_id: UUID) -> PointsBalance:
        """INSERT ... ON CONFLICT DO NOTHING, then read the row"""
        dialect = self.session.get_bind().dialect.name
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
        now = utcnow()
        stmt = (
            insert(PointsBalance)
            .values(
                id=uuid4(),
                user_id=user_id,
                workspace_id=workspace_id,
                total_points=0,
                available_points=0,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=["user_id", "workspace_id"])
        )
        await self.session.execute(stmt)
        await self.session.flush()
        return await self.get(user_id, workspace_id)

    async def add_earned(self, user_id: UUID, workspace_id: UUID, amount: int) -> bool:
        """total_points += amount, available_points += amount"""
        stmt = (
            update(PointsBalance)
            .where(
                PointsBalance.user_id == user_id,
                PointsBalance.workspace_id == workspace_id,
            )
            .values(
                total_points=PointsBalance.total_points + amount,
                available_points=PointsBalance.available_points + amount,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def take_available(self, user_id: UUID, workspace_id: UUID, amount: int) -> bool:
        """available_points -= amount, only where available_points >= amount"""
        stmt = (
            update(PointsBalance)
            .where(
                PointsBalance.user_id == user_id,
                PointsBalance.workspace_id == workspace_id,
                PointsBalance.available_points >= amount,
            )
            .values(
                available_points=PointsBalance.available_points - amount,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def restore_available(
        self, user_id: UUID, workspace_id: UUID, amount: int
    ) -> bool:
        """available_points += amount, only where the result stays <= total_points"""
        stmt = (
            update(PointsBalance)
            .where(
                PointsBalance.user_id == user_id,
                PointsBalance.workspace_id == workspace_id,
                PointsBalance.available_points + amount <= PointsBalance.total_points,
            )
            .values(
                available_points=PointsBalance.available_points + amount,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def add_ledger_entry(self, entry: PointsLedgerEntry) -> PointsLedgerEntry:
        """Append an immutable ledger entry"""
        self.session.add(entry)
        await self.session.flush()
        return entry
