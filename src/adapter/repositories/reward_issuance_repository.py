from datetime import datetime
from typing import Any, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import or_
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.reward_issuance_repository import IRewardIssuanceRepository
from src.domain.base import utcnow
from src.domain.entities import ProviderStatus, RewardIssuance, RewardStatus


class RewardIssuanceRepository(IRewardIssuanceRepository):
    """Reward issuance repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, issuance_id: UUID) -> Optional[RewardIssuance]:
        """Get issuance by ID, bypassing any cached copy"""
        stmt = (
            select(RewardIssuance)
            .where(RewardIssuance.id == issuance_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, issuance: RewardIssuance) -> RewardIssuance:
        """Create a new issuance"""
        self.session.add(issuance)
        await self.session.flush()
        await self.session.refresh(issuance)
        return issuance

    async def get_by_provider_id(
        self, workspace_id: UUID, provider_id: str
    ) -> List[RewardIssuance]:
        """Match on the indexed correlation columns only"""
        stmt = (
            select(RewardIssuance)
            .where(
                RewardIssuance.workspace_id == workspace_id,
                or_(
                    RewardIssuance.provider_transaction_id == provider_id,
                    RewardIssuance.provider_adjustment_id == provider_id,
                ),
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def transition(
        self,
        issuance_id: UUID,
        from_statuses: Sequence[RewardStatus],
        to_status: RewardStatus,
        unfulfilled_only: bool = False,
        **values: Any,
    ) -> bool:
        """Conditional status change guarded on the current status"""
        conditions = [
            RewardIssuance.id == issuance_id,
            RewardIssuance.status.in_(list(from_statuses)),
        ]
        if unfulfilled_only:
            conditions.append(
                or_(
                    RewardIssuance.provider_status.is_(None),
                    RewardIssuance.provider_status != ProviderStatus.completed,
                )
            )
        stmt = (
            update(RewardIssuance)
            .where(*conditions)
            .values(status=to_status, updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def record_provider_ids(
        self,
        issuance_id: UUID,
        transaction_id: Optional[str],
        adjustment_id: Optional[str] = None,
    ) -> bool:
        """Store provider ids whatever the status; never clears an existing id"""
        values = {}
        if transaction_id:
            values["provider_transaction_id"] = transaction_id
        if adjustment_id:
            values["provider_adjustment_id"] = adjustment_id
        if not values:
            return False
        stmt = (
            update(RewardIssuance)
            .where(RewardIssuance.id == issuance_id)
            .values(updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def advance_provider_status(
        self,
        issuance_id: UUID,
        new_status: ProviderStatus,
        allowed_from: Sequence[Optional[ProviderStatus]],
        error_message: Optional[str] = None,
        webhook_received: bool = True,
    ) -> bool:
        """Move provider_status forward; webhook_received marks a webhook as the source"""
        known = [status for status in allowed_from if status is not None]
        guards = [RewardIssuance.provider_status.in_(known)] if known else []
        if None in allowed_from:
            guards.append(RewardIssuance.provider_status.is_(None))
        values = {
            "provider_status": new_status,
            "updated_at": utcnow(),
        }
        if webhook_received:
            values["webhook_received"] = True
        if error_message:
            values["error_message"] = error_message[:500]
        stmt = (
            update(RewardIssuance)
            .where(RewardIssuance.id == issuance_id, or_(*guards))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def confirm_shipping(self, issuance_id: UUID, confirmed_at: datetime) -> bool:
        """Flag shipping confirmed; False if it already was"""
        stmt = (
            update(RewardIssuance)
            .where(
                RewardIssuance.id == issuance_id,
                RewardIssuance.shipping_confirmed == False,  # noqa: E712
            )
            .values(
                shipping_confirmed=True,
                shipping_confirmed_at=confirmed_at,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def increment_reconcile_attempts(self, issuance_id: UUID) -> None:
        """reconcile_attempts += 1"""
        stmt = (
            update(RewardIssuance)
            .where(RewardIssuance.id == issuance_id)
            .values(
                reconcile_attempts=RewardIssuance.reconcile_attempts + 1,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def get_stale_pending(
        self, created_before: datetime, limit: int
    ) -> List[RewardIssuance]:
        """PENDING issuances created before the cutoff, oldest first"""
        stmt = (
            select(RewardIssuance)
            .where(
                RewardIssuance.status == RewardStatus.pending,
                RewardIssuance.created_at < created_before,
            )
            .order_by(RewardIssuance.created_at)
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all())
