"""
Points Ledger

Keeps 0 <= available_points <= total_points under concurrent credits and
debits. Each movement is one guarded UPDATE issued inside the caller's
transaction, followed by an immutable ledger entry. Nothing here commits.
"""

import logging
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import LedgerEntryKind, PointsBalance, PointsLedgerEntry

logger = logging.getLogger(__name__)


def _invalid_amount(amount) -> Optional[Error]:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        return Error(ErrorCode.INVALID_INPUT, "Amount must be a positive whole number")
    return None


class PointsLedger:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def get_or_create(self, user_id: UUID, workspace_id: UUID) -> PointsBalance:
        """Existing balance or a zeroed one; safe under concurrent first access"""
        return await self.uow.points_balances.get_or_create(user_id, workspace_id)

    async def credit(
        self,
        user_id: UUID,
        workspace_id: UUID,
        amount: int,
        reason: str = "activity_approved",
        reference_id: Optional[UUID] = None,
        actor_user_id: Optional[UUID] = None,
    ) -> Result[PointsBalance]:
        """Add earned points to both counters"""
        invalid = _invalid_amount(amount)
        if invalid:
            return Return.err(invalid)

        await self.uow.points_balances.get_or_create(user_id, workspace_id)
        if not await self.uow.points_balances.add_earned(user_id, workspace_id, amount):
            return Return.err(Error(ErrorCode.CONFLICT, "Points balance changed concurrently"))

        await self._record(
            LedgerEntryKind.credit, user_id, workspace_id, amount, reason, reference_id, actor_user_id
        )
        return Return.ok(await self.uow.points_balances.get(user_id, workspace_id))

    async def debit(
        self,
        user_id: UUID,
        workspace_id: UUID,
        amount: int,
        reason: str = "reward_redemption",
        reference_id: Optional[UUID] = None,
        actor_user_id: Optional[UUID] = None,
    ) -> Result[PointsBalance]:
        """Spend available points; total_points is untouched"""
        invalid = _invalid_amount(amount)
        if invalid:
            return Return.err(invalid)

        # The balance check and the decrement are the same statement
        if not await self.uow.points_balances.take_available(user_id, workspace_id, amount):
            return Return.err(
                Error(ErrorCode.INSUFFICIENT_BALANCE, "Not enough available points")
            )

        await self._record(
            LedgerEntryKind.debit, user_id, workspace_id, amount, reason, reference_id, actor_user_id
        )
        return Return.ok(await self.uow.points_balances.get(user_id, workspace_id))

    async def refund(
        self,
        user_id: UUID,
        workspace_id: UUID,
        amount: int,
        reason: str = "reward_refund",
        reference_id: Optional[UUID] = None,
        actor_user_id: Optional[UUID] = None,
    ) -> Result[PointsBalance]:
        """Give previously debited points back to available_points only"""
        invalid = _invalid_amount(amount)
        if invalid:
            return Return.err(invalid)

        if not await self.uow.points_balances.restore_available(user_id, workspace_id, amount):
            logger.error(
                "Refund of %s points for user %s in workspace %s would exceed lifetime total",
                amount,
                user_id,
                workspace_id,
            )
            return Return.err(
                Error(ErrorCode.CONFLICT, "Refund would exceed the lifetime points total")
            )

        await self._record(
            LedgerEntryKind.refund, user_id, workspace_id, amount, reason, reference_id, actor_user_id
        )
        return Return.ok(await self.uow.points_balances.get(user_id, workspace_id))

    async def _record(
        self,
        kind: LedgerEntryKind,
        user_id: UUID,
        workspace_id: UUID,
        amount: int,
        reason: str,
        reference_id: Optional[UUID],
        actor_user_id: Optional[UUID],
    ) -> None:
        await self.uow.points_balances.add_ledger_entry(
            PointsLedgerEntry(
                workspace_id=workspace_id,
                user_id=user_id,
                kind=kind,
                amount=amount,
                reason=reason,
                reference_id=reference_id,
                actor_user_id=actor_user_id,
            )
        )
