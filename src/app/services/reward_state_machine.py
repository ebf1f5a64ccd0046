"""
Reward Issuance State Machine

Every status change is a conditional UPDATE guarded on the current status,
so only one of any number of concurrent actors wins a given transition.
Compensating refunds are issued by the winner only. Runs inside the
caller's transaction; nothing here commits.
"""

import logging
from typing import Optional
from uuid import UUID

from libs.result import Result, Return
from src.app.services.points_ledger import PointsLedger
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.webhook_matcher import NormalizedEvent, normalize_logged_event
from src.domain.base import utcnow
from src.domain.entities import AuditEvent, ProviderStatus, RewardIssuance, RewardStatus
from src.domain.reward_state import (
    CANCELLABLE_STATUSES,
    FAILABLE_STATUSES,
    PROVIDER_STATUS_PREDECESSORS,
    TERMINAL_STATUSES,
    provider_status_for,
)

logger = logging.getLogger(__name__)


class EventOutcome:
    IGNORED = "ignored"
    UPDATED = "updated"
    ISSUED = "issued"
    FAILED = "failed"


class RewardStateMachine:
    def __init__(self, uow: UnitOfWork, ledger: Optional[PointsLedger] = None):
        self.uow = uow
        self.ledger = ledger or PointsLedger(uow)

    async def mark_issued(
        self,
        issuance: RewardIssuance,
        transaction_id: Optional[str],
        adjustment_id: Optional[str] = None,
    ) -> bool:
        """PENDING -> ISSUED with the provider's identifiers"""
        values = {"issued_at": utcnow(), "error_message": None}
        if transaction_id:
            values["provider_transaction_id"] = transaction_id
        if adjustment_id:
            values["provider_adjustment_id"] = adjustment_id

        transitioned = await self.uow.reward_issuances.transition(
            issuance.id, [RewardStatus.pending], RewardStatus.issued, **values
        )
        if transitioned:
            await self._audit(issuance, "reward_issued", {"transaction_id": transaction_id})
        return transitioned

    async def record_order(
        self,
        issuance: RewardIssuance,
        transaction_id: Optional[str],
        adjustment_id: Optional[str] = None,
    ) -> bool:
        """
        Keep the ids of an order the provider accepted after the issuance left PENDING.

        The ids are stored whatever the status so later webhooks still
        correlate. Returns True when the issuance is already terminal, i.e.
        a live provider order now belongs to a cancelled or failed issuance.
        """
        await self.uow.reward_issuances.record_provider_ids(
            issuance.id, transaction_id, adjustment_id
        )
        if issuance.status not in TERMINAL_STATUSES:
            return False

        logger.warning(
            "Issuance %s is %s but the provider accepted order %s",
            issuance.id,
            issuance.status.value,
            transaction_id or adjustment_id,
        )
        await self._audit(
            issuance,
            "reward_order_orphaned",
            {
                "status": issuance.status.value,
                "transaction_id": transaction_id,
                "adjustment_id": adjustment_id,
            },
        )
        return True

    async def fail_and_refund(
        self, issuance: RewardIssuance, reason: str, actor_user_id: Optional[UUID] = None
    ) -> Result[bool]:
        """
        Move to FAILED and give the points back.

        Ok(False) when another actor already moved the issuance out of a
        failable status; in that case no refund is made.
        """
        transitioned = await self.uow.reward_issuances.transition(
            issuance.id,
            FAILABLE_STATUSES,
            RewardStatus.failed,
            unfulfilled_only=True,
            error_message=(reason or "")[:500] or None,
        )
        if not transitioned:
            return Return.ok(False)

        refund = await self.ledger.refund(
            issuance.user_id,
            issuance.workspace_id,
            issuance.amount,
            reason="reward_failed",
            reference_id=issuance.id,
            actor_user_id=actor_user_id,
        )
        if refund.is_err():
            return refund

        logger.info("Issuance %s failed and %s points were refunded", issuance.id, issuance.amount)
        await self._audit(issuance, "reward_failed", {"reason": reason}, actor_user_id)
        return Return.ok(True)

    async def cancel_and_refund(
        self, issuance: RewardIssuance, actor_user_id: UUID, reason: Optional[str] = None
    ) -> Result[bool]:
        """Administrative cancel; same guard-then-refund shape as a failure"""
        transitioned = await self.uow.reward_issuances.transition(
            issuance.id,
            CANCELLABLE_STATUSES,
            RewardStatus.cancelled,
            unfulfilled_only=True,
            error_message=(reason or "")[:500] or None,
        )
        if not transitioned:
            return Return.ok(False)

        refund = await self.ledger.refund(
            issuance.user_id,
            issuance.workspace_id,
            issuance.amount,
            reason="reward_cancelled",
            reference_id=issuance.id,
            actor_user_id=actor_user_id,
        )
        if refund.is_err():
            return refund

        await self._audit(issuance, "reward_cancelled", {"reason": reason}, actor_user_id)
        return Return.ok(True)

    async def apply_event(self, issuance: RewardIssuance, event: NormalizedEvent) -> Result[str]:
        """
        Apply one provider event to a matched issuance.

        Replays and out-of-order deliveries resolve to IGNORED: the provider
        status guard refuses to leave a terminal provider status.
        """
        new_status = provider_status_for(event.action, event.reported_status)
        if new_status is None:
            return Return.ok(EventOutcome.IGNORED)
        return await self._apply_provider_status(
            issuance, new_status, event.error, event.event_type, webhook_received=True
        )

    async def apply_order_status(
        self, issuance: RewardIssuance, reported: Optional[str], error: Optional[str] = None
    ) -> Result[str]:
        """Apply the status the provider returned synchronously with an order"""
        if not reported:
            return Return.ok(EventOutcome.IGNORED)
        new_status = provider_status_for("updated", reported)
        return await self._apply_provider_status(
            issuance, new_status, error, f"order status {reported}", webhook_received=False
        )

    async def _apply_provider_status(
        self,
        issuance: RewardIssuance,
        new_status: ProviderStatus,
        error: Optional[str],
        source: Optional[str],
        webhook_received: bool,
    ) -> Result[str]:
        advanced = await self.uow.reward_issuances.advance_provider_status(
            issuance.id,
            new_status,
            PROVIDER_STATUS_PREDECESSORS[new_status],
            error_message=error if new_status == ProviderStatus.failed else None,
            webhook_received=webhook_received,
        )
        if not advanced:
            logger.info(
                "Ignoring %s for issuance %s, provider status already terminal",
                source,
                issuance.id,
            )
            return Return.ok(EventOutcome.IGNORED)

        if new_status == ProviderStatus.completed:
            issued = await self.uow.reward_issuances.transition(
                issuance.id, [RewardStatus.pending], RewardStatus.issued, issued_at=utcnow()
            )
            return Return.ok(EventOutcome.ISSUED if issued else EventOutcome.UPDATED)

        if new_status == ProviderStatus.failed:
            failed = await self.fail_and_refund(
                issuance, error or "Reward provider reported a failure"
            )
            if failed.is_err():
                return failed
            return Return.ok(EventOutcome.FAILED if failed.value else EventOutcome.UPDATED)

        return Return.ok(EventOutcome.UPDATED)

    async def replay_logged_events(self, issuance_id: UUID) -> Result[int]:
        """
        Apply logged events that arrived before the issuance carried provider ids.

        Returns the number of events applied, oldest first.
        """
        issuance = await self.uow.reward_issuances.get_by_id(issuance_id)
        if issuance is None:
            return Return.ok(0)
        provider_ids = [
            provider_id
            for provider_id in (issuance.provider_transaction_id, issuance.provider_adjustment_id)
            if provider_id
        ]
        if not provider_ids:
            return Return.ok(0)

        logged = await self.uow.webhook_events.get_by_entity_ids(
            issuance.workspace_id, provider_ids
        )
        applied = 0
        for logged_event in logged:
            if logged_event.processed:
                continue
            event = normalize_logged_event(logged_event)
            if not event.correlatable:
                continue
            current = await self.uow.reward_issuances.get_by_id(issuance_id)
            outcome = await self.apply_event(current, event)
            if outcome.is_err():
                return outcome
            logged_event.processed = True
            logged_event.matched_issuance_id = issuance_id
            logged_event.processed_at = utcnow()
            await self.uow.webhook_events.update(logged_event)
            applied += 1

        if applied:
            logger.info("Replayed %s early webhook events for issuance %s", applied, issuance_id)
        return Return.ok(applied)

    async def _audit(
        self,
        issuance: RewardIssuance,
        action: str,
        metadata: Optional[dict] = None,
        actor_user_id: Optional[UUID] = None,
    ) -> None:
        await self.uow.audit_events.create(
            AuditEvent(
                workspace_id=issuance.workspace_id,
                user_id=issuance.user_id,
                actor_user_id=actor_user_id,
                action=action,
                event_metadata={"issuance_id": str(issuance.id), **(metadata or {})},
            )
        )
