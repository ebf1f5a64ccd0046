"""
Reconcile Webhook Use Case

Logs a provider delivery and drives the matched issuances through the
state machine.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.reward_state_machine import RewardStateMachine
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.webhook_matcher import WebhookMatcher, normalize_event, verify_signature
from src.domain.base import utcnow
from src.domain.entities import WebhookEvent

from .dtos import WebhookReceiptResponse

logger = logging.getLogger(__name__)


class ReconcileWebhookUseCase:
    """
    Use case for receiving a reward provider webhook.

    Business Rules:
    - Workspaces with a webhook secret require a valid HMAC signature;
      rejected deliveries are not logged
    - Every accepted delivery is appended to the log and committed before
      any matching, duplicates included
    - Matching is exact equality on provider transaction/adjustment ids
      within the workspace; zero matches is not an error
    - Replaying the same event leaves issuance state unchanged
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @translate_storage_errors
    async def execute(
        self,
        workspace_id: UUID,
        payload: Dict[str, Any],
        raw_body: bytes = b"",
        signature: Optional[str] = None,
    ) -> Result[WebhookReceiptResponse]:
        async with self.uow:
            workspace = await self.uow.workspaces.get_by_id(workspace_id)
            if workspace is None:
                return Return.err(Error(ErrorCode.NOT_FOUND, "Workspace not found"))

            if workspace.webhook_secret and not verify_signature(
                workspace.webhook_secret, raw_body, signature
            ):
                logger.warning("Rejected webhook with bad signature for workspace %s", workspace_id)
                return Return.err(Error(ErrorCode.FORBIDDEN, "Invalid webhook signature"))

            event = normalize_event(workspace_id, payload)
            logged = await self.uow.webhook_events.create(
                WebhookEvent(
                    workspace_id=workspace_id,
                    provider_event_id=event.event_id,
                    event_type=event.event_type,
                    entity_id=event.entity_id,
                    payload=payload if isinstance(payload, dict) else {"raw": payload},
                    error=None if event.correlatable else "Event type is not actionable",
                )
            )
            await self.uow.commit()
            logged_id = logged.id

            if not event.correlatable:
                logger.info("Logged non-actionable webhook %s (%s)", logged_id, event.event_type)
                return Return.ok(WebhookReceiptResponse(event_id=str(logged_id), actionable=False))

            issuances = await WebhookMatcher(self.uow).match(event)
            if not issuances:
                logger.info(
                    "Webhook %s for entity %s matched no issuance in workspace %s",
                    logged_id,
                    event.entity_id,
                    workspace_id,
                )
                return Return.ok(WebhookReceiptResponse(event_id=str(logged_id), actionable=True))

            machine = RewardStateMachine(self.uow)
            matched: List[str] = []
            outcomes: List[str] = []
            for issuance in issuances:
                outcome = await machine.apply_event(issuance, event)
                if outcome.is_err():
                    await self.uow.rollback()
                    await self._record_error(logged_id, outcome.error.message)
                    return outcome
                matched.append(str(issuance.id))
                outcomes.append(outcome.value)

            logged.processed = True
            logged.matched_issuance_id = issuances[0].id
            logged.processed_at = utcnow()
            await self.uow.webhook_events.update(logged)
            await self.uow.commit()

            return Return.ok(
                WebhookReceiptResponse(
                    event_id=str(logged_id),
                    actionable=True,
                    matched_issuance_ids=matched,
                    outcomes=outcomes,
                )
            )

    async def _record_error(self, event_id: UUID, message: str) -> None:
        event = await self.uow.webhook_events.get_by_id(event_id)
        if event is not None:
            event.error = message[:500]
            event.processed_at = utcnow()
            await self.uow.webhook_events.update(event)
            await self.uow.commit()
