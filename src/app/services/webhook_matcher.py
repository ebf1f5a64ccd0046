"""
Webhook correlation.

Provider deliveries are normalized into (workspace, type, entity id) and
matched to issuances by exact equality on the indexed provider id columns.
"""

import hashlib
import hmac
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import RewardIssuance, WebhookEvent
from src.domain.reward_state import CORRELATED_CATEGORIES, split_event_type


class NormalizedEvent(BaseModel):
    workspace_id: UUID
    event_id: Optional[str] = None
    event_type: Optional[str] = None
    category: Optional[str] = None
    action: Optional[str] = None
    entity_id: Optional[str] = None
    reported_status: Optional[str] = None
    error: Optional[str] = None

    @property
    def correlatable(self) -> bool:
        return self.category in CORRELATED_CATEGORIES and bool(self.entity_id)


def _as_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def normalize_event(workspace_id: UUID, payload: Dict[str, Any]) -> NormalizedEvent:
    """Extract the correlation fields; tolerant of missing or odd shapes"""
    payload = payload if isinstance(payload, dict) else {}
    data = payload.get("data")
    data = data if isinstance(data, dict) else {}
    event_type = _as_text(payload.get("type"))
    category, action = split_event_type(event_type)
    return NormalizedEvent(
        workspace_id=workspace_id,
        event_id=_as_text(payload.get("id")),
        event_type=event_type,
        category=category,
        action=action,
        entity_id=_as_text(data.get("id")),
        reported_status=_as_text(data.get("status")),
        error=_as_text(data.get("error")),
    )


def normalize_logged_event(event: WebhookEvent) -> NormalizedEvent:
    return normalize_event(event.workspace_id, event.payload or {})


class WebhookMatcher:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def match(self, event: NormalizedEvent) -> List[RewardIssuance]:
        """Issuances of the event's workspace carrying the event's entity id"""
        if not event.correlatable:
            return []
        return await self.uow.reward_issuances.get_by_provider_id(
            event.workspace_id, event.entity_id
        )


def sign_payload(secret: str, raw_body: bytes) -> str:
    return hmac.new(secret.encode(), raw_body, hashlib.sha256).hexdigest()


def verify_signature(secret: str, raw_body: bytes, signature: Optional[str]) -> bool:
    """Hex HMAC-SHA256 of the raw body, optionally prefixed with 'sha256='"""
    if not signature:
        return False
    provided = signature.strip().lower()
    if provided.startswith("sha256="):
        provided = provided[len("sha256="):]
    return hmac.compare_digest(sign_payload(secret, raw_body), provided)
