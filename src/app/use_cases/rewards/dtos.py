"""
Reward Use Case DTOs (Data Transfer Objects)
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from src.domain.entities import RewardIssuance, WebhookEvent


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class RewardIssuanceResponse(BaseModel):
    """Reward issuance with its provider correlation state"""

    id: str
    user_id: str
    workspace_id: str
    catalog_item_id: Optional[str] = None
    sku: Optional[str] = None
    amount: int
    status: str
    provider_transaction_id: Optional[str] = None
    provider_adjustment_id: Optional[str] = None
    provider_status: Optional[str] = None
    shipping_confirmed: bool
    shipping_confirmed_at: Optional[str] = None
    issued_at: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def from_entity(cls, issuance: RewardIssuance) -> "RewardIssuanceResponse":
        return cls(
            id=str(issuance.id),
            user_id=str(issuance.user_id),
            workspace_id=str(issuance.workspace_id),
            catalog_item_id=str(issuance.catalog_item_id) if issuance.catalog_item_id else None,
            sku=issuance.sku,
            amount=issuance.amount,
            status=issuance.status.value,
            provider_transaction_id=issuance.provider_transaction_id,
            provider_adjustment_id=issuance.provider_adjustment_id,
            provider_status=issuance.provider_status.value if issuance.provider_status else None,
            shipping_confirmed=issuance.shipping_confirmed,
            shipping_confirmed_at=_iso(issuance.shipping_confirmed_at),
            issued_at=_iso(issuance.issued_at),
            error_message=issuance.error_message,
        )


class WebhookReceiptResponse(BaseModel):
    """Acknowledgement returned to the provider"""

    event_id: str
    actionable: bool
    matched_issuance_ids: List[str] = []
    outcomes: List[str] = []


class WebhookEventResponse(BaseModel):
    """Logged provider delivery, for audit queries"""

    id: str
    provider_event_id: Optional[str] = None
    event_type: Optional[str] = None
    entity_id: Optional[str] = None
    processed: bool
    matched_issuance_id: Optional[str] = None
    error: Optional[str] = None
    received_at: str
    payload: Optional[Dict[str, Any]] = None

    @classmethod
    def from_entity(cls, event: WebhookEvent) -> "WebhookEventResponse":
        return cls(
            id=str(event.id),
            provider_event_id=event.provider_event_id,
            event_type=event.event_type,
            entity_id=event.entity_id,
            processed=event.processed,
            matched_issuance_id=str(event.matched_issuance_id) if event.matched_issuance_id else None,
            error=event.error,
            received_at=event.received_at.isoformat(),
            payload=event.payload,
        )


class SweepReportResponse(BaseModel):
    """What one reconciliation sweep did"""

    examined: int = 0
    issued: int = 0
    failed: int = 0
    retried: int = 0
    skipped: int = 0
