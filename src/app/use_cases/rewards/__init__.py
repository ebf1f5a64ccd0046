"""
Reward Use Cases

Reward issuance lifecycle: initiate, provider webhooks, shipping
confirmation, administrative cancel and the reconciliation sweep.
"""

from .cancel_reward_use_case import CancelRewardUseCase
from .confirm_shipping_use_case import ConfirmShippingUseCase
from .dtos import (
    RewardIssuanceResponse,
    SweepReportResponse,
    WebhookEventResponse,
    WebhookReceiptResponse,
)
from .initiate_reward_use_case import InitiateRewardUseCase
from .list_webhook_events_use_case import ListWebhookEventsUseCase
from .reconcile_webhook_use_case import ReconcileWebhookUseCase
from .sweep_stale_issuances_use_case import SweepStaleIssuancesUseCase

__all__ = [
    "InitiateRewardUseCase",
    "ReconcileWebhookUseCase",
    "ConfirmShippingUseCase",
    "CancelRewardUseCase",
    "ListWebhookEventsUseCase",
    "SweepStaleIssuancesUseCase",
    "RewardIssuanceResponse",
    "WebhookReceiptResponse",
    "WebhookEventResponse",
    "SweepReportResponse",
]
