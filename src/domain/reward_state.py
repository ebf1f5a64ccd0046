"""
Reward issuance state tables.

PENDING -> ISSUED | FAILED | CANCELLED
ISSUED  -> FAILED | CANCELLED   (only while the provider has not completed it)

Provider status only moves forward: nothing -> PROCESSING -> COMPLETED | FAILED.
Once the provider reports a terminal status it is never overwritten, so late,
replayed or reordered webhook deliveries cannot regress an issuance.
"""

from typing import Optional, Tuple

from src.domain.entities.enums import ProviderStatus, RewardStatus

TERMINAL_STATUSES = frozenset({RewardStatus.failed, RewardStatus.cancelled})

# Statuses from which a failure (and its refund) may still be applied
FAILABLE_STATUSES = (RewardStatus.pending, RewardStatus.issued)

# Statuses from which an admin may cancel; ISSUED additionally requires
# the provider not to have completed the order
CANCELLABLE_STATUSES = (RewardStatus.pending, RewardStatus.issued)

PROVIDER_TERMINAL_STATUSES = frozenset({ProviderStatus.completed, ProviderStatus.failed})

# new provider status -> provider statuses it may replace (None = never reported)
PROVIDER_STATUS_PREDECESSORS = {
    ProviderStatus.processing: (None, ProviderStatus.processing),
    ProviderStatus.completed: (None, ProviderStatus.processing),
    ProviderStatus.failed: (None, ProviderStatus.processing),
}

CORRELATED_CATEGORIES = frozenset({"transaction", "adjustment"})


def split_event_type(event_type: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """'transaction.completed' -> ('transaction', 'completed')"""
    if not event_type or "." not in event_type:
        return None, None
    category, _, action = event_type.partition(".")
    return category.lower(), action.lower()


def provider_status_for(action: str, reported: Optional[str] = None) -> Optional[ProviderStatus]:
    """Map a webhook action to the provider status it reports"""
    if action == "created":
        return ProviderStatus.processing
    if action == "updated":
        try:
            return ProviderStatus((reported or "").upper())
        except ValueError:
            return ProviderStatus.processing
    if action == "completed":
        return ProviderStatus.completed
    if action == "failed":
        return ProviderStatus.failed
    return None
