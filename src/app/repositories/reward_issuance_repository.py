from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Optional, Sequence
from uuid import UUID

from src.domain.entities import ProviderStatus, RewardIssuance, RewardStatus


class IRewardIssuanceRepository(ABC):
    """Reward issuance repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, issuance_id: UUID) -> Optional[RewardIssuance]:
        """Get issuance by ID, bypassing any cached copy"""
        pass

    @abstractmethod
    async def create(self, issuance: RewardIssuance) -> RewardIssuance:
        """Create a new issuance"""
        pass

    @abstractmethod
    async def get_by_provider_id(
        self, workspace_id: UUID, provider_id: str
    ) -> List[RewardIssuance]:
        """Issuances of a workspace whose transaction or adjustment id equals provider_id"""
        pass

    @abstractmethod
    async def transition(
        self,
        issuance_id: UUID,
        from_statuses: Sequence[RewardStatus],
        to_status: RewardStatus,
        unfulfilled_only: bool = False,
        **values: Any,
    ) -> bool:
        """
        Conditional status change.

        Applies only while the row's status is one of from_statuses (and, with
        unfulfilled_only, while the provider has not completed the order).
        Returns False when the guard did not hold.
        """
        pass

    @abstractmethod
    async def record_provider_ids(
        self,
        issuance_id: UUID,
        transaction_id: Optional[str],
        adjustment_id: Optional[str] = None,
    ) -> bool:
        """
        Store the provider ids of an accepted order regardless of status.

        Used when the order was placed but the issuance already left PENDING,
        so later webhooks still correlate.
        """
        pass

    @abstractmethod
    async def advance_provider_status(
        self,
        issuance_id: UUID,
        new_status: ProviderStatus,
        allowed_from: Sequence[Optional[ProviderStatus]],
        error_message: Optional[str] = None,
        webhook_received: bool = True,
    ) -> bool:
        """Move provider_status forward; webhook_received marks a webhook as the source"""
        pass

    @abstractmethod
    async def confirm_shipping(self, issuance_id: UUID, confirmed_at: datetime) -> bool:
        """Flag shipping confirmed; False if it already was"""
        pass

    @abstractmethod
    async def increment_reconcile_attempts(self, issuance_id: UUID) -> None:
        """reconcile_attempts += 1"""
        pass

    @abstractmethod
    async def get_stale_pending(
        self, created_before: datetime, limit: int
    ) -> List[RewardIssuance]:
        """PENDING issuances created before the cutoff, oldest first"""
        pass
