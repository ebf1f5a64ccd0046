"""
Reward provider port.

The provider accepts orders synchronously and reports their progress later
through webhooks. Implementations raise RewardProviderError for every
failure, timeouts included.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class RewardProviderError(Exception):
    def __init__(self, message: str, code: str = "PROVIDER_ERROR", status_code: Optional[int] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


class ProviderOrderRequest(BaseModel):
    """Order placed with the provider for one issuance"""

    idempotency_key: str
    program_id: Optional[str] = None
    participant_id: str
    sku: Optional[str] = None
    points: int
    quantity: int = 1
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ProviderOrder(BaseModel):
    """Provider-side identifiers of an accepted order"""

    transaction_id: Optional[str] = None
    adjustment_id: Optional[str] = None
    status: Optional[str] = None


class IRewardProvider(ABC):
    @abstractmethod
    async def place_order(self, request: ProviderOrderRequest) -> ProviderOrder:
        """Place an order; raises RewardProviderError on failure or timeout"""
        pass

    @abstractmethod
    async def find_order(
        self, program_id: Optional[str], idempotency_key: str
    ) -> Optional[ProviderOrder]:
        """Look an order up by the idempotency key it was placed with; None if unknown"""
        pass
