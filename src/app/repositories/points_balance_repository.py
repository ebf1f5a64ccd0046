from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.domain.entities import PointsBalance, PointsLedgerEntry


class IPointsBalanceRepository(ABC):
    """
    Points balance repository interface - application layer

    Every mutation is a single guarded UPDATE; callers learn from the
    boolean result whether the guard held.
    """

    @abstractmethod
    async def get(self, user_id: UUID, workspace_id: UUID) -> Optional[PointsBalance]:
        """Get the current balance row, bypassing any cached copy"""
        pass

    @abstractmethod
    async def get_or_create(self, user_id: UUID, workspace_id: UUID) -> PointsBalance:
        """Insert a zeroed row if absent (atomic upsert) and return the row"""
        pass

    @abstractmethod
    async def add_earned(self, user_id: UUID, workspace_id: UUID, amount: int) -> bool:
        """total_points += amount, available_points += amount"""
        pass

    @abstractmethod
    async def take_available(self, user_id: UUID, workspace_id: UUID, amount: int) -> bool:
        """available_points -= amount, only where available_points >= amount"""
        pass

    @abstractmethod
    async def restore_available(
        self, user_id: UUID, workspace_id: UUID, amount: int
    ) -> bool:
        """available_points += amount, only where the result stays <= total_points"""
        pass

    @abstractmethod
    async def add_ledger_entry(self, entry: PointsLedgerEntry) -> PointsLedgerEntry:
        """Append an immutable ledger entry"""
        pass
