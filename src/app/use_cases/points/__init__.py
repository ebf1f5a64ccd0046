"""
Points Use Cases
"""

from .award_points_use_case import AwardPointsUseCase
from .dtos import BalanceResponse
from .get_balance_use_case import GetBalanceUseCase

__all__ = [
    "AwardPointsUseCase",
    "GetBalanceUseCase",
    "BalanceResponse",
]
