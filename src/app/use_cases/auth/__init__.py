"""
Identity Use Cases

Binding identity-provider subjects to internal users.
"""

from .sync_user_use_case import SyncUserUseCase

__all__ = [
    "SyncUserUseCase",
]
