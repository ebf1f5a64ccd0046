"""
Workspace Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    EnrollmentStatus,
    LedgerEntryKind,
    MembershipStatus,
    ProviderStatus,
    RewardStatus,
    UserStatus,
    WorkspaceRole,
)

# Export all entities
from .user import User
from .workspace import Workspace
from .membership import Membership
from .challenge import Challenge
from .enrollment import Enrollment
from .invite_code import InviteCode
from .invite_redemption import InviteRedemption
from .points_balance import PointsBalance
from .points_ledger_entry import PointsLedgerEntry
from .catalog_item import CatalogItem
from .reward_issuance import RewardIssuance
from .webhook_event import WebhookEvent
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "EnrollmentStatus",
    "LedgerEntryKind",
    "MembershipStatus",
    "ProviderStatus",
    "RewardStatus",
    "UserStatus",
    "WorkspaceRole",
    # Entities
    "User",
    "Workspace",
    "Membership",
    "Challenge",
    "Enrollment",
    "InviteCode",
    "InviteRedemption",
    "PointsBalance",
    "PointsLedgerEntry",
    "CatalogItem",
    "RewardIssuance",
    "WebhookEvent",
    "AuditEvent",
]
