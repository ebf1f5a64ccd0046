"""
Workspace Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserStatus(str, Enum):
    """Principal account status"""

    active = "active"
    deactivated = "deactivated"


class WorkspaceRole(str, Enum):
    """Role held by a user inside one workspace"""

    admin = "ADMIN"
    manager = "MANAGER"
    participant = "PARTICIPANT"


class MembershipStatus(str, Enum):
    """Membership status"""

    active = "active"
    removed = "removed"


class EnrollmentStatus(str, Enum):
    """Challenge enrollment status"""

    enrolled = "ENROLLED"
    withdrawn = "WITHDRAWN"


class LedgerEntryKind(str, Enum):
    """Kind of points movement recorded in the ledger"""

    credit = "credit"
    debit = "debit"
    refund = "refund"


class RewardStatus(str, Enum):
    """Internal lifecycle of a reward issuance"""

    pending = "PENDING"
    issued = "ISSUED"
    failed = "FAILED"
    cancelled = "CANCELLED"


class ProviderStatus(str, Enum):
    """Order status as last reported by the reward provider"""

    processing = "PROCESSING"
    completed = "COMPLETED"
    failed = "FAILED"
