"""
Role ranking.

Privilege comparisons go through this table; role values are never compared
as strings.
"""

from typing import Optional

from src.domain.entities.enums import WorkspaceRole

ROLE_RANK = {
    WorkspaceRole.participant: 1,
    WorkspaceRole.manager: 2,
    WorkspaceRole.admin: 3,
}


def role_rank(role: WorkspaceRole) -> int:
    try:
        return ROLE_RANK[role]
    except KeyError:
        raise ValueError(f"Role {role!r} has no rank") from None


def role_at_least(role: Optional[WorkspaceRole], min_role: WorkspaceRole) -> bool:
    if role is None:
        return False
    return role_rank(role) >= role_rank(min_role)
