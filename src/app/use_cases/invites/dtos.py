"""
Invite Use Case DTOs (Data Transfer Objects)
"""

from typing import Optional

from pydantic import BaseModel

from src.domain.entities import InviteCode


class InviteCodeResponse(BaseModel):
    """Invite code as seen by workspace admins"""

    id: str
    code: str
    workspace_id: str
    challenge_id: Optional[str] = None
    role: str
    target_email: Optional[str] = None
    max_uses: int
    used_count: int
    expires_at: str

    @classmethod
    def from_entity(cls, invite: InviteCode) -> "InviteCodeResponse":
        return cls(
            id=str(invite.id),
            code=invite.code,
            workspace_id=str(invite.workspace_id),
            challenge_id=str(invite.challenge_id) if invite.challenge_id else None,
            role=invite.role.value,
            target_email=invite.target_email,
            max_uses=invite.max_uses,
            used_count=invite.used_count,
            expires_at=invite.expires_at.isoformat(),
        )


class InviteDetailsResponse(BaseModel):
    """Public preview shown before redeeming"""

    code: str
    workspace_name: str
    workspace_slug: str
    challenge_title: Optional[str] = None
    role: str
    remaining_uses: int
    expires_at: str
    is_expired: bool
    is_exhausted: bool


class RedeemInviteResponse(BaseModel):
    """Outcome of a redemption; already_member marks the idempotent path"""

    workspace_id: str
    workspace_slug: str
    challenge_id: Optional[str] = None
    role: str
    already_member: bool = False
