"""
Get Invite Details Use Case

Public lookup, no membership required.
"""

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

from .codes import normalize_invite_code
from .dtos import InviteDetailsResponse


class GetInviteDetailsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @translate_storage_errors
    async def execute(self, code: str) -> Result[InviteDetailsResponse]:
        normalized = normalize_invite_code(code)
        if not normalized:
            return Return.err(Error(ErrorCode.INVALID_INPUT, "Invite code is required"))

        async with self.uow:
            invite = await self.uow.invite_codes.get_by_code(normalized)
            if invite is None:
                return Return.err(Error(ErrorCode.NOT_FOUND, "Invite code not found"))

            workspace = await self.uow.workspaces.get_by_id(invite.workspace_id)
            challenge = None
            if invite.challenge_id:
                challenge = await self.uow.challenges.get_by_id(invite.challenge_id)

            return Return.ok(
                InviteDetailsResponse(
                    code=invite.code,
                    workspace_name=workspace.name,
                    workspace_slug=workspace.slug,
                    challenge_title=challenge.title if challenge else None,
                    role=invite.role.value,
                    remaining_uses=max(invite.max_uses - invite.used_count, 0),
                    expires_at=invite.expires_at.isoformat(),
                    is_expired=invite.is_expired(utcnow()),
                    is_exhausted=invite.is_exhausted(),
                )
            )
