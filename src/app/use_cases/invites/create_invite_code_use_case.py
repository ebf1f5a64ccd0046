"""
Create Invite Code Use Case
"""

import logging
from datetime import timedelta
from typing import Callable, Optional
from uuid import UUID

from config import ApplicationConfig
from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.authorization_service import AuthorizationService, is_platform_superadmin
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditEvent, InviteCode, WorkspaceRole
from src.domain.principal import Principal

from .codes import generate_invite_code
from .dtos import InviteCodeResponse

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 5


class CreateInviteCodeUseCase:
    """
    Use case for issuing an invite code.

    Business Rules:
    - ADMIN only
    - max_uses >= 1; expiry defaults to INVITE_CODE_TTL_DAYS
    - A challenge-scoped code must reference a challenge of the same workspace
    - target_email binds the code to one invitee
    """

    def __init__(
        self,
        uow: UnitOfWork,
        superadmin_check: Callable[[Principal], bool] = is_platform_superadmin,
        config=ApplicationConfig,
    ):
        self.uow = uow
        self.superadmin_check = superadmin_check
        self.config = config

    @translate_storage_errors
    async def execute(
        self,
        principal: Principal,
        slug: str,
        role: str = WorkspaceRole.participant.value,
        max_uses: int = 1,
        expires_in_days: Optional[int] = None,
        challenge_id: Optional[UUID] = None,
        target_email: Optional[str] = None,
    ) -> Result[InviteCodeResponse]:
        try:
            target_role = WorkspaceRole((role or "").upper())
        except ValueError:
            return Return.err(Error(ErrorCode.INVALID_INPUT, f"Invalid role: {role}"))

        if isinstance(max_uses, bool) or not isinstance(max_uses, int) or max_uses < 1:
            return Return.err(Error(ErrorCode.INVALID_INPUT, "max_uses must be at least 1"))

        days = self.config.INVITE_CODE_TTL_DAYS if expires_in_days is None else expires_in_days
        if isinstance(days, bool) or not isinstance(days, int) or days < 1:
            return Return.err(
                Error(ErrorCode.INVALID_INPUT, "Expiry must be at least one day")
            )

        async with self.uow:
            access = await AuthorizationService(self.uow, self.superadmin_check).require_role(
                principal, slug, WorkspaceRole.admin
            )
            if access.is_err():
                return access
            workspace = access.value.workspace

            if challenge_id is not None:
                challenge = await self.uow.challenges.get_by_id(challenge_id)
                if challenge is None or challenge.workspace_id != workspace.id:
                    return Return.err(Error(ErrorCode.NOT_FOUND, "Challenge not found"))

            code = await self._unused_code()
            if code is None:
                return Return.err(
                    Error(ErrorCode.CONFLICT, "Could not allocate a unique invite code")
                )

            invite = await self.uow.invite_codes.create(
                InviteCode(
                    code=code,
                    workspace_id=workspace.id,
                    challenge_id=challenge_id,
                    role=target_role,
                    target_email=(target_email or "").strip().lower() or None,
                    max_uses=max_uses,
                    created_by=principal.user_id,
                    expires_at=utcnow() + timedelta(days=days),
                )
            )
            await self.uow.audit_events.create(
                AuditEvent(
                    workspace_id=workspace.id,
                    actor_user_id=principal.user_id,
                    action="invite_created",
                    event_metadata={
                        "invite_id": str(invite.id),
                        "role": target_role.value,
                        "max_uses": max_uses,
                    },
                )
            )
            await self.uow.commit()

            logger.info("Invite code created for workspace %s", workspace.slug)
            return Return.ok(InviteCodeResponse.from_entity(invite))

    async def _unused_code(self) -> Optional[str]:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_invite_code(self.config.INVITE_CODE_LENGTH)
            if await self.uow.invite_codes.get_by_code(code) is None:
                return code
        return None
