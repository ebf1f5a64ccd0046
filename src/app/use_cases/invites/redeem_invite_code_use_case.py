"""
Redeem Invite Code Use Case

Invite Redemption Engine: turns a code into a workspace membership while
keeping used_count <= max_uses under concurrent redemptions.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from config import ApplicationConfig
from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.points_ledger import PointsLedger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import (
    AuditEvent,
    Enrollment,
    EnrollmentStatus,
    InviteCode,
    InviteRedemption,
    Membership,
    MembershipStatus,
    Workspace,
)
from src.domain.principal import Principal

from .codes import normalize_invite_code
from .dtos import RedeemInviteResponse

logger = logging.getLogger(__name__)


class RedeemInviteCodeUseCase:
    """
    Use case for redeeming an invite code.

    Business Rules:
    - Unknown code -> NOT_FOUND, past expires_at -> EXPIRED
    - A code bound to a target email only admits that email
    - An existing active member gets the same result again without using a slot
    - A slot is taken with a compare-and-swap on used_count; a lost race is
      re-read and retried CAS_MAX_RETRIES times before EXHAUSTED (or CONFLICT
      while slots remain)
    - Membership, redemption record, enrollment and audit commit together
    """

    def __init__(self, uow: UnitOfWork, config=ApplicationConfig):
        self.uow = uow
        self.config = config

    @translate_storage_errors
    async def execute(self, principal: Principal, code: str) -> Result[RedeemInviteResponse]:
        normalized = normalize_invite_code(code)
        if not normalized:
            return Return.err(Error(ErrorCode.INVALID_INPUT, "Invite code is required"))

        async with self.uow:
            invite = await self.uow.invite_codes.get_by_code(normalized)
            if invite is None:
                return Return.err(Error(ErrorCode.NOT_FOUND, "Invite code not found"))
            invite_id = invite.id

            if invite.is_expired(utcnow()):
                return Return.err(Error(ErrorCode.EXPIRED, "This invite code has expired"))

            if invite.target_email and invite.target_email.lower() != (principal.email or "").lower():
                return Return.err(
                    Error(ErrorCode.FORBIDDEN, "This invite code was issued to a different email")
                )

            workspace = await self.uow.workspaces.get_by_id(invite.workspace_id)
            if workspace is None:
                return Return.err(Error(ErrorCode.NOT_FOUND, "Workspace not found"))

            membership = await self.uow.memberships.get_by_user_and_workspace(
                principal.user_id, invite.workspace_id
            )
            if membership and membership.status == MembershipStatus.active:
                return await self._already_member(principal, invite, workspace, membership)

            consumed = await self._consume_slot(invite)
            if consumed.is_err():
                return consumed

            try:
                membership = await self._grant_membership(principal.user_id, invite, membership)

                if await self.uow.invite_codes.get_redemption(invite.id, principal.user_id) is None:
                    await self.uow.invite_codes.create_redemption(
                        InviteRedemption(invite_id=invite.id, user_id=principal.user_id)
                    )
                await PointsLedger(self.uow).get_or_create(principal.user_id, invite.workspace_id)
                if invite.challenge_id:
                    await self._enroll(principal.user_id, invite.challenge_id)

                await self.uow.audit_events.create(
                    AuditEvent(
                        workspace_id=invite.workspace_id,
                        user_id=principal.user_id,
                        actor_user_id=principal.user_id,
                        action="invite_redeemed",
                        event_metadata={
                            "invite_id": str(invite.id),
                            "role": invite.role.value,
                            "challenge_id": str(invite.challenge_id) if invite.challenge_id else None,
                        },
                    )
                )
                await self.uow.commit()
            except IntegrityError:
                # A concurrent redemption by the same user created the membership first
                await self.uow.rollback()
                invite = await self.uow.invite_codes.get_by_id(invite_id)
                workspace = await self.uow.workspaces.get_by_id(invite.workspace_id)
                membership = await self.uow.memberships.get_by_user_and_workspace(
                    principal.user_id, invite.workspace_id
                )
                if membership and membership.status == MembershipStatus.active:
                    return Return.ok(self._response(invite, workspace, membership, True))
                raise

            logger.info("User %s joined workspace %s via invite", principal.user_id, workspace.slug)
            return Return.ok(self._response(invite, workspace, membership, False))

    async def _already_member(
        self,
        principal: Principal,
        invite: InviteCode,
        workspace: Workspace,
        membership: Membership,
    ) -> Result[RedeemInviteResponse]:
        if invite.challenge_id and await self._enroll(principal.user_id, invite.challenge_id):
            await self.uow.commit()
        return Return.ok(self._response(invite, workspace, membership, True))

    async def _consume_slot(self, invite: InviteCode) -> Result[None]:
        current: Optional[InviteCode] = invite
        for attempt in range(self.config.CAS_MAX_RETRIES + 1):
            if current.is_exhausted():
                return Return.err(
                    Error(ErrorCode.EXHAUSTED, "This invite code has no uses left")
                )
            if await self.uow.invite_codes.try_consume(current.id, current.used_count):
                return Return.ok(None)

            logger.info(
                "Lost used_count race on invite %s (attempt %s)", invite.id, attempt + 1
            )
            current = await self.uow.invite_codes.get_by_id(invite.id)
            if current is None:
                return Return.err(Error(ErrorCode.NOT_FOUND, "Invite code not found"))

        if current.is_exhausted():
            return Return.err(Error(ErrorCode.EXHAUSTED, "This invite code has no uses left"))
        return Return.err(
            Error(ErrorCode.CONFLICT, "Invite code is busy, please try again")
        )

    async def _grant_membership(
        self, user_id: UUID, invite: InviteCode, membership: Optional[Membership]
    ) -> Membership:
        if membership is not None:
            # Previously removed member rejoins with the code's role
            membership.status = MembershipStatus.active
            membership.role = invite.role
            return await self.uow.memberships.update(membership)

        existing = await self.uow.memberships.get_by_user_id(user_id)
        return await self.uow.memberships.create(
            Membership(
                user_id=user_id,
                workspace_id=invite.workspace_id,
                role=invite.role,
                status=MembershipStatus.active,
                is_primary=not any(m.is_primary for m in existing),
            )
        )

    async def _enroll(self, user_id: UUID, challenge_id: UUID) -> bool:
        """Create or reactivate the enrollment; False if already enrolled"""
        enrollment = await self.uow.challenges.get_enrollment(user_id, challenge_id)
        if enrollment is None:
            await self.uow.challenges.save_enrollment(
                Enrollment(user_id=user_id, challenge_id=challenge_id)
            )
            return True
        if enrollment.status != EnrollmentStatus.enrolled:
            enrollment.status = EnrollmentStatus.enrolled
            await self.uow.challenges.save_enrollment(enrollment)
            return True
        return False

    def _response(
        self,
        invite: InviteCode,
        workspace: Workspace,
        membership: Membership,
        already_member: bool,
    ) -> RedeemInviteResponse:
        return RedeemInviteResponse(
            workspace_id=str(workspace.id),
            workspace_slug=workspace.slug,
            challenge_id=str(invite.challenge_id) if invite.challenge_id else None,
            role=membership.role.value,
            already_member=already_member,
        )
