"""
Award Points Use Case

Credits points to a member, e.g. for an approved activity submission.
"""

import logging
from typing import Callable, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.authorization_service import AuthorizationService, is_platform_superadmin
from src.app.services.points_ledger import PointsLedger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent, MembershipStatus, WorkspaceRole
from src.domain.principal import Principal

from .dtos import BalanceResponse

logger = logging.getLogger(__name__)


class AwardPointsUseCase:
    """
    Use case for crediting points.

    Business Rules:
    - MANAGER or above
    - Target must be an active member of the same workspace
    - amount > 0; both total and available points grow
    """

    def __init__(
        self,
        uow: UnitOfWork,
        superadmin_check: Callable[[Principal], bool] = is_platform_superadmin,
    ):
        self.uow = uow
        self.superadmin_check = superadmin_check

    @translate_storage_errors
    async def execute(
        self,
        principal: Principal,
        slug: str,
        user_id: UUID,
        amount: int,
        reason: Optional[str] = None,
        reference_id: Optional[UUID] = None,
    ) -> Result[BalanceResponse]:
        async with self.uow:
            access = await AuthorizationService(self.uow, self.superadmin_check).require_role(
                principal, slug, WorkspaceRole.manager
            )
            if access.is_err():
                return access
            workspace = access.value.workspace

            membership = await self.uow.memberships.get_by_user_and_workspace(
                user_id, workspace.id
            )
            if membership is None or membership.status != MembershipStatus.active:
                return Return.err(
                    Error(ErrorCode.NOT_FOUND, "User is not a member of this workspace")
                )

            credited = await PointsLedger(self.uow).credit(
                user_id,
                workspace.id,
                amount,
                reason=reason or "activity_approved",
                reference_id=reference_id,
                actor_user_id=principal.user_id,
            )
            if credited.is_err():
                return credited

            await self.uow.audit_events.create(
                AuditEvent(
                    workspace_id=workspace.id,
                    user_id=user_id,
                    actor_user_id=principal.user_id,
                    action="points_credited",
                    event_metadata={"amount": amount, "reason": reason},
                )
            )
            await self.uow.commit()

            balance = credited.value
            logger.info("Credited %s points to %s in %s", amount, user_id, workspace.slug)
            return Return.ok(
                BalanceResponse(
                    user_id=str(user_id),
                    workspace_id=str(workspace.id),
                    total_points=balance.total_points,
                    available_points=balance.available_points,
                )
            )
