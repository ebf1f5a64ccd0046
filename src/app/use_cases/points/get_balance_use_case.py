"""
Get Balance Use Case
"""

from typing import Callable, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.authorization_service import AuthorizationService, is_platform_superadmin
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import MembershipStatus, WorkspaceRole
from src.domain.principal import Principal

from .dtos import BalanceResponse


class GetBalanceUseCase:
    """
    Use case for reading a points balance.

    Business Rules:
    - Own balance: PARTICIPANT or above
    - Another member's balance: MANAGER or above, same workspace only
    - A member without a balance row reads as zero (nothing is written)
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
        self, principal: Principal, slug: str, user_id: Optional[UUID] = None
    ) -> Result[BalanceResponse]:
        target_user_id = user_id or principal.user_id
        min_role = (
            WorkspaceRole.participant
            if target_user_id == principal.user_id
            else WorkspaceRole.manager
        )

        async with self.uow:
            access = await AuthorizationService(self.uow, self.superadmin_check).require_role(
                principal, slug, min_role
            )
            if access.is_err():
                return access
            workspace = access.value.workspace

            if target_user_id != principal.user_id:
                membership = await self.uow.memberships.get_by_user_and_workspace(
                    target_user_id, workspace.id
                )
                if membership is None or membership.status != MembershipStatus.active:
                    return Return.err(
                        Error(ErrorCode.NOT_FOUND, "User is not a member of this workspace")
                    )

            balance = await self.uow.points_balances.get(target_user_id, workspace.id)
            return Return.ok(
                BalanceResponse(
                    user_id=str(target_user_id),
                    workspace_id=str(workspace.id),
                    total_points=balance.total_points if balance else 0,
                    available_points=balance.available_points if balance else 0,
                )
            )
