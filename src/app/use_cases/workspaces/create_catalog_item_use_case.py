"""
Create Catalog Item Use Case
"""

from typing import Callable

from sqlalchemy.exc import IntegrityError

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.authorization_service import AuthorizationService, is_platform_superadmin
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import CatalogItem, WorkspaceRole
from src.domain.principal import Principal

from .dtos import CatalogItemResponse


class CreateCatalogItemUseCase:
    """ADMIN adds a reward to the workspace catalog; SKUs are unique per workspace"""

    def __init__(
        self,
        uow: UnitOfWork,
        superadmin_check: Callable[[Principal], bool] = is_platform_superadmin,
    ):
        self.uow = uow
        self.superadmin_check = superadmin_check

    @translate_storage_errors
    async def execute(
        self, principal: Principal, slug: str, sku: str, name: str, point_cost: int
    ) -> Result[CatalogItemResponse]:
        sku = (sku or "").strip()
        name = (name or "").strip()
        if not sku or not name:
            return Return.err(Error(ErrorCode.INVALID_INPUT, "SKU and name are required"))
        if isinstance(point_cost, bool) or not isinstance(point_cost, int) or point_cost <= 0:
            return Return.err(
                Error(ErrorCode.INVALID_INPUT, "Point cost must be a positive whole number")
            )

        async with self.uow:
            access = await AuthorizationService(self.uow, self.superadmin_check).require_role(
                principal, slug, WorkspaceRole.admin
            )
            if access.is_err():
                return access
            workspace = access.value.workspace

            if await self.uow.catalog_items.get_by_workspace_and_sku(workspace.id, sku):
                return Return.err(Error(ErrorCode.CONFLICT, f"SKU {sku} already exists"))

            try:
                item = await self.uow.catalog_items.create(
                    CatalogItem(
                        workspace_id=workspace.id, sku=sku, name=name, point_cost=point_cost
                    )
                )
                await self.uow.commit()
            except IntegrityError:
                await self.uow.rollback()
                return Return.err(Error(ErrorCode.CONFLICT, f"SKU {sku} already exists"))

            return Return.ok(CatalogItemResponse.from_entity(item))
