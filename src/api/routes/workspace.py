from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.api.error import raise_for_error
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.workspaces import (
    CatalogItemResponse,
    ChangeMemberRoleUseCase,
    CreateCatalogItemUseCase,
    CreateWorkspaceUseCase,
    GetWorkspaceContextUseCase,
    MemberResponse,
    RemoveMemberUseCase,
    SwitchPrimaryWorkspaceUseCase,
    UpdateWorkspaceSettingsUseCase,
    WorkspaceContextResponse,
    WorkspaceResponse,
)
from src.depends import get_current_principal, get_unit_of_work
from src.domain.principal import Principal

router = APIRouter(prefix="/workspaces", tags=["Workspace"])


class CreateWorkspaceRequest(BaseModel):
    """Create workspace HTTP request payload"""

    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=3, max_length=64)


class UpdateSettingsRequest(BaseModel):
    """Only the fields present are changed"""

    reward_provider_enabled: Optional[bool] = None
    provider_program_id: Optional[str] = Field(default=None, max_length=128)
    webhook_secret: Optional[str] = Field(default=None, max_length=255)


class SwitchWorkspaceRequest(BaseModel):
    slug: str = Field(..., description="Workspace to make primary")


class ChangeRoleRequest(BaseModel):
    role: str = Field(..., description="ADMIN, MANAGER or PARTICIPANT")


class CreateCatalogItemRequest(BaseModel):
    sku: str = Field(..., min_length=1, max_length=128)
    name: str = Field(..., min_length=1, max_length=255)
    point_cost: int = Field(..., gt=0)


@router.post(
    "", status_code=status.HTTP_201_CREATED, response_model=WorkspaceContextResponse
)
async def create_workspace(
    request: CreateWorkspaceRequest,
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Create Workspace

    Platform superadmins only; the creator becomes the first ADMIN.

    Raises:
        - 400 Bad Request: Invalid name or slug
        - 403 Forbidden: Not a platform superadmin
        - 409 Conflict: Slug already taken
    """
    result = await CreateWorkspaceUseCase(uow).execute(principal, request.name, request.slug)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post(
    "/switch", status_code=status.HTTP_200_OK, response_model=WorkspaceContextResponse
)
async def switch_workspace(
    request: SwitchWorkspaceRequest,
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Switch Primary Workspace

    Raises:
        - 403 Forbidden: Not a member of the workspace
        - 404 Not Found: Workspace not found
    """
    result = await SwitchPrimaryWorkspaceUseCase(uow).execute(principal, request.slug)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/{slug}", status_code=status.HTTP_200_OK, response_model=WorkspaceContextResponse
)
async def get_workspace(
    slug: str,
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Workspace Context

    Workspace details with the caller's role.

    Raises:
        - 403 Forbidden: Not a member of the workspace
        - 404 Not Found: Workspace not found
    """
    result = await GetWorkspaceContextUseCase(uow).execute(principal, slug)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.patch(
    "/{slug}/settings", status_code=status.HTTP_200_OK, response_model=WorkspaceResponse
)
async def update_settings(
    slug: str,
    request: UpdateSettingsRequest,
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Update Workspace Settings (ADMIN)

    Raises:
        - 400 Bad Request: Rewards enabled without a program id
        - 403 Forbidden: Caller is not an ADMIN
        - 404 Not Found: Workspace not found
    """
    result = await UpdateWorkspaceSettingsUseCase(uow).execute(
        principal,
        slug,
        reward_provider_enabled=request.reward_provider_enabled,
        provider_program_id=request.provider_program_id,
        webhook_secret=request.webhook_secret,
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.patch(
    "/{slug}/members/{user_id}/role",
    status_code=status.HTTP_200_OK,
    response_model=MemberResponse,
)
async def change_member_role(
    slug: str,
    user_id: UUID,
    request: ChangeRoleRequest,
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Change Member Role (ADMIN)

    Raises:
        - 400 Bad Request: Unknown role
        - 403 Forbidden: Caller is not an ADMIN, or targets themselves
        - 404 Not Found: Workspace or member not found
    """
    result = await ChangeMemberRoleUseCase(uow).execute(principal, slug, user_id, request.role)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.delete(
    "/{slug}/members/{user_id}",
    status_code=status.HTTP_200_OK,
    response_model=MemberResponse,
)
async def remove_member(
    slug: str,
    user_id: UUID,
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Remove Member (ADMIN)

    Soft removal; the member keeps points and history.

    Raises:
        - 400 Bad Request: Removing yourself
        - 403 Forbidden: Caller is not an ADMIN
        - 404 Not Found: Workspace or member not found
    """
    result = await RemoveMemberUseCase(uow).execute(principal, slug, user_id)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post(
    "/{slug}/catalog",
    status_code=status.HTTP_201_CREATED,
    response_model=CatalogItemResponse,
)
async def create_catalog_item(
    slug: str,
    request: CreateCatalogItemRequest,
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Add Catalog Item (ADMIN)

    Raises:
        - 403 Forbidden: Caller is not an ADMIN
        - 409 Conflict: SKU already exists in the workspace
    """
    result = await CreateCatalogItemUseCase(uow).execute(
        principal, slug, request.sku, request.name, request.point_cost
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value
