"""
Workspace Use Case DTOs (Data Transfer Objects)

Response classes for the workspace domain.
"""

from typing import Optional

from pydantic import BaseModel

from src.domain.entities import CatalogItem, Membership, Workspace


class WorkspaceResponse(BaseModel):
    """Workspace as seen by its members"""

    id: str
    slug: str
    name: str
    reward_provider_enabled: bool
    provider_program_id: Optional[str] = None
    webhook_secret_configured: bool = False

    @classmethod
    def from_entity(cls, workspace: Workspace) -> "WorkspaceResponse":
        return cls(
            id=str(workspace.id),
            slug=workspace.slug,
            name=workspace.name,
            reward_provider_enabled=workspace.reward_provider_enabled,
            provider_program_id=workspace.provider_program_id,
            webhook_secret_configured=bool(workspace.webhook_secret),
        )


class WorkspaceContextResponse(BaseModel):
    """Caller's view of one workspace"""

    workspace: WorkspaceResponse
    role: Optional[str] = None
    is_primary: bool = False
    is_superadmin: bool = False


class MemberResponse(BaseModel):
    """Membership of one user in one workspace"""

    user_id: str
    workspace_id: str
    role: str
    status: str
    is_primary: bool

    @classmethod
    def from_entity(cls, membership: Membership) -> "MemberResponse":
        return cls(
            user_id=str(membership.user_id),
            workspace_id=str(membership.workspace_id),
            role=membership.role.value,
            status=membership.status.value,
            is_primary=membership.is_primary,
        )


class CatalogItemResponse(BaseModel):
    """Reward catalog entry"""

    id: str
    workspace_id: str
    sku: str
    name: str
    point_cost: int
    is_active: bool

    @classmethod
    def from_entity(cls, item: CatalogItem) -> "CatalogItemResponse":
        return cls(
            id=str(item.id),
            workspace_id=str(item.workspace_id),
            sku=item.sku,
            name=item.name,
            point_cost=item.point_cost,
            is_active=item.is_active,
        )
