"""
Workspace Use Cases

Workspace provisioning, settings, membership administration and catalog.
"""

from .change_member_role_use_case import ChangeMemberRoleUseCase
from .create_catalog_item_use_case import CreateCatalogItemUseCase
from .create_workspace_use_case import CreateWorkspaceUseCase
from .dtos import (
    CatalogItemResponse,
    MemberResponse,
    WorkspaceContextResponse,
    WorkspaceResponse,
)
from .get_workspace_context_use_case import GetWorkspaceContextUseCase
from .remove_member_use_case import RemoveMemberUseCase
from .switch_primary_workspace_use_case import SwitchPrimaryWorkspaceUseCase
from .update_workspace_settings_use_case import UpdateWorkspaceSettingsUseCase

__all__ = [
    "CreateWorkspaceUseCase",
    "GetWorkspaceContextUseCase",
    "UpdateWorkspaceSettingsUseCase",
    "SwitchPrimaryWorkspaceUseCase",
    "ChangeMemberRoleUseCase",
    "RemoveMemberUseCase",
    "CreateCatalogItemUseCase",
    "WorkspaceResponse",
    "WorkspaceContextResponse",
    "MemberResponse",
    "CatalogItemResponse",
]
