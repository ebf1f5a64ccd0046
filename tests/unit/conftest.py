import pytest
from unittest.mock import AsyncMock, MagicMock


def _echo(entity):
    return entity


# repository -> {method: default return value}; "echo" returns the argument
REPOSITORY_DEFAULTS = {
    "users": {
        "get_by_external_auth_id": None,
        "create": "echo",
        "update": "echo",
    },
    "workspaces": {
        "get_by_id": None,
        "get_by_slug": None,
        "create": "echo",
        "update": "echo",
    },
    "memberships": {
        "get_by_user_and_workspace": None,
        "get_by_user_id": [],
        "create": "echo",
        "update": "echo",
        "clear_primary": 0,
        "set_primary": True,
    },
    "invite_codes": {
        "get_by_id": None,
        "get_by_code": None,
        "create": "echo",
        "try_consume": True,
        "get_redemption": None,
        "create_redemption": "echo",
    },
    "challenges": {
        "get_by_id": None,
        "get_enrollment": None,
        "save_enrollment": "echo",
    },
    "points_balances": {
        "get": None,
        "get_or_create": None,
        "add_earned": True,
        "take_available": True,
        "restore_available": True,
        "add_ledger_entry": "echo",
    },
    "catalog_items": {
        "get_by_id": None,
        "get_by_workspace_and_sku": None,
        "create": "echo",
    },
    "reward_issuances": {
        "get_by_id": None,
        "create": "echo",
        "get_by_provider_id": [],
        "transition": True,
        "record_provider_ids": True,
        "advance_provider_status": True,
        "confirm_shipping": True,
        "increment_reconcile_attempts": None,
        "get_stale_pending": [],
    },
    "webhook_events": {
        "create": "echo",
        "get_by_id": None,
        "update": "echo",
        "get_by_entity_ids": [],
        "get_unmatched": [],
    },
    "audit_events": {
        "create": "echo",
    },
}


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    for name, methods in REPOSITORY_DEFAULTS.items():
        repository = MagicMock()
        for method, default in methods.items():
            if default == "echo":
                setattr(repository, method, AsyncMock(side_effect=_echo))
            else:
                setattr(repository, method, AsyncMock(return_value=default))
        setattr(uow, name, repository)

    return uow
