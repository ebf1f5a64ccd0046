from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from src.api.error import raise_for_error
from src.app.services.reward_provider import IRewardProvider
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.rewards import (
    CancelRewardUseCase,
    ConfirmShippingUseCase,
    InitiateRewardUseCase,
    ListWebhookEventsUseCase,
    RewardIssuanceResponse,
    WebhookEventResponse,
)
from src.depends import get_current_principal, get_reward_provider, get_unit_of_work
from src.domain.principal import Principal

router = APIRouter(prefix="/workspaces/{slug}", tags=["Rewards"])


class InitiateRewardRequest(BaseModel):
    catalog_item_id: UUID


class CancelRewardRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


@router.post(
    "/rewards", status_code=status.HTTP_201_CREATED, response_model=RewardIssuanceResponse
)
async def initiate_reward(
    slug: str,
    request: InitiateRewardRequest,
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    provider: IRewardProvider = Depends(get_reward_provider),
):
    """
    Redeem Points for a Reward

    Raises:
        - 402 Payment Required: INSUFFICIENT_BALANCE
        - 403 Forbidden: Not a member, or rewards disabled for the workspace
        - 404 Not Found: Workspace or catalog item not found
        - 502 Bad Gateway: Provider failed; the points were refunded
    """
    result = await InitiateRewardUseCase(uow, provider).execute(
        principal, slug, request.catalog_item_id
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post(
    "/rewards/{issuance_id}/confirm-shipping",
    status_code=status.HTTP_200_OK,
    response_model=RewardIssuanceResponse,
)
async def confirm_shipping(
    slug: str,
    issuance_id: UUID,
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Confirm Shipping (recipient only)

    Raises:
        - 403 Forbidden: Not the recipient
        - 404 Not Found: Reward not found
        - 409 Conflict: WORKSPACE_MISMATCH, or reward failed/cancelled
    """
    result = await ConfirmShippingUseCase(uow).execute(principal, slug, issuance_id)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post(
    "/rewards/{issuance_id}/cancel",
    status_code=status.HTTP_200_OK,
    response_model=RewardIssuanceResponse,
)
async def cancel_reward(
    slug: str,
    issuance_id: UUID,
    request: Optional[CancelRewardRequest] = None,
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Cancel Reward (ADMIN)

    Raises:
        - 403 Forbidden: Caller is not an ADMIN
        - 404 Not Found: Reward not found in this workspace
        - 409 Conflict: Reward already fulfilled or failed
    """
    reason = request.reason if request else None
    result = await CancelRewardUseCase(uow).execute(principal, slug, issuance_id, reason)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/webhook-events",
    status_code=status.HTTP_200_OK,
    response_model=List[WebhookEventResponse],
)
async def list_webhook_events(
    slug: str,
    issuance_id: Optional[UUID] = None,
    limit: int = Query(default=100, ge=1, le=500),
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Webhook Audit Log (ADMIN)

    Events correlated to ?issuance_id=, or the unmatched events of the workspace.
    """
    result = await ListWebhookEventsUseCase(uow).execute(principal, slug, issuance_id, limit)
    if result.is_err():
        raise_for_error(result.error)
    return result.value
