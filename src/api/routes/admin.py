"""
Admin API Routes - Operator and Scheduler Endpoints

Authentication is via Admin API Key, not user JWTs.
"""

from fastapi import APIRouter, Depends, status

from src.api.error import raise_for_error
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.reward_provider import IRewardProvider
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.rewards import SweepReportResponse, SweepStaleIssuancesUseCase
from src.depends import get_reward_provider, get_unit_of_work

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/rewards/reconcile",
    status_code=status.HTTP_200_OK,
    response_model=SweepReportResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def reconcile_rewards(
    uow: UnitOfWork = Depends(get_unit_of_work),
    provider: IRewardProvider = Depends(get_reward_provider),
):
    """
    Reconcile Stale Rewards

    Scheduler endpoint resolving PENDING issuances older than the staleness
    window against the provider.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 503 Service Unavailable: Storage failure, safe to retry
    """
    result = await SweepStaleIssuancesUseCase(uow, provider).execute()
    if result.is_err():
        raise_for_error(result.error)
    return result.value
