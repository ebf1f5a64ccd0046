from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.api.error import raise_for_error
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.points import AwardPointsUseCase, BalanceResponse, GetBalanceUseCase
from src.depends import get_current_principal, get_unit_of_work
from src.domain.principal import Principal

router = APIRouter(prefix="/workspaces/{slug}/points", tags=["Points"])


class AwardPointsRequest(BaseModel):
    user_id: UUID
    amount: int = Field(..., gt=0)
    reason: Optional[str] = Field(default=None, max_length=255)
    reference_id: Optional[UUID] = None


@router.get("", status_code=status.HTTP_200_OK, response_model=BalanceResponse)
async def get_balance(
    slug: str,
    user_id: Optional[UUID] = None,
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Points Balance

    Own balance by default; another member's with ?user_id= (MANAGER+).

    Raises:
        - 403 Forbidden: Not a member, or not allowed to read others
        - 404 Not Found: Workspace or member not found
    """
    result = await GetBalanceUseCase(uow).execute(principal, slug, user_id)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post("/award", status_code=status.HTTP_200_OK, response_model=BalanceResponse)
async def award_points(
    slug: str,
    request: AwardPointsRequest,
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Award Points (MANAGER+)

    Raises:
        - 400 Bad Request: Non-positive amount
        - 403 Forbidden: Caller is not a MANAGER or ADMIN
        - 404 Not Found: Workspace or member not found
    """
    result = await AwardPointsUseCase(uow).execute(
        principal,
        slug,
        request.user_id,
        request.amount,
        reason=request.reason,
        reference_id=request.reference_id,
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value
