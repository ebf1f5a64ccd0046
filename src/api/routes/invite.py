from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field

from src.api.error import raise_for_error
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.invites import (
    CreateInviteCodeUseCase,
    GetInviteDetailsUseCase,
    InviteCodeResponse,
    InviteDetailsResponse,
    RedeemInviteCodeUseCase,
    RedeemInviteResponse,
)
from src.depends import get_current_principal, get_unit_of_work
from src.domain.principal import Principal

router = APIRouter(tags=["Invites"])


class CreateInviteRequest(BaseModel):
    """
    Create invite code HTTP request payload

    max_uses and expiry are validated again by the use case.
    """

    role: str = Field(default="PARTICIPANT", description="Role granted on redemption")
    max_uses: int = Field(default=1, ge=1)
    expires_in_days: Optional[int] = Field(default=None, ge=1)
    challenge_id: Optional[UUID] = None
    target_email: Optional[EmailStr] = None


class RedeemInviteRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=32)


@router.post(
    "/workspaces/{slug}/invites",
    status_code=status.HTTP_201_CREATED,
    response_model=InviteCodeResponse,
)
async def create_invite(
    slug: str,
    request: CreateInviteRequest,
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Create Invite Code (ADMIN)

    Raises:
        - 400 Bad Request: Invalid role, max_uses or expiry
        - 403 Forbidden: Caller is not an ADMIN
        - 404 Not Found: Workspace or challenge not found
    """
    result = await CreateInviteCodeUseCase(uow).execute(
        principal,
        slug,
        role=request.role,
        max_uses=request.max_uses,
        expires_in_days=request.expires_in_days,
        challenge_id=request.challenge_id,
        target_email=request.target_email,
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/invites/{code}", status_code=status.HTTP_200_OK, response_model=InviteDetailsResponse
)
async def get_invite_details(code: str, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Invite Details (public)

    Raises:
        - 404 Not Found: Unknown code
    """
    result = await GetInviteDetailsUseCase(uow).execute(code)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post(
    "/invites/redeem", status_code=status.HTTP_200_OK, response_model=RedeemInviteResponse
)
async def redeem_invite(
    request: RedeemInviteRequest,
    principal: Principal = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Redeem Invite Code

    Idempotent for users who are already members.

    Raises:
        - 403 Forbidden: Code bound to another email
        - 404 Not Found: Unknown code
        - 409 Conflict: EXHAUSTED, or a retryable CONFLICT
        - 410 Gone: EXPIRED
    """
    result = await RedeemInviteCodeUseCase(uow).execute(principal, request.code)
    if result.is_err():
        raise_for_error(result.error)
    return result.value
