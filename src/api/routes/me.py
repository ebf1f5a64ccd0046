from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from src.app.services.authorization_service import is_platform_superadmin
from src.depends import get_current_principal
from src.domain.principal import Principal

router = APIRouter(tags=["Identity"])


class MeResponse(BaseModel):
    """Authenticated caller"""

    user_id: str
    email: str
    external_auth_id: str
    is_superadmin: bool


@router.get("/me", status_code=status.HTTP_200_OK, response_model=MeResponse)
async def get_me(principal: Principal = Depends(get_current_principal)):
    """
    Current Principal

    Resolves the bearer token to the internal user, creating it on first use.

    Raises:
        - 401 Unauthorized: Invalid or expired JWT
        - 403 Forbidden: Deactivated user
    """
    return MeResponse(
        user_id=str(principal.user_id),
        email=principal.email,
        external_auth_id=principal.external_auth_id,
        is_superadmin=is_platform_superadmin(principal),
    )
