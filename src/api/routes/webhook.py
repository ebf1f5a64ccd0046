"""
Reward provider webhook receiver.

Unauthenticated by bearer token; workspaces with a webhook secret verify
an HMAC signature over the raw body instead.
"""

import json
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError, raise_for_error
from src.app.errors import ErrorCode
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.rewards import ReconcileWebhookUseCase, WebhookReceiptResponse
from src.depends import get_unit_of_work

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post(
    "/rewards/{workspace_id}",
    status_code=status.HTTP_200_OK,
    response_model=WebhookReceiptResponse,
)
async def receive_reward_webhook(
    workspace_id: UUID,
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Reward Provider Webhook

    Raises:
        - 400 Bad Request: Body is not a JSON object
        - 403 Forbidden: Invalid signature
        - 404 Not Found: Unknown workspace
    """
    raw_body = await request.body()
    try:
        payload = json.loads(raw_body or b"{}")
    except ValueError:
        raise ClientError(
            Error(ErrorCode.INVALID_INPUT, "Webhook body must be JSON"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    if not isinstance(payload, dict):
        raise ClientError(
            Error(ErrorCode.INVALID_INPUT, "Webhook body must be a JSON object"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    signature = request.headers.get(ApplicationConfig.WEBHOOK_SIGNATURE_HEADER)
    result = await ReconcileWebhookUseCase(uow).execute(
        workspace_id, payload, raw_body=raw_body, signature=signature
    )
    if result.is_err():
        raise_for_error(result.error)
    return result.value
