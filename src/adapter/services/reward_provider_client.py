"""
HTTP client for the reward provider.

SKU rewards are placed as catalog transactions, point rewards as
adjustments. Every order carries the issuance id as its idempotency key so
a retried or reconciled order never ships twice.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from src.app.services.reward_provider import (
    IRewardProvider,
    ProviderOrder,
    ProviderOrderRequest,
    RewardProviderError,
)

logger = logging.getLogger(__name__)

# Default timeout for provider calls (seconds)
_DEFAULT_TIMEOUT = 10.0

_STATUS_CODES = {
    400: "INVALID_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "DUPLICATE",
    429: "RATE_LIMITED",
}


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    message = body.get("message") if isinstance(body, dict) else None
    if isinstance(message, list):
        return "; ".join(str(part) for part in message)
    return str(message) if message else f"HTTP {response.status_code}"


class HttpRewardProvider(IRewardProvider):
    """Reward provider over its REST API"""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = _DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    async def place_order(self, request: ProviderOrderRequest) -> ProviderOrder:
        participant = quote(request.participant_id, safe="")
        base_path = f"/api/program/{quote(request.program_id or '', safe='')}/participant/{participant}"
        if request.sku:
            path = f"{base_path}/transaction"
            body = {
                "products": [{"sku": request.sku, "quantity": request.quantity}],
                "idempotencyKey": request.idempotency_key,
                "meta": request.metadata,
            }
        else:
            path = f"{base_path}/adjustment"
            body = {
                "amount": request.points,
                "type": "credit",
                "idempotencyKey": request.idempotency_key,
                "meta": request.metadata,
            }

        response = await self._request(
            "POST", path, json=body, idempotency_key=request.idempotency_key
        )
        if response.status_code >= 400:
            raise self._classify(response)

        data = self._json(response)
        provider_id = data.get("id") or data.get("transactionId") or data.get("adjustmentId")
        if not provider_id:
            raise RewardProviderError("Reward provider did not return an order id")

        order = ProviderOrder(status=data.get("status"))
        if request.sku:
            order.transaction_id = str(provider_id)
        else:
            order.adjustment_id = str(provider_id)
        logger.info(
            "Reward provider accepted order %s for idempotency key %s",
            provider_id,
            request.idempotency_key,
        )
        return order

    async def find_order(
        self, program_id: Optional[str], idempotency_key: str
    ) -> Optional[ProviderOrder]:
        path = f"/api/program/{quote(program_id or '', safe='')}/transaction"
        response = await self._request("GET", path, params={"idempotencyKey": idempotency_key})
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise self._classify(response)

        data = self._json(response)
        items = data.get("data") if isinstance(data.get("data"), list) else [data]
        for item in items:
            if not isinstance(item, dict) or not item.get("id"):
                continue
            if item.get("kind") == "adjustment":
                return ProviderOrder(adjustment_id=str(item["id"]), status=item.get("status"))
            return ProviderOrder(transaction_id=str(item["id"]), status=item.get("status"))
        return None

    async def _request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[dict] = None,
        idempotency_key: Optional[str] = None,
    ) -> httpx.Response:
        if not self.base_url:
            raise RewardProviderError("Reward provider is not configured", code="NOT_CONFIGURED")

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                return await client.request(
                    method, f"{self.base_url}{path}", headers=headers, json=json, params=params
                )
        except httpx.TimeoutException as e:
            logger.warning("Reward provider %s %s timed out", method, path)
            raise RewardProviderError("Reward provider timed out", code="TIMEOUT") from e
        except httpx.HTTPError as e:
            logger.warning("Reward provider %s %s failed: %s", method, path, e)
            raise RewardProviderError(
                f"Reward provider unreachable: {e}", code="UNREACHABLE"
            ) from e

    def _classify(self, response: httpx.Response) -> RewardProviderError:
        message = _error_message(response)
        if response.status_code >= 500:
            code = "SERVER_ERROR"
        else:
            code = _STATUS_CODES.get(response.status_code, "PROVIDER_ERROR")
        logger.warning("Reward provider rejected request: %s %s", response.status_code, message)
        return RewardProviderError(message, code=code, status_code=response.status_code)

    def _json(self, response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise RewardProviderError("Reward provider returned malformed JSON") from e
        if not isinstance(data, dict):
            raise RewardProviderError("Reward provider returned an unexpected body")
        return data
