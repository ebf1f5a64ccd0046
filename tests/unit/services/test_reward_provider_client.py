import json

import httpx
import pytest

from src.adapter.services.reward_provider_client import HttpRewardProvider
from src.app.services.reward_provider import ProviderOrderRequest, RewardProviderError


def make_provider(handler, base_url="https://provider.test"):
    return HttpRewardProvider(
        base_url, api_key="key-123", timeout=1.0, transport=httpx.MockTransport(handler)
    )


def order_request(**overrides):
    values = dict(
        idempotency_key="issuance-1",
        program_id="program-1",
        participant_id="auth|user-1",
        sku="MUG-1",
        points=100,
    )
    values.update(overrides)
    return ProviderOrderRequest(**values)


@pytest.mark.asyncio
async def test_sku_order_is_placed_as_transaction():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(201, json={"id": "tx_1", "status": "PROCESSING"})

    order = await make_provider(handler).place_order(order_request())

    request = captured["request"]
    assert request.method == "POST"
    assert request.url.path.startswith("/api/program/program-1/participant/")
    assert request.url.path.endswith("/transaction")
    assert request.headers["Idempotency-Key"] == "issuance-1"
    assert request.headers["Authorization"] == "Bearer key-123"
    body = json.loads(request.content)
    assert body["products"] == [{"sku": "MUG-1", "quantity": 1}]
    assert body["idempotencyKey"] == "issuance-1"
    assert order.transaction_id == "tx_1"
    assert order.adjustment_id is None


@pytest.mark.asyncio
async def test_points_order_is_placed_as_adjustment():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(200, json={"adjustmentId": "adj_9"})

    order = await make_provider(handler).place_order(order_request(sku=None, points=250))

    assert captured["request"].url.path.endswith("/adjustment")
    assert json.loads(captured["request"].content)["amount"] == 250
    assert order.adjustment_id == "adj_9"
    assert order.transaction_id is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code, code",
    [(400, "INVALID_REQUEST"), (409, "DUPLICATE"), (429, "RATE_LIMITED"), (503, "SERVER_ERROR")],
)
async def test_error_statuses_are_classified(status_code, code):
    def handler(request):
        return httpx.Response(status_code, json={"message": ["sku unknown", "bad quantity"]})

    with pytest.raises(RewardProviderError) as exc_info:
        await make_provider(handler).place_order(order_request())

    assert exc_info.value.code == code
    assert exc_info.value.status_code == status_code
    assert exc_info.value.message == "sku unknown; bad quantity"


@pytest.mark.asyncio
async def test_timeout_raises_provider_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(RewardProviderError) as exc_info:
        await make_provider(handler).place_order(order_request())

    assert exc_info.value.code == "TIMEOUT"


@pytest.mark.asyncio
async def test_connection_failure_raises_provider_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(RewardProviderError) as exc_info:
        await make_provider(handler).place_order(order_request())

    assert exc_info.value.code == "UNREACHABLE"


@pytest.mark.asyncio
async def test_missing_order_id_is_an_error():
    provider = make_provider(lambda request: httpx.Response(200, json={"status": "PROCESSING"}))

    with pytest.raises(RewardProviderError):
        await provider.place_order(order_request())


@pytest.mark.asyncio
async def test_unconfigured_provider_fails_without_calling_out():
    def handler(request):
        raise AssertionError("no request expected")

    with pytest.raises(RewardProviderError) as exc_info:
        await make_provider(handler, base_url="").place_order(order_request())

    assert exc_info.value.code == "NOT_CONFIGURED"


@pytest.mark.asyncio
async def test_find_order_by_idempotency_key():
    def handler(request):
        assert request.url.params["idempotencyKey"] == "issuance-1"
        return httpx.Response(200, json={"data": [{"id": "tx_1", "status": "COMPLETED"}]})

    order = await make_provider(handler).find_order("program-1", "issuance-1")

    assert order.transaction_id == "tx_1"
    assert order.status == "COMPLETED"


@pytest.mark.asyncio
async def test_find_order_returns_adjustments():
    def handler(request):
        return httpx.Response(200, json={"id": "adj_3", "kind": "adjustment"})

    order = await make_provider(handler).find_order("program-1", "issuance-1")

    assert order.adjustment_id == "adj_3"


@pytest.mark.asyncio
async def test_find_order_unknown_key_is_none():
    provider = make_provider(lambda request: httpx.Response(404, json={"message": "not found"}))

    assert await provider.find_order("program-1", "issuance-1") is None
    empty = make_provider(lambda request: httpx.Response(200, json={"data": []}))
    assert await empty.find_order("program-1", "issuance-1") is None
