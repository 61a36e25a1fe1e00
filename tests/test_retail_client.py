import hashlib
import json

import httpx
import pytest

from rewards_api.services.retail import RetailApiClient, RetailApiError, format_discount


def _login_ok() -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "success": True,
            "code": "200",
            "message": "ok",
            "data": {"id": 42, "name": "store-admin", "currentToken": "token-1"},
        },
    )


def _client(handler) -> RetailApiClient:
    return RetailApiClient(
        base_url="https://retail.test/",
        username="store-admin",
        password="s3cret",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.parametrize("cents, expected", [(50, "0.5"), (250, "2.5"), (500, "5"), (1000, "10")])
def test_format_discount_renders_plain_dollars(cents: int, expected: str) -> None:
    assert format_discount(cents) == expected


@pytest.mark.asyncio
async def test_register_logs_in_then_sends_promo_code() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path == "/SZWL-SERVER/tAdmin/loginSys":
            return _login_ok()
        return httpx.Response(200, json={"success": True, "code": "200", "message": "ok", "data": "created"})

    client = _client(handler)
    await client.register_discount_code("123456", amount_cents=250, validity_months=1)

    login, promo = requests
    assert login.method == "POST"
    assert json.loads(login.content) == {
        "username": "store-admin",
        "password": hashlib.md5(b"s3cret").hexdigest(),
    }
    assert promo.method == "GET"
    assert promo.url.path == "/SZWL-SERVER/tPromoCode/add"
    assert promo.headers["Authorization"] == "token-1"
    assert dict(promo.url.params) == {
        "addMode": "2",
        "codeNum": "123456",
        "number": "1",
        "month": "1",
        "type": "1",
        "discount": "2.5",
        "frpCode": "WEIXIN_NATIVE",
        "adminId": "42",
    }
    assert client.session.admin_id == 42


@pytest.mark.asyncio
async def test_session_is_reused_across_registrations() -> None:
    logins = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal logins
        if request.url.path.endswith("/loginSys"):
            logins += 1
            return _login_ok()
        return httpx.Response(200, json={"success": True, "message": "ok"})

    client = _client(handler)
    await client.register_discount_code("111111", amount_cents=50, validity_months=1)
    await client.register_discount_code("222222", amount_cents=50, validity_months=2)

    assert logins == 1


@pytest.mark.asyncio
async def test_expired_token_triggers_single_relogin() -> None:
    promo_calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal promo_calls
        if request.url.path.endswith("/loginSys"):
            return _login_ok()
        promo_calls += 1
        if promo_calls == 1:
            return httpx.Response(401, json={"success": False, "message": "token expired"})
        return httpx.Response(200, json={"success": True, "message": "ok"})

    client = _client(handler)
    await client.register_discount_code("333333", amount_cents=500, validity_months=3)

    assert promo_calls == 2


@pytest.mark.asyncio
async def test_login_failure_raises_retail_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "message": "bad password"})

    client = _client(handler)
    with pytest.raises(RetailApiError) as excinfo:
        await client.login()

    assert "bad password" in str(excinfo.value)
    assert excinfo.value.url == "https://retail.test/SZWL-SERVER/tAdmin/loginSys"


@pytest.mark.asyncio
async def test_transport_error_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    with pytest.raises(RetailApiError):
        await client.login()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "code, cents, months",
    [("12345", 100, 1), ("abcdef", 100, 1), ("123456", 0, 1), ("123456", 100, 4)],
)
async def test_register_validates_arguments_before_calling_out(code: str, cents: int, months: int) -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be reached
        raise AssertionError("unexpected request")

    client = _client(handler)
    with pytest.raises(ValueError):
        await client.register_discount_code(code, amount_cents=cents, validity_months=months)
