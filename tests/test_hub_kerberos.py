from __future__ import annotations

import json

import httpx
import pytest

from kerberos_hub_bot.kerberos import ApiResult, KerberosClient, extract_token

BASE_URL = "https://api.cloud.kerberos.io"


def _client(handler) -> KerberosClient:
    return KerberosClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))


@pytest.mark.anyio
async def test_call_post_sends_body_and_token() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"token": "abc"})

    client = _client(handler)
    result = await client.call("/auth/login", "POST", {"username": "alice"}, "t0")
    await client.close()

    assert result == ApiResult(success=True, data={"token": "abc"})
    request = seen[0]
    assert str(request.url) == f"{BASE_URL}/auth/login"
    assert request.method == "POST"
    assert request.headers["Authorization"] == "Bearer t0"
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.content) == {"username": "alice"}


@pytest.mark.anyio
async def test_call_get_drops_body_and_omits_auth() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"name": "Bo"})

    client = _client(handler)
    result = await client.call("/profile", "GET", {"ignored": True})
    await client.close()

    assert result.success is True
    assert seen[0].content == b""
    assert "Authorization" not in seen[0].headers


@pytest.mark.anyio
async def test_call_uses_remote_error_message() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Invalid credentials"})

    client = _client(handler)
    result = await client.login("alice", "wrong")
    await client.close()

    assert result.success is False
    assert result.error == "Invalid credentials"


@pytest.mark.anyio
async def test_call_status_error_without_message() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, content=b"boom")

    client = _client(handler)
    result = await client.profile("t")
    await client.close()

    assert result.success is False
    assert result.error == "Request failed with status code 500"


@pytest.mark.anyio
async def test_call_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    result = await client.profile("t")
    await client.close()

    assert result.success is False
    assert result.error == "connection refused"


@pytest.mark.anyio
async def test_call_bad_json() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>")

    client = _client(handler)
    result = await client.profile("t")
    await client.close()

    assert result == ApiResult(success=False, error="Response was not valid JSON")


@pytest.mark.anyio
async def test_call_empty_body() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(204)

    client = _client(handler)
    result = await client.call("/auth/logout", "POST")
    await client.close()

    assert result == ApiResult(success=True, data=None)


def test_extract_token() -> None:
    assert extract_token({"token": "abc"}) == "abc"
    assert extract_token({"access_token": "xyz"}) == "xyz"
    assert extract_token({"token": "", "access_token": "xyz"}) == "xyz"
    assert extract_token({"token": "abc", "access_token": "xyz"}) == "abc"
    assert extract_token({"token": 123}) is None
    assert extract_token(["abc"]) is None
    assert extract_token(None) is None
