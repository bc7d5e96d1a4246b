from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from .config import DEFAULT_API_URL
from .logging_setup import get_logger

logger = get_logger(__name__)

LOGIN_ENDPOINT = "/auth/login"
PROFILE_ENDPOINT = "/profile"
TOKEN_FIELDS = ("token", "access_token")
_BODY_METHODS = {"POST", "PUT"}


@dataclass(frozen=True, slots=True)
class ApiResult:
    success: bool
    data: Any = None
    error: str | None = None

    @classmethod
    def ok(cls, data: Any) -> "ApiResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "ApiResult":
        return cls(success=False, error=error)


def extract_token(data: object) -> str | None:
    if not isinstance(data, dict):
        return None
    for field in TOKEN_FIELDS:
        value = data.get(field)
        if isinstance(value, str) and value:
            return value
    return None


def _error_message(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    message = payload.get("message")
    if isinstance(message, str) and message.strip():
        return message
    return None


class KerberosClient:
    def __init__(
        self,
        *,
        base_url: str = DEFAULT_API_URL,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        kwargs: dict[str, Any] = {}
        if timeout_s is not None:
            kwargs["timeout"] = timeout_s
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Content-Type": "application/json"},
            transport=transport,
            **kwargs,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def call(
        self,
        endpoint: str,
        method: str = "GET",
        body: dict[str, Any] | None = None,
        token: str | None = None,
    ) -> ApiResult:
        method = method.upper()
        headers: dict[str, str] = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        json_body = body if body is not None and method in _BODY_METHODS else None

        try:
            response = await self._client.request(
                method, endpoint, json=json_body, headers=headers
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "kerberos.network_error",
                endpoint=endpoint,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            return ApiResult.fail(str(exc) or exc.__class__.__name__)

        if not response.is_success:
            message = _error_message(response)
            logger.warning(
                "kerberos.request_failed",
                endpoint=endpoint,
                status_code=response.status_code,
            )
            return ApiResult.fail(
                message or f"Request failed with status code {response.status_code}"
            )

        if not response.content:
            return ApiResult.ok(None)
        try:
            payload = response.json()
        except ValueError:
            logger.warning("kerberos.bad_payload", endpoint=endpoint)
            return ApiResult.fail("Response was not valid JSON")
        return ApiResult.ok(payload)

    async def login(self, username: str, password: str) -> ApiResult:
        return await self.call(
            LOGIN_ENDPOINT,
            "POST",
            {"username": username, "password": password},
        )

    async def profile(self, token: str) -> ApiResult:
        return await self.call(PROFILE_ENDPOINT, "GET", token=token)
