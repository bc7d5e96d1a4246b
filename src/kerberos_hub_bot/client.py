from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import anyio
import httpx

from .logging_setup import get_logger

logger = get_logger(__name__)

SLACK_API_URL = "https://slack.com/api"


class SlackApiError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        error: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error = error
        self.status_code = status_code


@dataclass(frozen=True, slots=True)
class SlackAuth:
    user_id: str
    user_name: str | None = None
    team_id: str | None = None
    bot_id: str | None = None


class SlackClient:
    def __init__(
        self,
        token: str,
        *,
        base_url: str = SLACK_API_URL,
        timeout_s: float = 30.0,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout_s,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return await _request_with_client(self._client, method, endpoint, json=json)

    async def auth_test(self) -> SlackAuth:
        payload = await self._request("POST", "/auth.test")
        user_id = payload.get("user_id")
        if not isinstance(user_id, str) or not user_id:
            raise SlackApiError("Missing user_id in auth.test response")
        user_name = payload.get("user")
        if not isinstance(user_name, str) or not user_name.strip():
            user_name = None
        return SlackAuth(
            user_id=user_id,
            user_name=user_name,
            team_id=payload.get("team_id"),
            bot_id=payload.get("bot_id"),
        )

    async def post_response(
        self,
        *,
        response_url: str,
        text: str,
        response_type: str = "ephemeral",
    ) -> bool:
        payload = {"text": text, "response_type": response_type}
        async with httpx.AsyncClient(timeout=15.0) as client:
            try:
                response = await client.post(response_url, json=payload)
            except httpx.HTTPError as exc:
                logger.warning("slack.response_failed", error=str(exc))
                return False
        if response.status_code >= 400:
            logger.warning(
                "slack.response_failed",
                status_code=response.status_code,
                body=response.text,
            )
            return False
        return True


async def _request_with_client(
    client: httpx.AsyncClient,
    method: str,
    endpoint: str,
    *,
    json: dict[str, Any] | None = None,
) -> dict[str, Any]:
    while True:
        try:
            response = await client.request(method, endpoint, json=json)
        except httpx.HTTPError as exc:
            logger.warning("slack.network_error", error=str(exc))
            raise SlackApiError("Slack request failed") from exc

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            try:
                delay = int(retry_after) if retry_after is not None else 1
            except ValueError:
                delay = 1
            logger.info("slack.rate_limited", retry_after=delay)
            await anyio.sleep(delay)
            continue

        if response.status_code >= 400:
            raise SlackApiError(
                f"Slack HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise SlackApiError("Slack response was not JSON") from exc

        if not isinstance(payload, dict) or payload.get("ok") is not True:
            error = payload.get("error") if isinstance(payload, dict) else None
            raise SlackApiError(
                f"Slack API error: {error}",
                error=error,
                status_code=response.status_code,
            )

        return payload


async def open_socket_url(
    app_token: str,
    *,
    base_url: str = SLACK_API_URL,
    timeout_s: float = 30.0,
) -> str:
    token = app_token.strip()
    if not token:
        raise SlackApiError("Missing Slack app token")
    async with httpx.AsyncClient(
        base_url=base_url,
        headers={"Authorization": f"Bearer {token}"},
        timeout=timeout_s,
    ) as client:
        payload = await _request_with_client(
            client,
            "POST",
            "/apps.connections.open",
        )
    url = payload.get("url")
    if not isinstance(url, str) or not url.strip():
        raise SlackApiError("Slack socket url missing")
    return url.strip()
