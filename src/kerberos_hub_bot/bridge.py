from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs

import anyio
import websockets
from anyio.abc import TaskGroup
from websockets.exceptions import WebSocketException

from .client import SlackApiError, SlackClient, open_socket_url
from .commands import CommandContext, dispatch_command
from .config import ConfigError
from .kerberos import KerberosClient
from .logging_setup import get_logger
from .sessions import SessionStore

logger = get_logger(__name__)

RECONNECT_BACKOFF_S = 1.0


@dataclass(frozen=True, slots=True)
class HubBridgeConfig:
    client: SlackClient
    api: KerberosClient
    sessions: SessionStore
    app_token: str
    slash_command: str = "/hub"
    port: int = 3000


def _parse_form_payload(raw: str) -> dict[str, str]:
    parsed = parse_qs(raw, keep_blank_values=True)
    return {key: values[-1] if values else "" for key, values in parsed.items()}


def _coerce_socket_payload(payload: object) -> dict[str, Any] | None:
    if isinstance(payload, dict):
        return payload
    if isinstance(payload, str):
        raw = payload.strip()
        if raw.startswith("{") and raw.endswith("}"):
            try:
                value = json.loads(raw)
            except json.JSONDecodeError:
                value = None
            if isinstance(value, dict):
                return value
        return _parse_form_payload(raw)
    return None


def _normalize_command(command: object) -> str | None:
    if not isinstance(command, str):
        return None
    value = command.strip().lower()
    if not value:
        return None
    if not value.startswith("/"):
        value = f"/{value}"
    return value


def _extract_str(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


async def _handle_slash_command(
    cfg: HubBridgeConfig,
    payload: dict[str, Any],
) -> None:
    command = _normalize_command(payload.get("command"))
    if command != cfg.slash_command:
        logger.debug("slack.command_ignored", command=command)
        return
    user_id = _extract_str(payload, "user_id")
    response_url = _extract_str(payload, "response_url")
    if user_id is None or response_url is None:
        logger.warning(
            "slack.command_incomplete",
            has_user_id=user_id is not None,
            has_response_url=response_url is not None,
        )
        return
    text = payload.get("text") or ""
    if not isinstance(text, str):
        text = ""

    async def respond(reply: str) -> None:
        await cfg.client.post_response(
            response_url=response_url,
            text=reply,
            response_type="ephemeral",
        )

    ctx = CommandContext(
        user_id=user_id,
        respond=respond,
        api=cfg.api,
        sessions=cfg.sessions,
        slash_command=cfg.slash_command,
    )
    invocation = await dispatch_command(ctx, text)
    logger.debug(
        "slack.command_handled",
        user_id=user_id,
        subcommand=invocation.subcommand,
    )


async def _safe_handle_slash_command(
    cfg: HubBridgeConfig,
    payload: dict[str, Any],
) -> None:
    try:
        await _handle_slash_command(cfg, payload)
    except Exception as exc:
        logger.exception(
            "slack.command_failed",
            error=str(exc),
            error_type=exc.__class__.__name__,
        )


async def _handle_envelope(
    cfg: HubBridgeConfig,
    envelope: dict[str, Any],
    tg: TaskGroup,
) -> bool:
    msg_type = envelope.get("type")
    if msg_type == "disconnect":
        logger.info("slack.socket.disconnect", reason=envelope.get("reason"))
        return False
    if msg_type == "hello":
        logger.info("slack.socket.connected")
        return True
    if msg_type != "slash_commands":
        return True
    payload = _coerce_socket_payload(envelope.get("payload"))
    if payload is not None:
        tg.start_soon(_safe_handle_slash_command, cfg, payload)
    return True


async def _run_socket_loop(cfg: HubBridgeConfig) -> None:
    if not cfg.app_token:
        raise ConfigError("Missing `SLACK_APP_TOKEN`.")

    async with anyio.create_task_group() as tg:
        while True:
            try:
                socket_url = await open_socket_url(cfg.app_token)
            except SlackApiError as exc:
                logger.warning("slack.socket.open_failed", error=str(exc))
                await anyio.sleep(RECONNECT_BACKOFF_S)
                continue

            try:
                async with websockets.connect(
                    socket_url,
                    ping_interval=10,
                    ping_timeout=10,
                ) as ws:
                    while True:
                        raw = await ws.recv()
                        if isinstance(raw, bytes):
                            raw = raw.decode("utf-8", "ignore")
                        try:
                            envelope = json.loads(raw)
                        except json.JSONDecodeError:
                            logger.warning("slack.socket.bad_payload")
                            continue
                        if not isinstance(envelope, dict):
                            continue

                        envelope_id = envelope.get("envelope_id")
                        if isinstance(envelope_id, str) and envelope_id:
                            await ws.send(json.dumps({"envelope_id": envelope_id}))

                        if not await _handle_envelope(cfg, envelope, tg):
                            break
            except WebSocketException as exc:
                logger.warning("slack.socket_failed", error=str(exc))
            except OSError as exc:
                logger.warning("slack.socket_failed", error=str(exc))

            await anyio.sleep(RECONNECT_BACKOFF_S)


def _log_startup(cfg: HubBridgeConfig, *, bot_name: str | None) -> None:
    cmd = cfg.slash_command
    logger.info(
        "startup.ready",
        port=cfg.port,
        bot_name=bot_name,
        commands=[
            f"{cmd} login <username> <password>",
            f"{cmd} profile",
            f"{cmd} logout",
            f"{cmd} help",
        ],
    )


async def run_main_loop(cfg: HubBridgeConfig) -> None:
    bot_name: str | None = None
    try:
        auth = await cfg.client.auth_test()
        bot_name = auth.user_name
    except SlackApiError as exc:
        logger.warning("slack.auth_test_failed", error=str(exc))

    _log_startup(cfg, bot_name=bot_name)
    try:
        await _run_socket_loop(cfg)
    finally:
        with anyio.CancelScope(shield=True):
            await cfg.api.close()
            await cfg.client.close()
