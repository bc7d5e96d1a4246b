from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_API_URL = "https://api.cloud.kerberos.io"
DEFAULT_PORT = 3000
DEFAULT_SLASH_COMMAND = "/hub"


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class BotSettings:
    bot_token: str
    app_token: str
    signing_secret: str | None = None
    api_url: str = DEFAULT_API_URL
    port: int = DEFAULT_PORT
    slash_command: str = DEFAULT_SLASH_COMMAND
    log_level: str = "info"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "BotSettings":
        env = os.environ if environ is None else environ
        bot_token = _require_str(env, "SLACK_BOT_TOKEN")
        app_token = _require_str(env, "SLACK_APP_TOKEN")
        signing_secret = _optional_str(env, "SLACK_SIGNING_SECRET")

        api_url = _optional_str(env, "KERBEROS_API_URL") or DEFAULT_API_URL
        api_url = api_url.rstrip("/")
        if not api_url.startswith(("http://", "https://")):
            raise ConfigError(
                "Invalid `KERBEROS_API_URL`; expected an http:// or https:// URL."
            )

        port = _optional_port(env, "PORT", default=DEFAULT_PORT)

        slash_command = _optional_str(env, "SLASH_COMMAND") or DEFAULT_SLASH_COMMAND
        slash_command = slash_command.lower()
        if not slash_command.startswith("/"):
            slash_command = f"/{slash_command}"
        if len(slash_command) < 2 or any(ch.isspace() for ch in slash_command):
            raise ConfigError(
                "Invalid `SLASH_COMMAND`; expected a single word like /hub."
            )

        log_level = _optional_str(env, "LOG_LEVEL") or "info"

        return cls(
            bot_token=bot_token,
            app_token=app_token,
            signing_secret=signing_secret,
            api_url=api_url,
            port=port,
            slash_command=slash_command,
            log_level=log_level.lower(),
        )


def load_env_file(path: Path | None = None) -> bool:
    if path is not None:
        return load_dotenv(path, override=False)
    return load_dotenv(override=False)


def _require_str(env: Mapping[str, str], key: str) -> str:
    value = env.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Invalid `{key}`; expected a non-empty string.")
    return value.strip()


def _optional_str(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key)
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def _optional_port(env: Mapping[str, str], key: str, *, default: int) -> int:
    raw = _optional_str(env, key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid `{key}`; expected an integer.") from exc
    if not 1 <= value <= 65535:
        raise ConfigError(f"Invalid `{key}`; expected 1-65535.")
    return value
