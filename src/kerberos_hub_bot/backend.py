from __future__ import annotations

import sys
from collections.abc import Mapping

import anyio

from .bridge import HubBridgeConfig, run_main_loop
from .client import SlackClient
from .config import BotSettings, ConfigError, load_env_file
from .kerberos import KerberosClient
from .logging_setup import get_logger, setup_logging
from .sessions import SessionStore

logger = get_logger(__name__)


def build_config(
    settings: BotSettings,
    *,
    sessions: SessionStore | None = None,
) -> HubBridgeConfig:
    return HubBridgeConfig(
        client=SlackClient(settings.bot_token),
        api=KerberosClient(base_url=settings.api_url),
        sessions=SessionStore() if sessions is None else sessions,
        app_token=settings.app_token,
        slash_command=settings.slash_command,
        port=settings.port,
    )


def build_and_run(settings: BotSettings) -> None:
    cfg = build_config(settings)
    logger.info(
        "startup.config",
        api_url=settings.api_url,
        slash_command=settings.slash_command,
    )
    anyio.run(run_main_loop, cfg)


def main(environ: Mapping[str, str] | None = None) -> int:
    load_env_file()
    try:
        settings = BotSettings.from_env(environ)
        setup_logging(settings.log_level)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    try:
        build_and_run(settings)
    except KeyboardInterrupt:
        logger.info("shutdown")
    return 0
