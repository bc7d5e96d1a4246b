from __future__ import annotations

import anyio

from kerberos_hub_bot import backend
from kerberos_hub_bot.config import BotSettings
from kerberos_hub_bot.sessions import Session, SessionStore


def test_build_config_wires_settings() -> None:
    settings = BotSettings(
        bot_token="xoxb-1",
        app_token="xapp-1",
        api_url="https://kerberos.example.com",
        port=4000,
        slash_command="/cams",
    )
    sessions = SessionStore()
    cfg = backend.build_config(settings, sessions=sessions)

    assert cfg.sessions is sessions
    assert cfg.app_token == "xapp-1"
    assert cfg.slash_command == "/cams"
    assert cfg.port == 4000

    async def _close() -> None:
        await cfg.api.close()
        await cfg.client.close()

    anyio.run(_close)


def test_build_config_creates_empty_store() -> None:
    settings = BotSettings(bot_token="xoxb-1", app_token="xapp-1")
    first = backend.build_config(settings)
    second = backend.build_config(settings)
    first.sessions.set("U1", Session(token="t", username="alice"))
    assert second.sessions.get("U1") is None


def test_main_config_error(monkeypatch, capsys) -> None:
    monkeypatch.setattr(backend, "load_env_file", lambda: False)
    assert backend.main({"SLACK_BOT_TOKEN": "xoxb-1"}) == 1
    assert "SLACK_APP_TOKEN" in capsys.readouterr().err


def test_main_runs_bot(monkeypatch) -> None:
    seen: list[BotSettings] = []
    monkeypatch.setattr(backend, "load_env_file", lambda: False)
    monkeypatch.setattr(backend, "setup_logging", lambda level: None)
    monkeypatch.setattr(backend, "build_and_run", seen.append)

    env = {"SLACK_BOT_TOKEN": "xoxb-1", "SLACK_APP_TOKEN": "xapp-1"}
    assert backend.main(env) == 0
    assert seen[0].bot_token == "xoxb-1"
