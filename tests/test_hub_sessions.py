from datetime import datetime, timezone

from kerberos_hub_bot.sessions import Session, SessionStore


def test_set_get_delete() -> None:
    store = SessionStore()
    session = Session(token="test-token-123", username="test@example.com")

    store.set("U12345", session)
    assert "U12345" in store
    assert store.get("U12345") == session

    removed = store.delete("U12345")
    assert removed == session
    assert store.get("U12345") is None
    assert "U12345" not in store


def test_second_set_overwrites() -> None:
    store = SessionStore()
    first = Session(token="a", username="alice")
    second = Session(token="b", username="bob")

    store.set("U1", first)
    store.set("U1", second)

    assert store.get("U1") == second
    assert len(store) == 1


def test_delete_missing_is_noop() -> None:
    store = SessionStore()
    assert store.delete("U404") is None
    assert len(store) == 0


def test_injected_backing_map() -> None:
    backing: dict[str, Session] = {}
    store = SessionStore(backing)
    session = Session(token="t", username="carol")

    store.set("U9", session)

    assert backing == {"U9": session}


def test_session_login_time_defaults_to_now() -> None:
    before = datetime.now(timezone.utc)
    session = Session(token="t", username="dave")
    after = datetime.now(timezone.utc)
    assert before <= session.login_time <= after
