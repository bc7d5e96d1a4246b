from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass, field
from datetime import datetime, timezone


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class Session:
    token: str
    username: str
    login_time: datetime = field(default_factory=_now)


class SessionStore:
    # No per-user locking: concurrent writes for one user are last-write-wins.
    def __init__(self, backing: MutableMapping[str, Session] | None = None) -> None:
        self._sessions: MutableMapping[str, Session] = (
            {} if backing is None else backing
        )

    def set(self, user_id: str, session: Session) -> None:
        self._sessions[user_id] = session

    def get(self, user_id: str) -> Session | None:
        return self._sessions.get(user_id)

    def delete(self, user_id: str) -> Session | None:
        return self._sessions.pop(user_id, None)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
