from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, TypeAlias, Union

ProfileValue: TypeAlias = Union[
    str,
    int,
    float,
    bool,
    None,
    list["ProfileValue"],
    dict[str, "ProfileValue"],
]

PROFILE_HEADER = "*📊 Your Kerberos.io Profile*"
KNOWN_FIELDS = ("username", "email", "name", "subscription", "cameras", "permissions")


def _present(profile: Mapping[str, Any], key: str) -> Any | None:
    # Falsy values (0, "", [], False) count as absent.
    value = profile.get(key)
    return value if value else None


def _render_number(value: float) -> str:
    if value != value or value in (float("inf"), float("-inf")):
        return "null"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def render_value(value: ProfileValue) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _render_number(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, Mapping):
        items = (
            f"{render_value(str(key))}:{render_value(item)}"
            for key, item in value.items()
        )
        return "{" + ",".join(items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(render_value(item) for item in value) + "]"
    return render_value(str(value))


def _plain(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return render_value(value)


def _capitalize(key: str) -> str:
    return key[:1].upper() + key[1:]


def format_profile(profile: Mapping[str, Any]) -> str:
    lines = [PROFILE_HEADER, ""]

    user = _present(profile, "username") or _present(profile, "email")
    if user is not None:
        lines.append(f"*User:* {_plain(user)}")

    name = _present(profile, "name")
    if name is not None:
        lines.append(f"*Name:* {_plain(name)}")

    subscription = _present(profile, "subscription")
    if subscription is not None:
        lines.append(f"*Subscription:* {_plain(subscription)}")

    cameras = _present(profile, "cameras")
    if cameras is not None:
        count = len(cameras) if isinstance(cameras, list) else cameras
        lines.append(f"*Cameras:* {_plain(count)}")

    permissions = _present(profile, "permissions")
    if permissions is not None:
        if isinstance(permissions, list):
            rendered = ", ".join(_plain(item) for item in permissions)
        else:
            rendered = _plain(permissions)
        lines.append(f"*Permissions:* {rendered}")

    for key, value in profile.items():
        if key in KNOWN_FIELDS or value is None:
            continue
        lines.append(f"*{_capitalize(key)}:* {render_value(value)}")

    return "\n".join(lines) + "\n"
