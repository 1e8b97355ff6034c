"""Prompts that ask the user for input through the ops daemon."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Sequence

from .daemon import (
    CheckboxPromptBody,
    ConfirmPromptBody,
    DaemonError,
    DatetimePromptBody,
    EditorPromptBody,
    InputPromptBody,
    ListPromptBody,
    NumberPromptBody,
    PasswordPromptBody,
    SecretPromptBody,
    async_request,
)

_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})"
)


class DatetimeVariant(str, Enum):
    """Which parts of a moment the datetime prompt asks for."""

    DATETIME = "datetime"
    DATE = "date"
    TIME = "time"


def _format_rfc3339(value: datetime) -> str:
    """Format a datetime as RFC 3339 with whole seconds; naive values count as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    base = value.replace(microsecond=0, tzinfo=None).isoformat()
    offset = value.utcoffset()
    if not offset:
        return f"{base}Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    minutes = abs(minutes)
    return f"{base}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _parse_rfc3339(text: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware datetime."""
    match = _RFC3339.fullmatch(text)
    if match is None:
        raise ValueError(f"not an RFC 3339 timestamp: {text!r}")
    date_part, time_part, fraction, zone = match.groups()
    moment = datetime.strptime(f"{date_part}T{time_part}", "%Y-%m-%dT%H:%M:%S")
    if fraction:
        moment = moment.replace(microsecond=int(fraction[:6].ljust(6, "0")))
    if zone in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        hours, minutes = int(zone[1:3]), int(zone[4:6])
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))
    return moment.replace(tzinfo=tz)


def _answer(body: Any, name: str) -> Any:
    reply = async_request("prompt", body, "POST")
    try:
        return reply[name]
    except KeyError:
        raise DaemonError(f"Daemon returned incorrect JSON {reply}") from None


def _string_answer(body: Any, name: str) -> str:
    value = _answer(body, name)
    if not isinstance(value, str):
        raise DaemonError(f"Daemon returned non-string value {value!r}")
    return value


class Prompt:
    """Methods that ask the user questions on the interface (terminal or slack)."""

    def input(
        self,
        name: str,
        msg: str,
        *,
        flag: str = "",
        default: str = "",
        allow_empty: bool = False,
    ) -> str:
        """Ask for a single line of text."""
        body = InputPromptBody(
            name=name, message=msg, flag=flag, default=default, allow_empty=allow_empty
        )
        return _string_answer(body, name)

    def number(
        self,
        name: str,
        msg: str,
        *,
        flag: str = "",
        default: int | None = None,
        maximum: int | None = None,
        minimum: int | None = None,
    ) -> int:
        """Ask for a whole number, optionally bounded."""
        body = NumberPromptBody(
            name=name,
            message=msg,
            flag=flag,
            default=default,
            maximum=maximum,
            minimum=minimum,
        )
        value = _answer(body, name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise DaemonError(f"Daemon returned non-numeric value {value!r}")
        return int(value)

    def secret(self, name: str, msg: str, *, flag: str = "") -> str:
        """Ask for a secret, entered or chosen from the team's secret store."""
        body = SecretPromptBody(name=name, message=msg, flag=flag)
        return _string_answer(body, name)

    def password(
        self, name: str, msg: str, *, flag: str = "", confirm: bool = False
    ) -> str:
        """Ask for a password, obscured as it is typed."""
        body = PasswordPromptBody(name=name, message=msg, flag=flag, confirm=confirm)
        return _string_answer(body, name)

    def confirm(
        self, name: str, msg: str, *, flag: str = "", default: bool = False
    ) -> bool:
        """Ask a yes/no question."""
        body = ConfirmPromptBody(name=name, message=msg, flag=flag, default=default)
        value = _answer(body, name)
        if not isinstance(value, bool):
            raise DaemonError(f"Daemon returned non-boolean value {value!r}")
        return value

    def list(
        self,
        name: str,
        msg: str,
        choices: Sequence[str],
        *,
        flag: str = "",
        default: str | int | None = None,
        autocomplete: bool = False,
    ) -> str:
        """Ask the user to pick one of the choices.

        The default is either a choice (str) or the index of one (int).
        """
        body = ListPromptBody(
            name=name,
            prompt_type="autocomplete" if autocomplete else "list",
            message=msg,
            flag=flag,
            choices=[*choices],
            default=default,
        )
        return _string_answer(body, name)

    def checkbox(
        self,
        name: str,
        msg: str,
        choices: Sequence[str],
        *,
        flag: str = "",
        default: Sequence[str] | Sequence[int] | None = None,
    ) -> list[str]:
        """Ask the user to pick any number of the choices.

        The default is a sequence of choices or of their indexes.
        """
        body = CheckboxPromptBody(
            name=name,
            message=msg,
            flag=flag,
            choices=[*choices],
            default=None if default is None else [*default],
        )
        value = _answer(body, name)
        if not isinstance(value, list):
            raise DaemonError(f"Daemon returned non-array value {value!r}")
        for item in value:
            if not isinstance(item, str):
                raise DaemonError(f"Daemon returned non-string value {item!r}")
        return value

    def editor(self, name: str, msg: str, *, flag: str = "", default: str = "") -> str:
        """Ask for multi-line text in an editor."""
        body = EditorPromptBody(name=name, message=msg, flag=flag, default=default)
        return _string_answer(body, name)

    def datetime(
        self,
        name: str,
        msg: str,
        *,
        flag: str = "",
        variant: DatetimeVariant | str = DatetimeVariant.DATETIME,
        default: datetime | None = None,
        maximum: datetime | None = None,
        minimum: datetime | None = None,
    ) -> datetime:
        """Ask for a date and/or time; returns an aware datetime."""
        body = DatetimePromptBody(
            name=name,
            message=msg,
            flag=flag,
            variant=variant.value if isinstance(variant, DatetimeVariant) else variant,
            default="" if default is None else _format_rfc3339(default),
            maximum="" if maximum is None else _format_rfc3339(maximum),
            minimum="" if minimum is None else _format_rfc3339(minimum),
        )
        value = _answer(body, name)
        if not isinstance(value, str):
            raise DaemonError(f"Daemon returned non-string value {value!r}")
        try:
            return _parse_rfc3339(value)
        except ValueError:
            raise DaemonError(f"Daemon returned invalid timestamp {value}") from None