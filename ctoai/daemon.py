"""HTTP client for the local ops daemon and the JSON bodies it accepts."""

from __future__ import annotations

import json
import os
import re
import urllib.error
import urllib.request
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

BAD_PORT_MESSAGE = (
    "The Ops SDK requires a daemon process to be running; "
    "this does not appear to be the case."
)

_PORT_PATTERN = re.compile(r"[+-]?\d+")

# Talk to the daemon directly, never through a configured proxy.
_OPENER = urllib.request.build_opener(urllib.request.ProxyHandler({}))


class DaemonError(Exception):
    """A request to the daemon failed or returned something unusable."""


class DaemonUnavailableError(DaemonError):
    """No daemon port is configured in the environment."""


def _key(name: str, default: Any = None, *, omitempty: bool = False, factory=None):
    metadata = {"json": name, "omitempty": omitempty}
    if factory is not None:
        return field(default_factory=factory, metadata=metadata)
    return field(default=default, metadata=metadata)


@dataclass(kw_only=True)
class Body:
    """Base class of the JSON request bodies sent to the daemon."""

    def to_dict(self) -> dict[str, Any]:
        """Return the body as a JSON-ready dict, dropping empty optional keys."""
        result: dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if item.metadata.get("omitempty") and not value:
                continue
            result[item.metadata.get("json", item.name)] = value
        return result


@dataclass(kw_only=True)
class GetSecretBody(Body):
    key: str = _key("key", "")
    hidden: bool = _key("hidden", False)


@dataclass(kw_only=True)
class SetSecretBody(Body):
    key: str = _key("key", "")
    value: str = _key("value", "")


@dataclass(kw_only=True)
class PrintBody(Body):
    text: str = _key("text", "")


SpinnerStartBody = PrintBody


@dataclass(kw_only=True)
class SpinnerStopBody(Body):
    text: str = _key("text", "", omitempty=True)


ProgressBarStopBody = SpinnerStopBody


@dataclass(kw_only=True)
class ProgressBarStartBody(Body):
    length: int = _key("length", 0)
    initial: int = _key("initial", 0)
    text: str = _key("text", "")


@dataclass(kw_only=True)
class ProgressBarAdvanceBody(Body):
    increment: int = _key("increment", 0, omitempty=True)


@dataclass(kw_only=True)
class EventsBody(Body):
    start: str = _key("start", "")
    end: str = _key("end", "")


@dataclass(kw_only=True)
class _PromptEnvelope(Body):
    name: str = _key("name", "")
    prompt_type: str = _key("type", "")
    message: str = _key("message", "")
    flag: str = _key("flag", "", omitempty=True)

    def _envelope(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "type": self.prompt_type,
            "message": self.message,
        }
        if self.flag:
            result["flag"] = self.flag
        return result


@dataclass(kw_only=True)
class SecretPromptBody(_PromptEnvelope):
    prompt_type: str = _key("type", "secret")


@dataclass(kw_only=True)
class InputPromptBody(_PromptEnvelope):
    prompt_type: str = _key("type", "input")
    default: str = _key("default", "", omitempty=True)
    allow_empty: bool = _key("allowEmpty", False)


@dataclass(kw_only=True)
class NumberPromptBody(_PromptEnvelope):
    prompt_type: str = _key("type", "number")
    default: int | None = None
    maximum: int | None = None
    minimum: int | None = None

    def to_dict(self) -> dict[str, Any]:
        result = self._envelope()
        result["type"] = "number"
        for key in ("default", "maximum", "minimum"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result


@dataclass(kw_only=True)
class PasswordPromptBody(_PromptEnvelope):
    prompt_type: str = _key("type", "password")
    confirm: bool = _key("confirm", False)


@dataclass(kw_only=True)
class ConfirmPromptBody(_PromptEnvelope):
    prompt_type: str = _key("type", "confirm")
    default: bool = _key("default", False)


@dataclass(kw_only=True)
class ListPromptBody(_PromptEnvelope):
    """A list or autocomplete prompt; default is a value (str) or an index (int)."""

    prompt_type: str = _key("type", "list")
    choices: list[str] = _key("choices", factory=list)
    default: str | int | None = None

    def to_dict(self) -> dict[str, Any]:
        result = self._envelope()
        result["choices"] = list(self.choices)
        if self.default is not None:
            result["default"] = self.default
        return result


@dataclass(kw_only=True)
class CheckboxPromptBody(_PromptEnvelope):
    """A checkbox prompt; default is a list of values or of indexes."""

    prompt_type: str = _key("type", "checkbox")
    choices: list[str] = _key("choices", factory=list)
    default: list[str] | list[int] | None = None

    def to_dict(self) -> dict[str, Any]:
        result = self._envelope()
        result["choices"] = list(self.choices)
        if self.default is not None:
            result["default"] = list(self.default)
        return result


@dataclass(kw_only=True)
class EditorPromptBody(_PromptEnvelope):
    prompt_type: str = _key("type", "editor")
    default: str = _key("default", "")


@dataclass(kw_only=True)
class DatetimePromptBody(_PromptEnvelope):
    prompt_type: str = _key("type", "datetime")
    variant: str = _key("variant", "datetime")
    default: str = _key("default", "", omitempty=True)
    maximum: str = _key("maximum", "", omitempty=True)
    minimum: str = _key("minimum", "", omitempty=True)


def daemon_port() -> int:
    """Return the daemon port from SDK_SPEAK_PORT."""
    value = os.environ.get("SDK_SPEAK_PORT", "")
    if not _PORT_PATTERN.fullmatch(value):
        raise DaemonUnavailableError(BAD_PORT_MESSAGE)
    return int(value)


def _encode(body: Any) -> bytes:
    if isinstance(body, Body):
        body = body.to_dict()
    try:
        return json.dumps(body).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise DaemonError(f"Error marshalling JSON body: {exc}") from exc


def _request(endpoint: str, body: Any, method: str) -> bytes:
    payload = _encode(body)
    if method == "POST":
        url = f"http://127.0.0.1:{daemon_port()}/{endpoint}"
        request = urllib.request.Request(
            url,
            data=payload,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
    elif method == "GET":
        url = f"http://127.0.0.1:{daemon_port()}/{endpoint}"
        request = urllib.request.Request(url, method="GET")
    else:
        raise ValueError(f"Unsupported daemon request method {method!r}")

    try:
        with _OPENER.open(request) as response:
            return response.read()
    except urllib.error.HTTPError as exc:
        raw = exc.read()
        exc.close()
        if exc.code < 400:
            return raw
        try:
            detail = json.loads(raw)
        except ValueError as decode_error:
            raise DaemonError(
                f"Status code {exc.code}, with JSON decode error {decode_error} on body"
            ) from exc
        raise DaemonError(f"Status code {exc.code} with JSON error {detail}") from exc
    except OSError as exc:
        raise DaemonError(f"Error in daemon request: {exc}") from exc


def _decode_object(raw: bytes, what: str) -> dict[str, Any]:
    try:
        decoded = json.loads(raw)
    except ValueError as exc:
        raise DaemonError(f"{what} {exc}") from exc
    if decoded is None:
        return {}
    if not isinstance(decoded, dict):
        raise DaemonError(f"{what} expected a JSON object, got {decoded!r}")
    return decoded


def simple_request(endpoint: str, body: Any, method: str) -> None:
    """Send a request and ignore the response body."""
    _request(endpoint, body, method)


def sync_request(endpoint: str, body: Any, method: str) -> Any:
    """Send a request and return the "value" field of the JSON response."""
    raw = _request(endpoint, body, method)
    return _decode_object(raw, "Error decoding daemon response").get("value")


def async_request(endpoint: str, body: Any, method: str) -> dict[str, Any]:
    """Send a request and return the JSON object from the reply file it names."""
    raw = _request(endpoint, body, method)
    decoded = _decode_object(raw, "Error decoding daemon response")
    filename = decoded.get("replyFilename", "")
    if not isinstance(filename, str):
        raise DaemonError(f"Error decoding daemon response replyFilename {filename!r}")
    try:
        contents = Path(filename).read_bytes()
    except OSError as exc:
        raise DaemonError(f"Error reading daemon response {exc}") from exc
    return _decode_object(contents, "Error unmarshalling daemon response")