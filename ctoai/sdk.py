"""Environment, configuration, secrets, analytics and account helpers."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .daemon import (
    DaemonError,
    DaemonUnavailableError,
    EventsBody,
    GetSecretBody,
    SetSecretBody,
    async_request,
    simple_request,
    sync_request,
)


def _getenv(name: str, fallback: str) -> str:
    return os.environ.get(name) or fallback


def _required_env(name: str, what: str) -> str:
    value = os.environ.get(name, "")
    if not value:
        raise RuntimeError(f"{what} not found in environment var {name}")
    return value


def _quiet_request(endpoint: str, body: Any) -> None:
    """Send a request whose failures are deliberately ignored."""
    try:
        simple_request(endpoint, body, "POST")
    except DaemonUnavailableError:
        raise
    except DaemonError:
        pass


def _wrapped_sync(endpoint: str, body: Any, method: str, context: str) -> Any:
    try:
        return sync_request(endpoint, body, method)
    except DaemonUnavailableError:
        raise
    except DaemonError as exc:
        raise DaemonError(f"{context}: {exc}") from exc


@dataclass
class UserInfo:
    """The user running the op."""

    id: str = ""
    username: str = ""
    email: str = ""


@dataclass
class TeamInfo:
    """The team of the user running the op."""

    id: str = ""
    name: str = ""


def _string_field(mapping: Mapping[str, Any], key: str) -> str:
    value = mapping.get(key)
    return value if isinstance(value, str) else ""


class Sdk:
    """General SDK methods backed by the environment and the daemon."""

    def get_host_os(self) -> str:
        """Return the host platform, or "unknown"."""
        return _getenv("OPS_HOST_PLATFORM", "unknown")

    def get_interface_type(self) -> str:
        """Return the interface the op is attached to, "terminal" by default."""
        return _getenv("SDK_INTERFACE_TYPE", "terminal")

    def home_dir(self) -> str:
        """Return the user home directory, "/root" by default."""
        return _getenv("SDK_HOME_DIR", "/root")

    def get_state_path(self) -> str:
        """Return the workflow state directory (deprecated; use home_dir)."""
        return _required_env("SDK_STATE_DIR", "State directory")

    def get_config_path(self) -> str:
        """Return the op config directory (deprecated)."""
        return _required_env("SDK_CONFIG_DIR", "Config directory")

    def get_state(self, key: str) -> Any:
        """Return a value from the workflow-local state store (deprecated)."""
        return sync_request("state/get", {"key": key}, "POST")

    def get_all_state(self) -> dict[str, Any]:
        """Return every key and value of the state store (deprecated)."""
        value = sync_request("state/get-all", {}, "POST")
        if not isinstance(value, dict):
            raise DaemonError(f"Received non-object JSON {value!r}")
        return value

    def set_state(self, key: str, value: Any) -> None:
        """Set a value in the state store (deprecated)."""
        simple_request("state/set", {"key": key, "value": value}, "POST")

    def get_config(self, key: str) -> str:
        """Return a config value; an absent value comes back as ""."""
        value = sync_request("config/get", {"key": key}, "POST")
        if value is None:
            return ""
        if not isinstance(value, str):
            raise DaemonError(f"Received non-string JSON {value!r}")
        return value

    def get_all_config(self) -> dict[str, str]:
        """Return every key and value of the config store."""
        value = sync_request("config/get-all", {}, "POST")
        if not isinstance(value, dict):
            raise DaemonError(f"Received non-object JSON {value!r}")
        for item in value.values():
            if not isinstance(item, str):
                raise DaemonError(f"Received non-string JSON {item!r}")
        return dict(value)

    def set_config(self, key: str, value: str) -> None:
        """Set a value in the config store."""
        simple_request("config/set", {"key": key, "value": value}, "POST")

    def delete_config(self, key: str) -> bool:
        """Delete a config value; False if the key was not present."""
        value = sync_request("config/delete", {"key": key}, "POST")
        if not isinstance(value, bool):
            raise DaemonError(f"Received non-boolean JSON {value!r}")
        return value

    def get_secret(self, key: str, *, hidden: bool = False) -> str:
        """Return a secret from the secret store, prompting if it is missing.

        With hidden set, the user is not told that the secret was used.
        """
        reply = async_request("secret/get", GetSecretBody(key=key, hidden=hidden), "POST")
        if key not in reply:
            raise DaemonError(f"Body should include key {key}")
        value = reply[key]
        if not isinstance(value, str):
            raise DaemonError(f"Daemon returned non-string value {value!r}")
        return value

    def set_secret(self, key: str, value: str) -> str:
        """Store a secret and return the key it was stored under."""
        reply = async_request("secret/set", SetSecretBody(key=key, value=value), "POST")
        stored = reply.get("key")
        if stored is None:
            raise DaemonError(f"Secret set of {key} failed")
        if not isinstance(stored, str):
            raise DaemonError(f"Daemon returned non-string value {stored!r}")
        return stored

    def track(
        self,
        tags: Iterable[str],
        event: str,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Send an analytics event; delivery failures are ignored."""
        body: dict[str, Any] = {"tags": list(tags), "event": event}
        body.update(metadata or {})
        _quiet_request("track", body)

    def start(self, workflow_name: str) -> None:
        """Send a workflow trigger event; delivery failures are ignored."""
        body = {"tags": ["trigger"], "workflowName": workflow_name, "trigger": True}
        _quiet_request("track", body)

    def events(self, start: str, end: str) -> list[dict[str, Any]]:
        """Return the events recorded between start and end."""
        result = _wrapped_sync(
            "events",
            EventsBody(start=start, end=end),
            "POST",
            "error getting events from backend",
        )
        if not isinstance(result, list):
            raise DaemonError("backend returned non-array JSON")
        if not all(isinstance(entry, dict) for entry in result):
            raise DaemonError("backend returned non-object JSON entries")
        return result

    def user(self) -> UserInfo:
        """Return the user running the op."""
        result = _wrapped_sync("user", None, "GET", "error getting user information")
        if not isinstance(result, dict):
            raise DaemonError(f"Received non-object JSON {result!r}")
        return UserInfo(
            id=_string_field(result, "id"),
            username=_string_field(result, "username"),
            email=_string_field(result, "email"),
        )

    def log(self, message: str) -> None:
        """Write the message to standard output as it is, without a newline."""
        sys.stdout.write(message)
        sys.stdout.flush()

    def team(self) -> TeamInfo:
        """Return the team of the user running the op."""
        result = _wrapped_sync("team", None, "GET", "error getting team information")
        if not isinstance(result, dict):
            raise DaemonError(f"Received non-object JSON {result!r}")
        return TeamInfo(
            id=_string_field(result, "id"),
            name=_string_field(result, "name"),
        )