import json
import socket
import threading
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from ctoai.daemon import (
    CheckboxPromptBody,
    ConfirmPromptBody,
    DaemonError,
    DaemonUnavailableError,
    DatetimePromptBody,
    EditorPromptBody,
    EventsBody,
    GetSecretBody,
    InputPromptBody,
    ListPromptBody,
    NumberPromptBody,
    PasswordPromptBody,
    PrintBody,
    ProgressBarAdvanceBody,
    ProgressBarStartBody,
    SecretPromptBody,
    SetSecretBody,
    SpinnerStopBody,
    async_request,
    daemon_port,
    simple_request,
    sync_request,
)


@dataclass
class _Recorded:
    method: str
    path: str
    content_type: str | None
    body: object


class _DaemonStub:
    def __init__(self):
        self.requests = []
        self.status = 200
        self.response = b""


@pytest.fixture
def daemon(monkeypatch):
    stub = _DaemonStub()

    class Handler(BaseHTTPRequestHandler):
        def _handle(self):
            length = int(self.headers.get("Content-Length") or 0)
            raw = self.rfile.read(length)
            stub.requests.append(
                _Recorded(
                    self.command,
                    self.path,
                    self.headers.get("Content-Type"),
                    json.loads(raw) if raw else None,
                )
            )
            self.send_response(stub.status)
            self.send_header("Content-Length", str(len(stub.response)))
            self.end_headers()
            self.wfile.write(stub.response)

        do_POST = _handle
        do_GET = _handle

        def log_message(self, *args):
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    monkeypatch.setenv("SDK_SPEAK_PORT", str(server.server_address[1]))
    yield stub
    server.shutdown()
    server.server_close()


def _validate(recorded, path):
    assert recorded.content_type == "application/json"
    assert recorded.method == "POST"
    assert recorded.path == path


def test_daemon_port_reads_environment(monkeypatch):
    monkeypatch.setenv("SDK_SPEAK_PORT", "8080")
    assert daemon_port() == 8080


@pytest.mark.parametrize("value", ["", "abc", "12x"])
def test_daemon_port_invalid(monkeypatch, value):
    monkeypatch.setenv("SDK_SPEAK_PORT", value)
    with pytest.raises(DaemonUnavailableError):
        daemon_port()


def test_daemon_port_missing(monkeypatch):
    monkeypatch.delenv("SDK_SPEAK_PORT", raising=False)
    with pytest.raises(DaemonUnavailableError, match="daemon process"):
        daemon_port()


def test_simple_body_dicts():
    assert GetSecretBody(key="test").to_dict() == {"key": "test", "hidden": False}
    assert SetSecretBody(key="test", value="secret").to_dict() == {
        "key": "test",
        "value": "secret",
    }
    assert PrintBody(text="test").to_dict() == {"text": "test"}
    assert ProgressBarStartBody(length=2, initial=1, text="start").to_dict() == {
        "length": 2,
        "initial": 1,
        "text": "start",
    }
    assert EventsBody(start="2020-01-01", end="2020-06-01").to_dict() == {
        "start": "2020-01-01",
        "end": "2020-06-01",
    }


def test_omitempty_fields_are_dropped():
    assert SpinnerStopBody().to_dict() == {}
    assert SpinnerStopBody(text="stop").to_dict() == {"text": "stop"}
    assert ProgressBarAdvanceBody().to_dict() == {}
    assert ProgressBarAdvanceBody(increment=1).to_dict() == {"increment": 1}


def test_input_prompt_body():
    body = InputPromptBody(
        name="test", message="type test", flag="I", default="error", allow_empty=True
    )
    assert body.to_dict() == {
        "name": "test",
        "type": "input",
        "message": "type test",
        "flag": "I",
        "default": "error",
        "allowEmpty": True,
    }


def test_input_prompt_body_without_options():
    assert InputPromptBody(name="n", message="m").to_dict() == {
        "name": "n",
        "type": "input",
        "message": "m",
        "allowEmpty": False,
    }


def test_number_prompt_body():
    body = NumberPromptBody(name="test", message="type 2", flag="N", default=0, minimum=1)
    assert body.to_dict() == {
        "name": "test",
        "type": "number",
        "message": "type 2",
        "flag": "N",
        "default": 0,
        "minimum": 1,
    }


def test_secret_password_confirm_editor_bodies():
    assert SecretPromptBody(name="test", message="what is secret", flag="S").to_dict() == {
        "name": "test",
        "type": "secret",
        "message": "what is secret",
        "flag": "S",
    }
    assert PasswordPromptBody(
        name="test", message="what is password", flag="P", confirm=True
    ).to_dict() == {
        "name": "test",
        "type": "password",
        "message": "what is password",
        "flag": "P",
        "confirm": True,
    }
    assert ConfirmPromptBody(name="test", message="confirm?", default=True).to_dict() == {
        "name": "test",
        "type": "confirm",
        "message": "confirm?",
        "default": True,
    }
    assert EditorPromptBody(name="test", message="edit").to_dict() == {
        "name": "test",
        "type": "editor",
        "message": "edit",
        "default": "",
    }


def test_list_prompt_body_with_value_default():
    body = ListPromptBody(
        name="test", message="choose", choices=["aws", "gcd"], default="aws", flag="L"
    )
    assert body.to_dict() == {
        "name": "test",
        "type": "list",
        "message": "choose",
        "choices": ["aws", "gcd"],
        "default": "aws",
        "flag": "L",
    }


def test_list_prompt_body_autocomplete_index_default():
    body = ListPromptBody(
        name="test",
        prompt_type="autocomplete",
        message="choose",
        choices=["aws", "gcd"],
        default=1,
        flag="A",
    )
    assert body.to_dict()["type"] == "autocomplete"
    assert body.to_dict()["default"] == 1


def test_checkbox_prompt_body():
    body = CheckboxPromptBody(
        name="test", message="choose", choices=["aws", "gcd", "azure"], flag="C"
    )
    assert body.to_dict() == {
        "name": "test",
        "type": "checkbox",
        "message": "choose",
        "choices": ["aws", "gcd", "azure"],
        "flag": "C",
    }
    body.default = [0, 2]
    assert body.to_dict()["default"] == [0, 2]


def test_datetime_prompt_body():
    assert DatetimePromptBody(name="test", message="what date", flag="D").to_dict() == {
        "name": "test",
        "type": "datetime",
        "message": "what date",
        "flag": "D",
        "variant": "datetime",
    }
    stamp = "2006-01-02T15:04:05Z"
    full = DatetimePromptBody(
        name="t", message="m", default=stamp, maximum=stamp, minimum=stamp
    ).to_dict()
    assert full["default"] == full["maximum"] == full["minimum"] == stamp


def test_simple_request_posts_json(daemon):
    result = simple_request("print", PrintBody(text="test"), "POST")
    assert result is None
    assert len(daemon.requests) == 1
    _validate(daemon.requests[0], "/print")
    assert daemon.requests[0].body == {"text": "test"}


def test_simple_request_accepts_plain_dict(daemon):
    result = simple_request("state/set", {"key": "k", "value": [1, 2]}, "POST")
    assert result is None
    assert daemon.requests[0].body == {"key": "k", "value": [1, 2]}


def test_sync_request_returns_value(daemon):
    daemon.response = b'{"value": "config-value"}'
    assert sync_request("config/get", {"key": "test-key"}, "POST") == "config-value"
    _validate(daemon.requests[0], "/config/get")
    assert daemon.requests[0].body == {"key": "test-key"}


def test_sync_request_null_value(daemon):
    daemon.response = b'{"value": null}'
    assert sync_request("config/get", {"key": "k"}, "POST") is None


def test_sync_request_missing_value(daemon):
    daemon.response = b"{}"
    assert sync_request("config/get", {"key": "k"}, "POST") is None


def test_sync_request_bad_json(daemon):
    daemon.response = b"not json"
    with pytest.raises(DaemonError, match="Error decoding daemon response"):
        sync_request("config/get", {}, "POST")


def test_sync_request_get_method(daemon):
    daemon.response = b'{"value": {"id": "1"}}'
    assert sync_request("user", None, "GET") == {"id": "1"}
    assert daemon.requests[0].method == "GET"
    assert daemon.requests[0].path == "/user"


def test_async_request_reads_reply_file(daemon, tmp_path):
    reply = tmp_path / "response-mocktest"
    reply.write_text('{"test": "secret"}')
    daemon.response = json.dumps({"replyFilename": str(reply)}).encode()
    result = async_request("secret/get", GetSecretBody(key="test"), "POST")
    assert result == {"test": "secret"}
    _validate(daemon.requests[0], "/secret/get")
    assert daemon.requests[0].body == {"key": "test", "hidden": False}


def test_async_request_missing_file(daemon, tmp_path):
    missing = tmp_path / "missing"
    daemon.response = json.dumps({"replyFilename": str(missing)}).encode()
    with pytest.raises(DaemonError, match="Error reading daemon response"):
        async_request("prompt", {}, "POST")


def test_async_request_bad_reply_file(daemon, tmp_path):
    reply = tmp_path / "reply"
    reply.write_text("[1, 2]")
    daemon.response = json.dumps({"replyFilename": str(reply)}).encode()
    with pytest.raises(DaemonError, match="Error unmarshalling daemon response"):
        async_request("prompt", {}, "POST")


def test_error_status_with_json(daemon):
    daemon.status = 400
    daemon.response = b'{"error": "bad"}'
    with pytest.raises(DaemonError, match="Status code 400 with JSON error"):
        simple_request("print", {}, "POST")


def test_error_status_without_json(daemon):
    daemon.status = 500
    daemon.response = b"oops"
    with pytest.raises(DaemonError, match="Status code 500, with JSON decode error"):
        sync_request("print", {}, "POST")


def test_unsupported_method(daemon):
    with pytest.raises(ValueError):
        simple_request("print", {}, "PUT")
    assert daemon.requests == []


def test_unserialisable_body():
    with pytest.raises(DaemonError, match="Error marshalling JSON body"):
        simple_request("print", {"x": object()}, "POST")


def test_connection_failure(monkeypatch):
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    monkeypatch.setenv("SDK_SPEAK_PORT", str(port))
    with pytest.raises(DaemonError, match="Error in daemon request"):
        simple_request("print", {}, "POST")


def test_request_without_port(monkeypatch):
    monkeypatch.delenv("SDK_SPEAK_PORT", raising=False)
    with pytest.raises(DaemonUnavailableError):
        simple_request("print", {}, "POST")