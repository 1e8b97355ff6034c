# ctoai

A Python SDK for Ops commands that run alongside the Ops Platform daemon. It
provides interactive prompts, output helpers for terminal and Slack, a per-user
config store, access to the team secret store, and event tracking. It has no
dependencies beyond the standard library.

## Installation

```
pip install ctoai
```

## How it talks to the daemon

Each call sends a JSON request over HTTP to `http://127.0.0.1:<port>/<endpoint>`.
The port comes from the `SDK_SPEAK_PORT` environment variable. If the variable
is unset or not an integer, `ctoai.daemon.DaemonUnavailableError` is raised.
Proxy settings in the environment are ignored.

Prompts and secret requests are answered asynchronously. The daemon replies
with the name of a file, and the answer is read as a JSON object from that
file.

## Usage

```python
from ctoai.client import Client

client = Client()

name = client.prompt.input("name", "What is your name?", default="Ops")
count = client.prompt.number("count", "How many?", minimum=0, maximum=10)
region = client.prompt.list(
    "region", "Which cloud?", ["AWS", "Google Cloud", "Azure"], default="AWS"
)

client.ux.spinner_start("Working...")
client.ux.spinner_stop("Done!")
client.ux.print(client.ux.bold(f"Hello, {name}"))

client.sdk.set_config("region", region)
print(client.sdk.get_config("region"))
```

A `Client` (in `ctoai.client`) holds one instance of each service: `prompt`
(`ctoai.prompt.Prompt`), `ux` (`ctoai.ux.Ux`) and `sdk` (`ctoai.sdk.Sdk`). You
can also create the services on their own.

### Prompts: `ctoai.prompt.Prompt`

Every prompt takes a `name` and a message. Optional settings are passed as
keyword arguments. `flag=` is accepted by every prompt and matches a command
line flag to the prompt.

| Method | Returns | Options |
| --- | --- | --- |
| `input` | `str` | `default`, `allow_empty` |
| `number` | `int` | `default`, `minimum`, `maximum` |
| `secret` | `str` | |
| `password` | `str` | `confirm` |
| `confirm` | `bool` | `default` |
| `list(name, msg, choices)` | `str` | `default` (a choice, or its index as `int`), `autocomplete` |
| `checkbox(name, msg, choices)` | `list[str]` | `default` (choices, or their indexes) |
| `editor` | `str` | `default` |
| `datetime` | aware `datetime.datetime` | `variant`, `default`, `minimum`, `maximum` |

For `datetime`, `variant` is a `DatetimeVariant` (`DATETIME`, `DATE`, `TIME`)
or its string value. Datetime bounds and defaults are sent as RFC 3339 with
whole seconds. Naive datetimes are treated as UTC.

### Output: `ctoai.ux.Ux`

- `bold(text)` and `italic(text)` return formatted text. When
  `SDK_INTERFACE_TYPE` is `slack`, they use Slack markup (`*text*`, `_text_`).
  Otherwise they use ANSI escape codes.
- `print(text)` shows text on the interface.
- `spinner_start(text)` and `spinner_stop(text)` control a spinner.
- `progress_bar_start(length, initial, message)`,
  `progress_bar_advance(increment)` and `progress_bar_stop(message)` control a
  progress bar.

### General SDK: `ctoai.sdk.Sdk`

- **Environment:**
  - `get_host_os()` reads `OPS_HOST_PLATFORM` and defaults to `"unknown"`.
  - `get_interface_type()` reads `SDK_INTERFACE_TYPE` and defaults to `"terminal"`.
  - `home_dir()` reads `SDK_HOME_DIR` and defaults to `"/root"`.
- **Config store:**
  - `get_config(key)` returns `""` for an absent value.
  - `get_all_config()` returns every key and value.
  - `set_config(key, value)` sets a value.
  - `delete_config(key)` returns `False` if the key was not present.
- **Secrets:**
  - `get_secret(key, hidden=False)` returns a secret. With `hidden=True`, the
    user is not told that the secret was used.
  - `set_secret(key, value)` stores a secret and returns the key it was stored
    under.
- **Tracking:**
  - `track(tags, event, metadata)` sends an analytics event.
  - `start(workflow_name)` sends a workflow trigger event.
  - For both `track` and `start`, failures to deliver are ignored. A missing
    daemon port still raises an error.
  - `events(start, end)` returns the recorded events as a list of dicts.
- **Identity:**
  - `user()` returns a `UserInfo` with `id`, `username` and `email`.
  - `team()` returns a `TeamInfo` with `id` and `name`.
- **Output:** `log(message)` writes the message to standard output as it is,
  with no newline added.
- **Deprecated:**
  - `get_state`, `get_all_state` and `set_state` work with the workflow state
    store.
  - `get_state_path()` reads `SDK_STATE_DIR`, and `get_config_path()` reads
    `SDK_CONFIG_DIR`. Each raises `RuntimeError` when its variable is unset.

### Errors

A failed daemon request, an HTTP status of 400 or above, or a reply of the
wrong shape raises `ctoai.daemon.DaemonError`. `DaemonUnavailableError` is a
subclass of it.

The request bodies the daemon accepts are dataclasses in `ctoai.daemon`, such as
`InputPromptBody` and `ProgressBarStartBody`. Each one turns into JSON through
`to_dict()`. The module also exposes `simple_request`, `sync_request` and
`async_request` for sending raw requests.

## What this package does not do

This package is a client only. It does not include the daemon, and it does not
show any prompt, spinner or progress bar by itself. Without a daemon listening
on `SDK_SPEAK_PORT`, every call that needs one fails. The package installs no
command-line program.

## Running the tests

```
pip install -e ".[test]"
pytest
```