"""Output helpers: text formatting, printing, spinners and progress bars."""

from __future__ import annotations

import os

from .daemon import (
    PrintBody,
    ProgressBarAdvanceBody,
    ProgressBarStartBody,
    ProgressBarStopBody,
    SpinnerStartBody,
    SpinnerStopBody,
    simple_request,
)


def _is_slack() -> bool:
    return os.environ.get("SDK_INTERFACE_TYPE") == "slack"


class Ux:
    """Methods that present output on the interface (terminal or slack)."""

    def bold(self, text: str) -> str:
        """Return the text formatted as bold for the current interface."""
        if _is_slack():
            return f"*{text}*"
        return f"\033[1m{text}\033[0m"

    def italic(self, text: str) -> str:
        """Return the text formatted as italic for the current interface."""
        if _is_slack():
            return f"_{text}_"
        return f"\033[3m{text}\033[23m"

    def print(self, text: str) -> None:
        """Print text on the output interface."""
        simple_request("print", PrintBody(text=text), "POST")

    def spinner_start(self, text: str) -> None:
        """Show a spinner with the given text until spinner_stop is called."""
        simple_request("start-spinner", SpinnerStartBody(text=text), "POST")

    def spinner_stop(self, text: str) -> None:
        """Stop the running spinner, showing the given text."""
        simple_request("stop-spinner", SpinnerStopBody(text=text), "POST")

    def progress_bar_start(self, length: int, initial: int, message: str) -> None:
        """Show a progress bar of the given length with `initial` units filled."""
        body = ProgressBarStartBody(length=length, initial=initial, text=message)
        simple_request("progress-bar/start", body, "POST")

    def progress_bar_advance(self, increment: int) -> None:
        """Fill `increment` more units of the running progress bar."""
        body = ProgressBarAdvanceBody(increment=increment)
        simple_request("progress-bar/advance", body, "POST")

    def progress_bar_stop(self, message: str) -> None:
        """Complete the running progress bar, replacing its text."""
        simple_request("progress-bar/stop", ProgressBarStopBody(text=message), "POST")