"""Top-level client bundling every SDK service."""

from __future__ import annotations

from dataclasses import dataclass, field

from .prompt import Prompt
from .sdk import Sdk
from .ux import Ux


@dataclass
class Client:
    """Client with the prompt, output and general SDK services."""

    prompt: Prompt = field(default_factory=Prompt)
    ux: Ux = field(default_factory=Ux)
    sdk: Sdk = field(default_factory=Sdk)