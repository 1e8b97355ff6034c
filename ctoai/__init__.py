"""Client SDK for Ops commands: prompts, UX output, config, secrets and tracking via the local Ops daemon."""

__version__ = "2.0.0"

__all__ = ["client", "daemon", "prompt", "sdk", "ux"]