"""
Fatal error types raised by the verification stages.

Every fatal condition carries the stage it happened in and a small context
dict (endpoint, address, tx hash) so a failed run can be diagnosed by hand.
"""

from __future__ import annotations

from typing import Any, Optional


class StageError(RuntimeError):
    """A condition that aborts the current stage."""

    def __init__(
        self,
        message: str,
        stage: str = "",
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.context = dict(context or {})

    def __str__(self) -> str:
        prefix = f"[{self.stage}] " if self.stage else ""
        if not self.context:
            return f"{prefix}{self.message}"
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{prefix}{self.message} ({details})"


class ConfigError(StageError):
    """Missing or malformed configuration, raised before any network activity."""
