# ruff: noqa: TC003  # Path needed at runtime for dataclass field
"""CLI context for global state management.

The CLIContext is set once per invocation by the global option handler and
made available to every command via contextvars.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console

from jsoncms.config import Settings
from jsoncms.utils import create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

_current_cli_context: contextvars.ContextVar[CLIContext | None] = (
    contextvars.ContextVar("cli_context", default=None)
)


def _stderr_console() -> Console:
    return Console(stderr=True)


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Global CLI context with settings and output consoles.

    Attributes:
        settings: Loaded settings.
        console: Console for regular output.
        error_console: Console for errors.
        logger: Structured logger; discards events unless a log file is
            configured.
        project_root: Project root given on the command line, if any.
    """

    settings: Settings = field(repr=False)
    console: Console = field(default_factory=Console, repr=False)
    error_console: Console = field(default_factory=_stderr_console, repr=False)
    logger: FilteringBoundLogger = field(default_factory=create_null_logger, repr=False)
    project_root: Path | None = None

    @classmethod
    def get_current(cls) -> CLIContext:
        """Get the active CLIContext, or one loaded from the current directory."""
        ctx = _current_cli_context.get()
        if ctx is not None:
            return ctx
        return cls(settings=Settings.load())

    @classmethod
    def set_current(cls, ctx: CLIContext) -> None:
        _ = _current_cli_context.set(ctx)

    @classmethod
    def reset(cls) -> None:
        """Reset to default context."""
        _ = _current_cli_context.set(None)
