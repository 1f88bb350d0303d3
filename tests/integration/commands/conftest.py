from collections.abc import Callable

import pytest
from rich.console import Console

from jsoncms.cli import create_app


@pytest.fixture
def jsoncms_cli_with_exit_code(console: Console, clean_env: None) -> Callable[..., int]:
    """Create CLI app for testing that returns the exit code.

    Global options are parsed by the meta app, so ``--project-root`` may
    precede the command.
    """

    app = create_app(console=console, error_console=console)

    def _run(*args: str) -> int:
        """Run CLI app and return exit code (0 if no SystemExit)."""

        try:
            app.meta(list(args))
        except SystemExit as e:
            return e.code if isinstance(e.code, int) else 1
        else:
            return 0

    return _run
