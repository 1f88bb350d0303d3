from cyclopts import App

from ._context import CLIContext
from ._serve import app as serve_app
from ._shared import ExitCode, exit_with_error, format_json, get_error_console
from ._status import app as status_app
from ._validate import app as validate_app

__all__ = [
    "CLIContext",
    "ExitCode",
    "exit_with_error",
    "format_json",
    "get_error_console",
    "register_commands",
    "serve_app",
    "status_app",
    "validate_app",
]


def register_commands(app: App) -> None:
    app.command(serve_app)
    app.command(status_app)
    app.command(validate_app)
