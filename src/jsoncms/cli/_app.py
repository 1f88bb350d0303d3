"""The command-line interface for jsoncms."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from jsoncms.config import LogLevel, Settings
from jsoncms.exceptions import ConfigError
from jsoncms.utils import create_logger, create_null_logger

from ._commands import register_commands
from ._commands._context import CLIContext
from ._commands._shared import ExitCode, exit_with_error

_HELP = "Git-backed JSON content management."


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="jsoncms",
        help=_HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _default(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
        project_root: Annotated[
            Path | None, Parameter(name="--project-root", help="Path to project root")
        ] = None,
        log_level: Annotated[
            LogLevel | None, Parameter(name="--log-level", help="Log level")
        ] = None,
    ) -> None:
        """Launch jsoncms CLI with global options.

        Args:
            tokens: Command tokens to pass to subcommands.
            config: Explicit path to config file.
            project_root: Path to project root directory.
            log_level: Override the configured log level.
        """
        if config is not None and not config.is_file():
            exit_with_error(
                f"Config file not found: {config}",
                ExitCode.LOAD_ERROR,
                console=error_console,
            )

        overrides: dict[str, object] | None = None
        if log_level is not None:
            overrides = {"logging": {"level": log_level.value}}

        try:
            settings = Settings.load(
                project_root, config_file=config, overrides=overrides
            )
        except ConfigError as e:
            exit_with_error(
                f"Invalid configuration: {e.message}",
                ExitCode.LOAD_ERROR,
                console=error_console,
            )

        # CLI output goes to the console; structured logs only to a file
        logging = settings.logging
        logger = (
            create_logger(
                level=logging.level.value,
                log_format=logging.format.value,  # type: ignore[arg-type]
                log_file=logging.file,
                max_bytes=logging.max_bytes,
                backup_count=logging.backup_count,
                component="cli",
            )
            if logging.file
            else create_null_logger()
        )

        ctx = CLIContext(
            settings=settings,
            console=console,
            error_console=error_console,
            logger=logger,
            project_root=project_root,
        )
        CLIContext.set_current(ctx)

        try:
            app(tokens)
        finally:
            CLIContext.reset()

    register_commands(app)
    return app


app = create_app()


def main() -> None:
    """Default entrypoint for the `jsoncms` CLI."""
    app.meta()
