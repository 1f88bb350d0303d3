# pyright: reportUnusedCallResult=false
"""Show Git status of content files."""

from typing import Annotated, Final

from cyclopts import App, Parameter

from jsoncms.cli._commands._context import CLIContext
from jsoncms.cli._commands._shared import ExitCode, exit_with_error, format_json
from jsoncms.exceptions import JsoncmsError, RepositoryNotInitializedError
from jsoncms.repository import ContentRepository, GitFileStatus

app = App(name="status", help="Show uncommitted content changes", help_on_error=True)

_STYLES: Final = {
    GitFileStatus.ADDED: ("green", "+"),
    GitFileStatus.MODIFIED: ("yellow", "~"),
    GitFileStatus.DELETED: ("red", "-"),
    GitFileStatus.UNTRACKED: ("cyan", "?"),
    GitFileStatus.UNKNOWN: ("magenta", "!"),
}


@app.default
def status(
    *,
    json: Annotated[
        bool,
        Parameter(help="Print the raw status matrix as JSON."),
    ] = False,
    show_unmodified: Annotated[
        bool,
        Parameter(name="--all", help="Include unmodified files."),
    ] = False,
) -> None:
    """Show the status of every file under the content root."""
    ctx = CLIContext.get_current()
    console = ctx.console

    try:
        with ContentRepository.from_settings(ctx.settings, logger=ctx.logger) as repo:
            rows = repo.status_matrix()
            branch = repo.current_branch()
    except RepositoryNotInitializedError as e:
        exit_with_error(
            f"Not a Git repository: {e.path}",
            ExitCode.NOT_FOUND,
            console=ctx.error_console,
        )
    except JsoncmsError as e:
        exit_with_error(e.message, console=ctx.error_console)

    if json:
        console.print(
            format_json([row.as_list() for row in rows]),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
        return

    console.print(f"[bold]On branch {branch}[/bold]")

    changed = [row for row in rows if row.status is not GitFileStatus.UNMODIFIED]
    shown = rows if show_unmodified else changed
    if not shown:
        console.print("[dim]No uncommitted content changes[/dim]")
        return

    for row in shown:
        style, marker = _STYLES.get(row.status, ("dim", " "))
        console.print(
            f"  [{style}]{marker} {row.path}[/{style}] [dim]{row.status}[/dim]"
        )

    console.print(f"\n[dim]{len(changed)} file(s) with uncommitted changes[/dim]")
