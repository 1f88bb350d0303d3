# pyright: reportUnusedCallResult=false
"""Validate content files on disk against their schemas."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from cyclopts import App, Parameter

from jsoncms.cli._commands._context import CLIContext
from jsoncms.cli._commands._shared import ExitCode, exit_with_error, format_issue_path
from jsoncms.content import FileNode, LocalBackend, NodeType
from jsoncms.exceptions import ContentValidationError, JsoncmsError
from jsoncms.schema import SchemaRegistry, SchemaValidator

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

app = App(
    name="validate",
    help="Validate content files against their schemas",
    help_on_error=True,
)


def _file_paths(nodes: Iterable[FileNode]) -> Iterator[str]:
    for node in nodes:
        if node.type is NodeType.DIRECTORY:
            yield from _file_paths(node.children)
        else:
            yield node.path


@app.default
def validate(
    *paths: Annotated[
        str,
        Parameter(
            help="Content paths relative to the content root. "
            "Validates every content file when omitted."
        ),
    ],
) -> None:
    """Validate content files against the schemas bound to their paths.

    Without arguments every JSON file outside the schema directory is
    checked. Exits with status 2 when any file is invalid, unreadable or
    outside the content root.
    """
    ctx = CLIContext.get_current()
    console = ctx.console

    root = ctx.settings.content_root()
    local = LocalBackend(root)
    validator = SchemaValidator(SchemaRegistry(root))

    try:
        targets = list(paths) or [
            path
            for path in _file_paths(local.list_tree())
            if root.schema_path_for(path) is not None
        ]
    except JsoncmsError as e:
        exit_with_error(e.message, ExitCode.IO_ERROR, console=ctx.error_console)

    if not targets:
        console.print(f"[dim]No content files found in {root.path}[/dim]")
        return

    failures = 0
    for raw in targets:
        try:
            path = root.normalize(raw)
            _ = validator.validate(path, local.read(path))
        except ContentValidationError as e:
            failures += 1
            console.print(f"[red]✗ {raw}[/red]: {e.message}")
            for issue in e.issues:
                console.print(
                    f"    [yellow]{format_issue_path(issue.path)}[/yellow] "
                    f"{issue.message} [dim]({issue.code.value})[/dim]"
                )
        except JsoncmsError as e:
            failures += 1
            console.print(f"[red]✗ {raw}[/red]: {e.message}")
        else:
            console.print(f"[green]✓ {path}[/green]")

    if failures:
        exit_with_error(
            f"{failures} of {len(targets)} file(s) failed validation",
            ExitCode.VALIDATION_ERROR,
            console=ctx.error_console,
        )

    ctx.logger.info("content_validated", files=len(targets))
    console.print(f"\n[dim]{len(targets)} file(s) valid[/dim]")
