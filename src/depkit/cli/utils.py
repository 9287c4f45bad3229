"""
depkit CLI utilities.

Shared helpers used across CLI modules.
"""

import logging
import platform
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from depkit._version import get_version
from depkit.core.config import DepkitConfig, resolve_config
from depkit.core.errors import DepkitError
from depkit.core.ir.artifacts import Artifact

console = Console()
err_console = Console(stderr=True)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"depkit {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


def parse_properties(values: list[str] | None) -> dict[str, str]:
    """Turn ``-D key=value`` options into a dict."""
    properties: dict[str, str] = {}
    for value in values or []:
        key, sep, val = value.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected key=value, got {value!r}")
        properties[key.strip()] = val
    return properties


def load_cli_config(ctx: typer.Context) -> DepkitConfig:
    """The config resolved by the main callback, or the nearest depkit.toml."""
    if isinstance(ctx.obj, DepkitConfig):
        return ctx.obj
    return resolve_config()


def parse_artifact(coords: str) -> Artifact:
    """Parse ``g:a[:ext[:classifier]]:v[=FILE]``."""
    coords, sep, file = coords.partition("=")
    try:
        return Artifact.parse(coords, file=Path(file) if sep else None)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


@contextmanager
def handle_errors() -> Iterator[None]:
    """Report depkit errors in red and exit with code 1."""
    try:
        yield
    except DepkitError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(code=1) from e
