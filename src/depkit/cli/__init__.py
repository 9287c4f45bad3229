"""
depkit CLI package.

- spec.py: spec parse / check commands
- pipeline.py: match, map, name, select and sink commands
- utils.py: shared utilities
"""

import sys
from pathlib import Path

import typer

from depkit._version import get_version
from depkit.cli.pipeline import (
    map_command,
    match_command,
    name_command,
    select_command,
    sink_command,
)
from depkit.cli.spec import spec_app
from depkit.cli.utils import configure_logging, handle_errors, version_callback
from depkit.core.config import load_config, resolve_config

__version__ = get_version()

app = typer.Typer(
    help="""depkit – spec expressions for dependency pipelines

Specs are small function calls compiled into matchers, mappers,
name mappers, version selectors and sinks, e.g.

  depkit match -s 'and(org.example:*, not(snapshot()))' org.example:lib:1.0
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging"),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="depkit.toml to use instead of the nearest one"
    ),
) -> None:
    """depkit CLI main callback for global options."""
    configure_logging(verbose)
    with handle_errors():
        ctx.obj = load_config(config) if config else resolve_config()


app.add_typer(spec_app, name="spec")
app.command(name="match")(match_command)
app.command(name="map")(map_command)
app.command(name="name")(name_command)
app.command(name="select")(select_command)
app.command(name="sink")(sink_command)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


__all__ = ["__version__", "app", "main"]


if __name__ == "__main__":
    main(sys.argv[1:])
