"""
Pipeline CLI commands.

Run compiled specs against artifacts given on the command line:
match, map, name, select and sink.
"""

import typer

from depkit.cli.utils import handle_errors, load_cli_config, parse_artifact, parse_properties
from depkit.core.mappers import build_artifact_mapper
from depkit.core.matchers import build_artifact_matcher
from depkit.core.name_mappers import build_name_mapper
from depkit.core.sinks import SinkContext, build_artifact_sink
from depkit.core.version_selectors import build_version_selector
from depkit.core.versions import parse_version

SPEC_HELP = "Spec expression (default from [defaults] in depkit.toml)"
DEFINE_HELP = "Property for ${name} placeholders (key=value)"


def match_command(
    ctx: typer.Context,
    artifacts: list[str] = typer.Argument(..., help="Coordinates g:a[:ext[:classifier]]:v"),
    spec: str | None = typer.Option(None, "--spec", "-s", help=SPEC_HELP),
    define: list[str] | None = typer.Option(None, "--define", "-D", help=DEFINE_HELP),
) -> None:
    """Show which artifacts an artifact matcher accepts."""
    config = load_cli_config(ctx)
    properties = config.merged_properties(parse_properties(define))
    with handle_errors():
        matcher = build_artifact_matcher(spec or config.defaults.matcher, properties)
    for coords in artifacts:
        artifact = parse_artifact(coords)
        mark = "✓" if matcher.test(artifact) else "✗"
        typer.echo(f"{mark} {artifact}")


def map_command(
    ctx: typer.Context,
    artifacts: list[str] = typer.Argument(..., help="Coordinates g:a[:ext[:classifier]]:v"),
    spec: str | None = typer.Option(None, "--spec", "-s", help=SPEC_HELP),
    define: list[str] | None = typer.Option(None, "--define", "-D", help=DEFINE_HELP),
) -> None:
    """Print artifacts transformed by an artifact mapper."""
    config = load_cli_config(ctx)
    properties = config.merged_properties(parse_properties(define))
    with handle_errors():
        mapper = build_artifact_mapper(spec or config.defaults.mapper, properties)
    for coords in artifacts:
        artifact = parse_artifact(coords)
        typer.echo(f"{artifact} -> {mapper.apply(artifact)}")


def name_command(
    ctx: typer.Context,
    artifacts: list[str] = typer.Argument(..., help="Coordinates g:a[:ext[:classifier]]:v"),
    spec: str | None = typer.Option(None, "--spec", "-s", help=SPEC_HELP),
    define: list[str] | None = typer.Option(None, "--define", "-D", help=DEFINE_HELP),
) -> None:
    """Print the names an artifact name mapper generates."""
    config = load_cli_config(ctx)
    properties = config.merged_properties(parse_properties(define))
    with handle_errors():
        name_mapper = build_name_mapper(spec or config.defaults.name_mapper, properties)
    for coords in artifacts:
        typer.echo(name_mapper.apply(parse_artifact(coords)))


def select_command(
    ctx: typer.Context,
    artifact: str = typer.Argument(..., help="Coordinates of the current artifact"),
    versions: str = typer.Option(..., "--versions", "-V", help="Comma separated candidates"),
    spec: str | None = typer.Option(None, "--spec", "-s", help=SPEC_HELP),
    define: list[str] | None = typer.Option(None, "--define", "-D", help=DEFINE_HELP),
) -> None:
    """Choose a version for an artifact among candidate versions."""
    config = load_cli_config(ctx)
    properties = config.merged_properties(parse_properties(define))
    with handle_errors():
        selector = build_version_selector(spec or config.defaults.selector, properties)
    try:
        candidates = sorted(parse_version(v) for v in versions.split(",") if v.strip())
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e
    typer.echo(selector.select(parse_artifact(artifact), candidates))


def sink_command(
    ctx: typer.Context,
    artifacts: list[str] = typer.Argument(..., help="Coordinates, optionally g:a:v=FILE"),
    spec: str | None = typer.Option(None, "--spec", "-s", help=SPEC_HELP),
    define: list[str] | None = typer.Option(None, "--define", "-D", help=DEFINE_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not touch the filesystem"),
) -> None:
    """Feed artifacts through an artifact sink and close it."""
    config = load_cli_config(ctx)
    properties = config.merged_properties(parse_properties(define))
    parsed = [parse_artifact(coords) for coords in artifacts]
    context = SinkContext(basedir=config.basedir, dry_run=dry_run)
    with handle_errors():
        sink = build_artifact_sink(spec or config.defaults.sink, properties, context)
        with sink:
            sink.accept_all(parsed)
    typer.echo(f"✓ {len(parsed)} artifacts fed to {sink.description}")
