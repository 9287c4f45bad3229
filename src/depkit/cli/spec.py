"""
Spec inspection CLI commands.

Commands for parsing, dumping and type-checking spec strings.
"""

import typer
from rich.markup import escape
from rich.tree import Tree

from depkit.cli.utils import console, handle_errors, load_cli_config, parse_properties
from depkit.core.domains import Domain, builder_for
from depkit.core.ir.spec import Literal, Node, Op
from depkit.core.sinks import ArtifactSinkBuilder, SinkContext
from depkit.core.spec_lang import dump, parse_spec

spec_app = typer.Typer(help="Parse, dump and check spec expressions")


def _tree(node: Node, tree: Tree | None = None) -> Tree:
    if isinstance(node, Literal):
        label = f"[green]{escape(str(node))}[/green]"
    else:
        label = f"[bold cyan]{node.value}[/bold cyan]()"
    branch = Tree(label) if tree is None else tree.add(label)
    if isinstance(node, Op):
        for child in node.children:
            _tree(child, branch)
    return branch


@spec_app.command("parse")
def spec_parse(
    spec: str = typer.Argument(..., help="Spec expression, e.g. 'and(any(), snapshot())'"),
    plain: bool = typer.Option(False, "--plain", help="Plain indented dump instead of a tree"),
) -> None:
    """Parse a spec and show its syntax tree."""
    with handle_errors():
        node = parse_spec(spec)
    if plain:
        typer.echo(dump(node))
    else:
        console.print(_tree(node))


@spec_app.command("check")
def spec_check(
    ctx: typer.Context,
    spec: str = typer.Argument(..., help="Spec expression to compile"),
    domain: Domain = typer.Option(Domain.MATCHER, "--domain", "-d", help="Domain to compile under"),
    define: list[str] | None = typer.Option(
        None, "--define", "-D", help="Property for ${name} placeholders (key=value)"
    ),
) -> None:
    """Compile a spec under a domain and report the resulting value."""
    config = load_cli_config(ctx)
    properties = config.merged_properties(parse_properties(define))
    builder = builder_for(domain)
    kwargs = {}
    if builder is ArtifactSinkBuilder:
        kwargs["context"] = SinkContext(basedir=config.basedir, dry_run=True)
    with handle_errors():
        value = builder.compile(spec, properties, **kwargs)
    typer.echo(f"✓ {domain}: {value!r}")
