"""
Main CLI entry point for element-ordering
"""

import json
import logging
import sys
from io import StringIO
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from element_ordering import __version__
from element_ordering.core.config import Config
from element_ordering.core.element import ViolationKind
from element_ordering.core.element_loader import load_constructs
from element_ordering.core.engine import OrderingEngine
from element_ordering.core.errors import ConfigurationError, ElementLoadError

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

EXIT_VIOLATIONS = 1
EXIT_ERROR = 2

_KIND_STYLES = {
    ViolationKind.ORDER: "yellow",
    ViolationKind.GROUP_ORDER: "bold yellow",
    ViolationKind.DEPENDENCY_ORDER: "bold red",
    ViolationKind.MISSING_SPACING: "cyan",
    ViolationKind.EXTRA_SPACING: "cyan",
}


def _create_console() -> Console:
    """Console rendering to a buffer; colour is dropped outside a terminal."""
    return Console(file=StringIO(), highlight=False, width=120)


def _get_output(console: Console) -> str:
    return console.file.getvalue()


def _fail(ctx: click.Context, message: str) -> None:
    click.secho(f"Error: {message}", fg="red", err=True)
    ctx.exit(EXIT_ERROR)


def _load_constructs(ctx: click.Context, path: str):
    try:
        return load_constructs(Path(path))
    except ElementLoadError as e:
        _fail(ctx, str(e))


@click.group()
@click.version_option(
    version=__version__,
    prog_name="element-ordering",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Configuration file path",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Suppress output",
)
@click.pass_context
def cli(
    ctx,
    config: str | None,
    verbose: bool,
    quiet: bool,
):
    """Deterministic ordering of sibling elements

    Checks element documents (class members, object fields, attributes
    described in YAML or JSON) against ordering profiles:
    - Group classification and comparators
    - Dependency-aware ordering
    - Blank-line spacing between groups
    """
    ctx.ensure_object(dict)

    # Load configuration
    try:
        if config:
            ctx.obj["config"] = Config.from_file(Path(config))
        else:
            ctx.obj["config"] = Config.load_hierarchy(Path.cwd())
    except ConfigurationError as e:
        _fail(ctx, str(e))

    # Apply CLI flags
    if verbose:
        ctx.obj["config"].verbose = True
        logging.getLogger().setLevel(logging.DEBUG)

    if quiet:
        ctx.obj["config"].quiet = True
        logging.getLogger().setLevel(logging.WARNING)


@cli.command()
@click.argument(
    "elements",
    type=click.Path(exists=True),
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print violations as JSON",
)
@click.pass_context
def check(ctx, elements: str, as_json: bool):
    """Report ordering and spacing violations.

    Exits with status 1 when any violation is found.

    Examples:
        element-ordering check members.yaml
        element-ordering -c ordering.yaml check members.json --json
    """
    config: Config = ctx.obj["config"]
    engine = OrderingEngine(config)
    constructs = _load_constructs(ctx, elements)

    results = [
        (construct, engine.evaluate(construct.elements, construct.name))
        for construct in constructs
    ]
    total = sum(len(result.violations) for _construct, result in results)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {"construct": construct.name, **result.to_dict()}
                    for construct, result in results
                ],
                indent=2,
            )
        )
    elif not config.quiet:
        console = _create_console()
        for construct, result in results:
            title = construct.name or "construct"
            if not result.violations:
                console.print(Text(f"{title}: ordered", style="bold green"))
                continue
            table = Table(title=title, show_header=True, pad_edge=False, expand=False)
            table.add_column("Element", no_wrap=True)
            table.add_column("Kind")
            table.add_column("Message")
            for violation in result.violations:
                table.add_row(
                    violation.right,
                    Text(violation.kind.value, style=_KIND_STYLES[violation.kind]),
                    violation.message,
                )
            console.print(table)
        console.print(f"{total} violation(s) in {len(results)} construct(s)")
        click.echo(_get_output(console), nl=False)

    if total:
        ctx.exit(EXIT_VIOLATIONS)


@cli.command()
@click.argument(
    "elements",
    type=click.Path(exists=True),
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print target order as JSON",
)
@click.pass_context
def order(ctx, elements: str, as_json: bool):
    """Print the target order of each construct.

    Blank lines between names are the resolved spacing; gaps left
    unconstrained keep the source blank lines. Comments are listed above
    their element, partition comments at their source position.

    Examples:
        element-ordering order members.yaml
    """
    config: Config = ctx.obj["config"]
    engine = OrderingEngine(config)
    constructs = _load_constructs(ctx, elements)

    payload = []
    for construct in constructs:
        result = engine.evaluate(construct.elements, construct.name)
        if as_json:
            payload.append({"construct": construct.name, **result.to_dict()})
            continue

        if construct.name:
            click.echo(f"{construct.name}:")
        for index, element in enumerate(result.fixed_elements()):
            if index:
                for _ in range(element.lines_before):
                    click.echo("")
            for comment in element.comments:
                click.echo(f"  # {comment.text.strip()}")
            click.echo(f"  {element.name}")

    if as_json:
        click.echo(json.dumps(payload, indent=2))


@cli.command("validate-config")
@click.argument(
    "path",
    type=click.Path(exists=True),
)
@click.pass_context
def validate_config(ctx, path: str):
    """Validate a configuration file.

    Examples:
        element-ordering validate-config .element-ordering.yaml
    """
    try:
        config = Config.from_file(Path(path))
    except ConfigurationError as e:
        _fail(ctx, str(e))

    click.secho(
        f"Configuration is valid ({len(config.profiles)} profile(s))", fg="green"
    )
    for index, profile in enumerate(config.profiles):
        groups = ", ".join(tier.name for tier in profile.tiers) or "<none>"
        click.echo(
            f"  [{index}] {profile.name or 'profile'}: "
            f"{profile.sort.type} {profile.sort.order}; groups: {groups}"
        )


def main():
    """Main entry point"""
    try:
        cli(obj={})
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
