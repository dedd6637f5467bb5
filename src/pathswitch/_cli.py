"""Command line interface.

Usage:
    pathswitch [-v] routes CONFIG
    pathswitch [-v] match CONFIG PATH...

CONFIG is a YAML or JSON router config (see ``pathswitch._config``).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import click

from pathswitch import __version__
from pathswitch._router import Router
from pathswitch._types import RouterError

_LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)

_config_argument = click.argument(
    "config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (repeatable).")
@click.version_option(__version__, prog_name="pathswitch")
def main(verbose: int) -> None:
    """Compile URI templates into a router and match paths against it."""
    logging.basicConfig(
        level=_LOG_LEVELS[min(verbose, len(_LOG_LEVELS) - 1)],
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@_config_argument
def routes(config: Path) -> None:
    """Print the dispatch order: sort key, template, value."""
    router = _load(config)
    for entry in router:
        click.echo(f"{entry.sort_key}\t{entry.template}\t{entry.route.value!r}")


@main.command()
@_config_argument
@click.argument("paths", nargs=-1, required=True)
@click.pass_context
def match(ctx: click.Context, config: Path, paths: tuple[str, ...]) -> None:
    """Match each PATH and print the result as JSON (null on no match).

    Exits with status 1 if any path did not match.
    """
    router = _load(config)
    missed = False
    for path in paths:
        result = router.match(path)
        if result is None:
            missed = True
            click.echo(json.dumps(None))
            continue
        payload: dict[str, Any] = {
            "path": path,
            "template": str(result.template),
            "sort_key": result.sort_key,
            "params": result.params,
            "value": result.value,
        }
        click.echo(json.dumps(payload, default=repr))
    if missed:
        ctx.exit(1)


def _load(config: Path) -> Router:
    try:
        return Router.from_config(config)
    except RouterError as e:
        raise click.ClickException(str(e)) from e
