"""CLI entry point for lazyhydrate.

This module defines the Click-based command-line interface.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from dotenv import load_dotenv

from lazyhydrate.logging import configure_logging

# LAZYHYDRATE_* variables may come from a .env file; load before reading config.
load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

from lazyhydrate import __version__  # noqa: E402
from lazyhydrate.cli.commands.requirements import (  # noqa: E402
    parse_command,
    tokenize_command,
)
from lazyhydrate.cli.commands.strategies import strategies  # noqa: E402
from lazyhydrate.cli.context import ExitCode  # noqa: E402
from lazyhydrate.cli.output import format_error  # noqa: E402
from lazyhydrate.config import load_config  # noqa: E402
from lazyhydrate.exceptions import ConfigError  # noqa: E402

_VERBOSITY_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="lazyhydrate")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=False, path_type=str),
    default=None,
    help="Path to config file (overrides ./lazyhydrate.yaml).",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for INFO, -vv for DEBUG).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Suppress non-essential output (ERROR level only).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: str | None,
    verbose: int,
    quiet: bool,
) -> None:
    """lazyhydrate - inspect deferred-activation requirement strings."""
    ctx.ensure_object(dict)

    try:
        config = load_config(Path(config_file) if config_file else None)
    except ConfigError as e:
        details = [e.message]
        if e.field:
            details.append(f"  Field: {e.field}")
        if e.value is not None:
            details.append(f"  Value: {e.value}")
        click.echo(format_error("\n".join(details)), err=True)
        ctx.exit(ExitCode.FAILURE)
    ctx.obj["config"] = config

    # Priority: quiet > verbose > config
    if quiet:
        level = logging.ERROR
    elif verbose > 0:
        level = logging.INFO if verbose == 1 else logging.DEBUG
    else:
        level = _VERBOSITY_LEVELS.get(config.verbosity, logging.WARNING)
    configure_logging(level=level)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(tokenize_command)
cli.add_command(parse_command)
cli.add_command(strategies)

if __name__ == "__main__":
    cli()
