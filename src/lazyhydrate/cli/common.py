from __future__ import annotations

import contextlib
from collections.abc import Generator

import click

from lazyhydrate.cli.context import ExitCode
from lazyhydrate.cli.output import format_error
from lazyhydrate.exceptions import LazyHydrateError
from lazyhydrate.logging import get_logger
from lazyhydrate.requirements import RequirementSyntaxError


@contextlib.contextmanager
def cli_error_handler() -> Generator[None, None, None]:
    """Context manager for common CLI error handling.

    - KeyboardInterrupt: Exit with code 130
    - RequirementSyntaxError: Format error with a hint about the grammar
    - LazyHydrateError: Format error with message
    - Generic exceptions: Log and format error

    Example:
        >>> with cli_error_handler():
        >>>     tree = parse_requirements(expression)
    """
    logger = get_logger(__name__)

    try:
        yield
    except KeyboardInterrupt:
        click.echo("\n\nInterrupted by user.", err=True)
        raise SystemExit(ExitCode.INTERRUPTED) from None
    except RequirementSyntaxError as e:
        logger.debug("parse_failed", expression=e.expression, position=e.position)
        error_msg = format_error(
            e.message,
            suggestion="Combine name or name(argument) conditions with && and ||",
        )
        click.echo(error_msg, err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    except LazyHydrateError as e:
        click.echo(format_error(e.message), err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    except Exception as e:
        logger.exception("unexpected_command_error")
        click.echo(f"Error: {e!s}", err=True)
        raise SystemExit(ExitCode.FAILURE) from e
