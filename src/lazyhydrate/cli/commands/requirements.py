from __future__ import annotations

from dataclasses import asdict

import click

from lazyhydrate.cli.common import cli_error_handler
from lazyhydrate.cli.console import console
from lazyhydrate.cli.context import ExitCode
from lazyhydrate.cli.output import (
    OutputFormat,
    format_json,
    requirement_tree,
)
from lazyhydrate.requirements import (
    ConditionToken,
    OperatorToken,
    RequirementErrorInfo,
    RequirementSyntaxError,
    parse_requirements,
    tokenize,
)

_FORMAT_OPTION = click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.TEXT.value,
    help="Output format.",
)


@click.command("tokenize")
@click.argument("expression")
@_FORMAT_OPTION
def tokenize_command(expression: str, fmt: str) -> None:
    """Show the tokens of a requirement string.

    Examples:
        lazyhydrate tokenize "visible && media(min-width: 600px)"
        lazyhydrate tokenize "(a || b) && c" --format json
    """
    with cli_error_handler():
        tokens = tokenize(expression)

        if fmt == OutputFormat.JSON.value:
            payload = []
            for token in tokens:
                if isinstance(token, ConditionToken):
                    payload.append(
                        {
                            "type": "condition",
                            "name": token.name,
                            "argument": token.argument,
                        }
                    )
                elif isinstance(token, OperatorToken):
                    payload.append({"type": "operator", "value": token.value.value})
                else:
                    payload.append({"type": "parenthesis", "value": token.value})
            click.echo(format_json(payload))
            return

        for token in tokens:
            kind = type(token).__name__.removesuffix("Token").lower()
            click.echo(f"{kind:<12} {token.render()}")


@click.command("parse")
@click.argument("expression")
@_FORMAT_OPTION
def parse_command(expression: str, fmt: str) -> None:
    """Show how a requirement string is grouped.

    Operators fold left to right without precedence, so this is the quickest
    way to check what a mixed && / || string actually waits for.

    Examples:
        lazyhydrate parse "visible && idle || event"
        lazyhydrate parse "(event(a) || event(b)) && visible" --format json
    """
    with cli_error_handler():
        try:
            tree = parse_requirements(expression)
        except RequirementSyntaxError as e:
            if fmt != OutputFormat.JSON.value:
                raise
            # JSON callers get the error as data on stdout.
            info = RequirementErrorInfo.from_error(e)
            click.echo(format_json({"error": asdict(info)}))
            raise SystemExit(ExitCode.FAILURE) from e

        if fmt == OutputFormat.JSON.value:
            click.echo(format_json(tree.to_dict()))
            return

        console.print(requirement_tree(tree))
        console.print(f"[dim]{tree.render()}[/dim]")
