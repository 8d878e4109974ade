from __future__ import annotations

import click

from lazyhydrate.strategies import BUILTIN_NAMES

_DESCRIPTIONS: dict[str, str] = {
    "eager": "resolve immediately (alias: immediate)",
    "event": (
        "event(name): wait for a named event; "
        "bare: wait for this component's load event"
    ),
    "idle": "wait for the host's idle callback, or a short timer without one",
    "media": "media(query): wait until the media query matches",
    "visible": "visible(margin): wait until the element intersects the viewport",
}


@click.command()
def strategies() -> None:
    """List the built-in strategies."""
    for name in BUILTIN_NAMES:
        click.echo(f"{name:<8} {_DESCRIPTIONS[name]}")
