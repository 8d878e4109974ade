"""Deferred component activation gated by asynchronous requirement strings.

A component declares a requirement string such as ``visible && idle``. The
string is parsed into an AND/OR tree of named strategies, the strategies are
awaited concurrently, and only then is the component handed back to the host
runtime for hydration.

Usage:
    from lazyhydrate import install

    activator = install(host, window=window)
    activator.loader.async_data("counter", load_counter)
"""

from __future__ import annotations

__version__ = "0.1.0"

from lazyhydrate.activation import (  # noqa: E402
    ActivationState,
    AsyncActivator,
    Component,
    install,
)
from lazyhydrate.config import AsyncOptions  # noqa: E402
from lazyhydrate.events import EventBus  # noqa: E402
from lazyhydrate.requirements import (  # noqa: E402
    RequirementSyntaxError,
    await_requirements,
    parse_requirements,
    tokenize,
)

__all__ = [
    "__version__",
    "ActivationState",
    "AsyncActivator",
    "AsyncOptions",
    "Component",
    "EventBus",
    "RequirementSyntaxError",
    "await_requirements",
    "install",
    "parse_requirements",
    "tokenize",
]
