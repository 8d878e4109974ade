"""Shared test fixtures for the lazyhydrate test suite.

Host Doubles (from tests/fixtures/host.py)
------------------------------------------

Classes:
    FakeElement: Attribute bag with a parent link and an inert flag.

    FakeHost: HostRuntime that records every call as (method, target) so
        tests can assert on the order of side effects.

    FakeWindow: Window with manual control over idle callbacks, media query
        changes and viewport intersections.

Fixtures:
    host: A fresh FakeHost for each test.

    window: A fresh FakeWindow (with idle callbacks) for each test.

Example:
    >>> @pytest.mark.asyncio
    ... async def test_visible(host, window):
    ...     activator = install(host, window=window)
    ...     element = FakeElement({"x-load": "visible"})
    ...     task = activator.schedule(element)
    ...     window.intersect(element)
    ...     await task
"""

from __future__ import annotations

from tests.fixtures.host import (
    FakeElement,
    FakeHost,
    FakeMediaQuery,
    FakeWindow,
    host,
    window,
)

__all__ = [
    "FakeElement",
    "FakeHost",
    "FakeMediaQuery",
    "FakeWindow",
    "host",
    "window",
]
