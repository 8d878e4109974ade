"""Protocols for the collaborators lazyhydrate drives.

HostRuntime is the component framework: it finds elements, hydrates
subtrees and binds data implementations. Window is the page environment the
built-in strategies observe. Both are structural protocols; any object with
matching methods can be used.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from lazyhydrate.events import EventBus

__all__ = [
    "DiscoverCallback",
    "ActivateCallback",
    "HostRuntime",
    "MediaQueryList",
    "Window",
]

DiscoverCallback = Callable[[Any], None]
ActivateCallback = Callable[[Any], Awaitable[None]]


class HostRuntime(Protocol):
    """The component framework hosting deferred components.

    Elements are opaque to lazyhydrate. They must be hashable and weakly
    referenceable, which plain Python objects are by default.
    """

    def prefixed(self, name: str) -> str:
        """Return the framework's attribute name, e.g. ``load`` -> ``x-load``."""
        ...

    def get_attribute(self, element: Any, name: str) -> str | None:
        """Return an attribute value, or None when absent."""
        ...

    def mark_inert(self, element: Any) -> None:
        """Stop the framework from hydrating the element's subtree."""
        ...

    def clear_inert(self, element: Any) -> None:
        """Remove the inert marker set by mark_inert()."""
        ...

    def has_inert_ancestor(self, element: Any) -> bool:
        """Whether an ancestor of the element is still inert."""
        ...

    def init_tree(self, element: Any) -> None:
        """Hydrate the subtree rooted at the element."""
        ...

    def destroy_tree(self, element: Any) -> None:
        """Tear down any framework state for the subtree."""
        ...

    def is_cloning(self) -> bool:
        """Whether the framework is in a cloning pass."""
        ...

    def register_data(self, name: str, implementation: Any) -> None:
        """Bind a downloaded data implementation under a component name."""
        ...

    def directive(
        self,
        name: str,
        discover: DiscoverCallback,
        activate: ActivateCallback,
    ) -> None:
        """Register a directive.

        ``discover`` must run synchronously in the pass that finds the
        element, before the framework would hydrate it; ``activate`` is
        scheduled afterwards.
        """
        ...


class MediaQueryList(Protocol):
    """Result of Window.match_media()."""

    @property
    def matches(self) -> bool: ...

    def add_change_listener(self, callback: Callable[[bool], None]) -> None:
        """Call ``callback(matches)`` on each change of the query's state."""
        ...

    def remove_change_listener(self, callback: Callable[[bool], None]) -> None: ...


class Window(Protocol):
    """Page environment observed by the built-in strategies.

    ``request_idle_callback`` is optional: when the attribute is missing the
    ``idle`` strategy falls back to a short timer.
    """

    events: EventBus

    def match_media(self, query: str) -> MediaQueryList: ...

    def observe_intersection(
        self,
        element: Any,
        root_margin: str,
        callback: Callable[[bool], None],
    ) -> Callable[[], None]:
        """Call ``callback(is_intersecting)`` on visibility changes.

        Returns:
            A function that disconnects the observer.
        """
        ...
