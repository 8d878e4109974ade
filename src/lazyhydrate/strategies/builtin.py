"""Built-in strategies: eager, event, idle, media and visible.

Each strategy resolves once and never rejects. They observe the page through
a Window object, so BuiltinStrategies is constructed per activator rather
than living at module level.

- eager: resolves immediately
- event: waits for a named event, or for the load event carrying this
  component's id when no name is given
- idle: waits for the host's idle callback, or a short timer without one
- media: waits until a media query matches
- visible: waits until the element intersects the viewport, with an
  optional root margin
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from lazyhydrate.constants import (
    DEFAULT_ROOT_MARGIN,
    IDLE_FALLBACK_SECONDS,
    LOAD_EVENT,
)
from lazyhydrate.events import Event
from lazyhydrate.host import Window
from lazyhydrate.logging import get_logger
from lazyhydrate.strategies.models import Strategy, StrategyContext
from lazyhydrate.strategies.registry import StrategyRegistry

__all__ = ["BuiltinStrategies", "register_builtin_strategies", "BUILTIN_NAMES"]

logger = get_logger(__name__)

BUILTIN_NAMES: tuple[str, ...] = ("eager", "event", "idle", "media", "visible")


def _event_component_id(event: Event) -> Any:
    detail = event.detail
    if isinstance(detail, dict):
        return detail.get("id")
    return getattr(detail, "id", None)


class BuiltinStrategies:
    """The five built-in strategies bound to one Window."""

    def __init__(
        self,
        window: Window,
        *,
        idle_fallback_seconds: float = IDLE_FALLBACK_SECONDS,
    ) -> None:
        self._window = window
        self._idle_fallback_seconds = idle_fallback_seconds

    def as_dict(self) -> dict[str, Strategy]:
        return {
            "eager": self.eager,
            "event": self.event,
            "idle": self.idle,
            "media": self.media,
            "visible": self.visible,
        }

    async def eager(self, context: StrategyContext) -> bool:
        return True

    async def event(self, context: StrategyContext) -> None:
        """Wait for a named event, or for this component's load event."""
        if context.argument:
            await self._window.events.wait_for(context.argument)
            return

        component_id = context.component.id
        await self._window.events.wait_for(
            LOAD_EVENT,
            lambda event: _event_component_id(event) == component_id,
        )

    async def idle(self, context: StrategyContext) -> None:
        request_idle_callback: Callable[[Callable[..., None]], Any] | None = getattr(
            self._window, "request_idle_callback", None
        )
        if request_idle_callback is None:
            await asyncio.sleep(self._idle_fallback_seconds)
            return

        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def on_idle(*_: Any) -> None:
            if not future.done():
                future.set_result(None)

        request_idle_callback(on_idle)
        await future

    async def media(self, context: StrategyContext) -> None:
        """Wait until ``(argument)`` matches; resolve at once without one."""
        if not context.argument:
            logger.warning(
                "media_strategy_missing_query",
                component_id=context.component.id,
                detail="media strategy requires a media query, treating as eager",
            )
            return

        query = self._window.match_media(f"({context.argument})")
        if query.matches:
            return

        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def on_change(matches: bool) -> None:
            if matches and not future.done():
                future.set_result(None)

        query.add_change_listener(on_change)
        try:
            await future
        finally:
            query.remove_change_listener(on_change)

    async def visible(self, context: StrategyContext) -> None:
        """Wait for the element to intersect the viewport, then disconnect."""
        root_margin = context.argument or DEFAULT_ROOT_MARGIN
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def on_intersection(is_intersecting: bool) -> None:
            if is_intersecting and not future.done():
                future.set_result(None)

        disconnect = self._window.observe_intersection(
            context.component.element, root_margin, on_intersection
        )
        try:
            await future
        finally:
            disconnect()


def register_builtin_strategies(
    registry: StrategyRegistry,
    window: Window,
    *,
    idle_fallback_seconds: float = IDLE_FALLBACK_SECONDS,
) -> BuiltinStrategies:
    """Register the built-in strategies on a registry.

    Args:
        registry: Registry to populate.
        window: Page environment the strategies observe.
        idle_fallback_seconds: Delay used by ``idle`` without an idle callback.

    Returns:
        The BuiltinStrategies instance backing the registered callables.
    """
    builtins = BuiltinStrategies(window, idle_fallback_seconds=idle_fallback_seconds)
    for name, strategy in builtins.as_dict().items():
        registry.register_strategy(name, strategy)
    return builtins
