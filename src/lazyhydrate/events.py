"""Page-wide publish/subscribe channel.

EventBus stands in for the page's global event target. Strategies subscribe
to it for a single await; hosts and application code dispatch on it.

The load channel is keyed by component id: ``bus.load("3")`` releases only
the component whose id is ``"3"``, leaving other listeners on the same
channel waiting.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from lazyhydrate.constants import LOAD_EVENT
from lazyhydrate.logging import get_logger

__all__ = ["Event", "EventBus", "Listener"]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Event:
    """A dispatched event.

    Attributes:
        name: Channel the event was dispatched on.
        detail: Payload supplied by the dispatcher.
    """

    name: str
    detail: Any = None


Listener = Callable[[Event], None]


@dataclass(slots=True)
class _Subscription:
    callback: Listener
    once: bool


class EventBus:
    """Named-channel event dispatcher.

    Example:
        ```python
        bus = EventBus()
        waiter = asyncio.create_task(bus.wait_for("ready"))
        bus.dispatch("ready")
        await waiter
        ```
    """

    def __init__(self) -> None:
        self._subscriptions: dict[str, list[_Subscription]] = {}

    def add_listener(
        self, name: str, callback: Listener, *, once: bool = False
    ) -> None:
        """Subscribe a callback to a channel.

        Args:
            name: Channel name.
            callback: Called with each Event dispatched on the channel.
            once: Remove the callback after its first call.
        """
        self._subscriptions.setdefault(name, []).append(
            _Subscription(callback=callback, once=once)
        )

    def remove_listener(self, name: str, callback: Listener) -> None:
        """Unsubscribe a callback. Unknown callbacks are ignored."""
        subscriptions = self._subscriptions.get(name)
        if not subscriptions:
            return
        remaining = [s for s in subscriptions if s.callback != callback]
        if remaining:
            self._subscriptions[name] = remaining
        else:
            del self._subscriptions[name]

    def listener_count(self, name: str) -> int:
        return len(self._subscriptions.get(name, ()))

    def dispatch(self, name: str, detail: Any = None) -> int:
        """Deliver an event to every listener on a channel.

        Listeners added during dispatch are not called for this event.

        Args:
            name: Channel name.
            detail: Payload for the listeners.

        Returns:
            Number of listeners called.
        """
        subscriptions = list(self._subscriptions.get(name, ()))
        event = Event(name=name, detail=detail)

        for subscription in subscriptions:
            if subscription.once:
                self.remove_listener(name, subscription.callback)
            subscription.callback(event)

        logger.debug("event_dispatched", channel=name, listeners=len(subscriptions))
        return len(subscriptions)

    def load(self, component_id: str) -> int:
        """Release ``event`` strategies waiting on the load channel.

        Args:
            component_id: Id of the component to release.

        Returns:
            Number of listeners called.
        """
        return self.dispatch(LOAD_EVENT, {"id": component_id})

    async def wait_for(
        self,
        name: str,
        predicate: Callable[[Event], bool] | None = None,
    ) -> Event:
        """Wait for the first event on a channel matching a predicate.

        The subscription lives only as long as this await: it is removed on
        the first matching delivery, or when the waiting task is cancelled.

        Args:
            name: Channel name.
            predicate: Optional filter; non-matching events are ignored.

        Returns:
            The matching Event.
        """
        future: asyncio.Future[Event] = asyncio.get_running_loop().create_future()

        def listener(event: Event) -> None:
            if predicate is not None and not predicate(event):
                return
            self.remove_listener(name, listener)
            if not future.done():
                future.set_result(event)

        self.add_listener(name, listener)
        try:
            return await future
        finally:
            self.remove_listener(name, listener)
