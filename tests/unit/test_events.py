"""Unit tests for the EventBus."""

from __future__ import annotations

import asyncio
import json
import logging

import pytest

from lazyhydrate.constants import LOAD_EVENT
from lazyhydrate.events import Event, EventBus
from lazyhydrate.logging import configure_logging


class TestEventBus:
    """Tests for listener management and dispatch."""

    @pytest.fixture
    def bus(self) -> EventBus:
        return EventBus()

    def test_dispatch_calls_listeners_in_order(self, bus: EventBus) -> None:
        received: list[tuple[str, Event]] = []
        bus.add_listener("ready", lambda e: received.append(("first", e)))
        bus.add_listener("ready", lambda e: received.append(("second", e)))

        count = bus.dispatch("ready", {"value": 1})

        assert count == 2
        assert [tag for tag, _ in received] == ["first", "second"]
        assert received[0][1] == Event(name="ready", detail={"value": 1})

    def test_dispatch_without_listeners(self, bus: EventBus) -> None:
        assert bus.dispatch("nobody") == 0

    def test_once_listener_removed_after_first_call(self, bus: EventBus) -> None:
        received: list[Event] = []
        bus.add_listener("ready", received.append, once=True)

        bus.dispatch("ready")
        bus.dispatch("ready")

        assert len(received) == 1
        assert bus.listener_count("ready") == 0

    def test_remove_listener(self, bus: EventBus) -> None:
        received: list[Event] = []
        bus.add_listener("ready", received.append)
        bus.remove_listener("ready", received.append)

        bus.dispatch("ready")

        assert received == []
        assert bus.listener_count("ready") == 0

    def test_remove_unknown_listener_is_ignored(self, bus: EventBus) -> None:
        bus.remove_listener("ready", lambda e: None)
        assert bus.listener_count("ready") == 0

    def test_listener_added_during_dispatch_waits_for_next_event(
        self, bus: EventBus
    ) -> None:
        late: list[Event] = []

        def subscribe_late(event: Event) -> None:
            bus.add_listener("ready", late.append)

        bus.add_listener("ready", subscribe_late, once=True)
        bus.dispatch("ready")
        assert late == []

        bus.dispatch("ready")
        assert len(late) == 1

    def test_load_dispatches_component_id(self, bus: EventBus) -> None:
        received: list[Event] = []
        bus.add_listener(LOAD_EVENT, received.append)

        bus.load("42")

        assert received == [Event(name=LOAD_EVENT, detail={"id": "42"})]


class TestWaitFor:
    """Tests for EventBus.wait_for()."""

    @pytest.fixture
    def bus(self) -> EventBus:
        return EventBus()

    @pytest.mark.asyncio
    async def test_resolves_with_event(self, bus: EventBus) -> None:
        waiter = asyncio.create_task(bus.wait_for("ready"))
        await asyncio.sleep(0)

        bus.dispatch("ready", "payload")
        event = await asyncio.wait_for(waiter, timeout=1)

        assert event.detail == "payload"
        assert bus.listener_count("ready") == 0

    @pytest.mark.asyncio
    async def test_predicate_filters_events(self, bus: EventBus) -> None:
        waiter = asyncio.create_task(
            bus.wait_for("ready", lambda e: e.detail == "mine")
        )
        await asyncio.sleep(0)

        bus.dispatch("ready", "theirs")
        await asyncio.sleep(0)
        assert not waiter.done()
        assert bus.listener_count("ready") == 1

        bus.dispatch("ready", "mine")
        event = await asyncio.wait_for(waiter, timeout=1)
        assert event.detail == "mine"

    @pytest.mark.asyncio
    async def test_cancelled_waiter_unsubscribes(self, bus: EventBus) -> None:
        waiter = asyncio.create_task(bus.wait_for("ready"))
        await asyncio.sleep(0)
        assert bus.listener_count("ready") == 1

        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        assert bus.listener_count("ready") == 0


class TestDispatchLogging:
    def test_dispatch_logs_channel(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(force_json=True, level=logging.DEBUG)

        EventBus().dispatch("ready")

        records = [
            json.loads(line)
            for line in capsys.readouterr().err.splitlines()
            if line.startswith("{")
        ]
        dispatched = [r for r in records if r["event"] == "event_dispatched"]
        assert dispatched[-1]["channel"] == "ready"
        assert dispatched[-1]["listeners"] == 0
