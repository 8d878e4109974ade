"""Unit tests for the built-in strategies."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from lazyhydrate.constants import LOAD_EVENT
from lazyhydrate.strategies.builtin import (
    BUILTIN_NAMES,
    BuiltinStrategies,
    register_builtin_strategies,
)
from lazyhydrate.strategies.models import StrategyContext
from lazyhydrate.strategies.registry import StrategyRegistry
from tests.fixtures.host import FakeElement, FakeWindow


@dataclass(frozen=True)
class StubComponent:
    id: str = "1"
    element: Any = field(default_factory=FakeElement)


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


def _context(argument: str | None = None, **component: Any) -> StrategyContext:
    return StrategyContext(component=StubComponent(**component), argument=argument)


@pytest.fixture
def builtins(window: FakeWindow) -> BuiltinStrategies:
    return BuiltinStrategies(window, idle_fallback_seconds=0.01)


class TestRegisterBuiltinStrategies:
    def test_registers_every_builtin(self, window: FakeWindow) -> None:
        registry = StrategyRegistry()
        register_builtin_strategies(registry, window)

        assert registry.list_names() == sorted(BUILTIN_NAMES)

    def test_registering_twice_raises(self, window: FakeWindow) -> None:
        registry = StrategyRegistry()
        register_builtin_strategies(registry, window)

        with pytest.raises(ValueError):
            register_builtin_strategies(registry, window)


class TestEager:
    @pytest.mark.asyncio
    async def test_resolves_immediately(self, builtins: BuiltinStrategies) -> None:
        assert await builtins.eager(_context()) is True


class TestEvent:
    """Tests for the event strategy."""

    @pytest.mark.asyncio
    async def test_named_event(
        self, builtins: BuiltinStrategies, window: FakeWindow
    ) -> None:
        task = asyncio.create_task(builtins.event(_context("my-event")))
        await _settle()
        assert not task.done()

        window.events.dispatch("other-event")
        await _settle()
        assert not task.done()

        window.events.dispatch("my-event")
        await asyncio.wait_for(task, timeout=1)
        assert window.events.listener_count("my-event") == 0

    @pytest.mark.asyncio
    async def test_load_event_matches_component_id(
        self, builtins: BuiltinStrategies, window: FakeWindow
    ) -> None:
        first = asyncio.create_task(builtins.event(_context(id="1")))
        second = asyncio.create_task(builtins.event(_context(id="2")))
        await _settle()

        window.events.load("2")
        await _settle()

        assert second.done()
        assert not first.done()
        assert window.events.listener_count(LOAD_EVENT) == 1

        window.events.dispatch(LOAD_EVENT, {"id": "1"})
        await asyncio.wait_for(first, timeout=1)

    @pytest.mark.asyncio
    async def test_load_event_accepts_object_detail(
        self, builtins: BuiltinStrategies, window: FakeWindow
    ) -> None:
        task = asyncio.create_task(builtins.event(_context(id="x")))
        await _settle()

        window.events.dispatch(LOAD_EVENT, StubComponent(id="x"))
        await asyncio.wait_for(task, timeout=1)

    @pytest.mark.asyncio
    async def test_cancellation_removes_listener(
        self, builtins: BuiltinStrategies, window: FakeWindow
    ) -> None:
        task = asyncio.create_task(builtins.event(_context("never")))
        await _settle()
        assert window.events.listener_count("never") == 1

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert window.events.listener_count("never") == 0


class TestIdle:
    @pytest.mark.asyncio
    async def test_waits_for_idle_callback(
        self, builtins: BuiltinStrategies, window: FakeWindow
    ) -> None:
        task = asyncio.create_task(builtins.idle(_context()))
        await _settle()
        assert not task.done()
        assert len(window.idle_queue) == 1

        window.run_idle()
        await asyncio.wait_for(task, timeout=1)

    @pytest.mark.asyncio
    async def test_falls_back_to_timer(self) -> None:
        window = FakeWindow(idle_callbacks=False)
        builtins = BuiltinStrategies(window, idle_fallback_seconds=0.01)

        loop = asyncio.get_running_loop()
        started = loop.time()
        await asyncio.wait_for(builtins.idle(_context()), timeout=1)
        assert loop.time() - started >= 0.01


class TestMedia:
    """Tests for the media strategy."""

    @pytest.mark.asyncio
    async def test_resolves_when_already_matching(
        self, builtins: BuiltinStrategies, window: FakeWindow
    ) -> None:
        window.matching.add("(min-width: 600px)")

        await asyncio.wait_for(
            builtins.media(_context("min-width: 600px")), timeout=1
        )
        assert "(min-width: 600px)" in window.queries

    @pytest.mark.asyncio
    async def test_waits_for_matching_change(
        self, builtins: BuiltinStrategies, window: FakeWindow
    ) -> None:
        task = asyncio.create_task(builtins.media(_context("max-width: 400px")))
        await _settle()
        query = window.queries["(max-width: 400px)"]

        query.change(False)
        await _settle()
        assert not task.done()

        query.change(True)
        await asyncio.wait_for(task, timeout=1)
        assert query.listeners == []

    @pytest.mark.asyncio
    async def test_missing_query_resolves(
        self, builtins: BuiltinStrategies, window: FakeWindow
    ) -> None:
        await asyncio.wait_for(builtins.media(_context()), timeout=1)
        assert window.queries == {}


class TestVisible:
    """Tests for the visible strategy."""

    @pytest.mark.asyncio
    async def test_waits_for_intersection(
        self, builtins: BuiltinStrategies, window: FakeWindow
    ) -> None:
        context = _context()
        element = context.component.element
        task = asyncio.create_task(builtins.visible(context))
        await _settle()

        window.intersect(element, False)
        await _settle()
        assert not task.done()

        window.intersect(element, True)
        await asyncio.wait_for(task, timeout=1)
        assert window.disconnected == [element]
        assert window.observers == []

    @pytest.mark.asyncio
    async def test_default_root_margin(
        self, builtins: BuiltinStrategies, window: FakeWindow
    ) -> None:
        task = asyncio.create_task(builtins.visible(_context()))
        await _settle()

        assert window.observers[0][1] == "0px 0px 0px 0px"
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_custom_root_margin(
        self, builtins: BuiltinStrategies, window: FakeWindow
    ) -> None:
        context = _context("-50px 0px")
        task = asyncio.create_task(builtins.visible(context))
        await _settle()

        assert window.observers[0][1] == "-50px 0px"
        window.intersect(context.component.element)
        await asyncio.wait_for(task, timeout=1)

    @pytest.mark.asyncio
    async def test_other_elements_do_not_resolve(
        self, builtins: BuiltinStrategies, window: FakeWindow
    ) -> None:
        task = asyncio.create_task(builtins.visible(_context()))
        await _settle()

        window.intersect(FakeElement(), True)
        await _settle()
        assert not task.done()

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert window.observers == []
