"""Per-component activation state machine.

Every element carrying the load directive moves through three states, in
order and exactly once:

    DISCOVERED             marked inert in the same pass that found it
    AWAITING_REQUIREMENTS  requirement string evaluated, module downloaded
    ACTIVATED              inert marker cleared, subtree handed back to the host

The AsyncActivator owns every piece of mutable state involved: the strategy
registry, the module loader, the id counter and the element states. It is
created once per host by install().
"""

from __future__ import annotations

import asyncio
import itertools
import weakref
from dataclasses import dataclass
from enum import Enum
from typing import Any

from lazyhydrate.config import AsyncOptions, load_config, merge_options
from lazyhydrate.constants import (
    DATA_ATTRIBUTE,
    ID_ATTRIBUTE,
    INIT_EVENT,
    LOAD_DIRECTIVE,
    LOAD_SRC_ATTRIBUTE,
)
from lazyhydrate.exceptions import LazyHydrateError
from lazyhydrate.host import HostRuntime, Window
from lazyhydrate.loader import Download, ModuleLoader, parse_name
from lazyhydrate.logging import get_logger
from lazyhydrate.requirements.evaluator import RequirementEvaluator, await_requirements
from lazyhydrate.strategies.builtin import register_builtin_strategies
from lazyhydrate.strategies.registry import StrategyRegistry

__all__ = ["ActivationState", "AsyncActivator", "Component", "install"]

logger = get_logger(__name__)


class ActivationState(str, Enum):
    """Lifecycle state of a deferred component."""

    DISCOVERED = "discovered"
    AWAITING_REQUIREMENTS = "awaiting_requirements"
    ACTIVATED = "activated"


@dataclass(frozen=True, slots=True)
class Component:
    """Descriptor of a component awaiting activation.

    Attributes:
        id: The element's ``id`` attribute, or a counter value unique to the
            activator. Load events are matched against it.
        name: Data name used to download the component's implementation.
        strategy: Requirement string gating activation.
        element: The host element (opaque).
    """

    id: str
    name: str
    strategy: str
    element: Any


class AsyncActivator:
    """Gates hydration of host elements on their requirement strings.

    Example:
        ```python
        activator = AsyncActivator(host, window=window)
        activator.install()
        activator.async_data("counter", load_counter)

        # host finds <div x-data="counter" x-load="visible">:
        activator.discover(element)
        await activator.activate_when_ready(element)
        ```
    """

    def __init__(
        self,
        host: HostRuntime,
        *,
        window: Window | None = None,
        options: AsyncOptions | None = None,
        registry: StrategyRegistry | None = None,
        loader: ModuleLoader | None = None,
    ) -> None:
        """Initialize the activator.

        Args:
            host: Component framework to drive.
            window: Page environment; when given, the built-in strategies
                are registered against it.
            options: Activation options (defaults apply when omitted).
            registry: Strategy registry to use instead of a fresh one.
            loader: Module loader to use instead of a fresh one.
        """
        self._host = host
        self.window = window
        self.options = options or AsyncOptions()
        self.registry = registry or StrategyRegistry()
        self.loader = loader or ModuleLoader(host, self.options)
        self._evaluator = RequirementEvaluator(self.registry)
        self._states: weakref.WeakKeyDictionary[Any, ActivationState] = (
            weakref.WeakKeyDictionary()
        )
        self._counter = itertools.count()
        self._tasks: set[asyncio.Task[None]] = set()

        if window is not None:
            register_builtin_strategies(
                self.registry,
                window,
                idle_fallback_seconds=self.options.idle_fallback_seconds,
            )

    def install(self) -> None:
        """Register the load directive with the host and announce readiness."""
        self._host.directive(LOAD_DIRECTIVE, self.discover, self.activate_when_ready)
        if self.window is not None:
            self.window.events.dispatch(INIT_EVENT)
        logger.debug("activator_installed", strategies=self.registry.list_names())

    def next_index(self) -> int:
        return next(self._counter)

    def async_options(self, **overrides: Any) -> AsyncOptions:
        """Merge option overrides into the current options.

        Raises:
            ConfigError: If an override is unknown or invalid.
        """
        self.options = merge_options(self.options, **overrides)
        self.loader.options = self.options
        return self.options

    def async_data(self, name: str, download: Download | None = None) -> None:
        self.loader.async_data(name, download)

    def async_url(self, name: str, url: str) -> None:
        self.loader.async_url(name, url)

    def async_alias(self, alias: str | Download) -> None:
        self.loader.async_alias(alias)

    def state_of(self, element: Any) -> ActivationState | None:
        return self._states.get(element)

    def discover(self, element: Any) -> None:
        """Mark a newly found element inert.

        Must run synchronously in the host pass that finds the element, so
        the host never hydrates it by default. Elements already known are
        left alone.
        """
        if self._host.is_cloning() or element in self._states:
            return

        self._states[element] = ActivationState.DISCOVERED
        self._host.mark_inert(element)
        logger.debug("component_discovered")

    def schedule(self, element: Any) -> asyncio.Task[None]:
        """Discover an element and start its activation in the background.

        The returned task is referenced by the activator until it finishes.
        """
        self.discover(element)
        task = asyncio.ensure_future(self.activate_when_ready(element))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def activate_when_ready(self, element: Any) -> None:
        """Wait for an element's requirements and module, then activate it.

        Only acts on elements in the DISCOVERED state, so repeated calls
        never evaluate requirements or download a module twice. Failures
        are logged and leave the element inert.
        """
        if self._host.is_cloning():
            return
        if self._states.get(element) is not ActivationState.DISCOVERED:
            return

        self._states[element] = ActivationState.AWAITING_REQUIREMENTS
        component = self._prepare(element)
        log = logger.bind(component_id=component.id, component_name=component.name)
        log.debug("awaiting_requirements", strategy=component.strategy)

        try:
            await asyncio.gather(
                await_requirements(component, self.registry, evaluator=self._evaluator),
                self.loader.download(component.name),
            )
        except LazyHydrateError as e:
            log.error("activation_failed", error=e.message)
            return

        self._activate(element)
        self._states[element] = ActivationState.ACTIVATED
        log.debug("component_activated")

    def _prepare(self, element: Any) -> Component:
        name = parse_name(
            self._host.get_attribute(element, self._host.prefixed(DATA_ATTRIBUTE)),
            self.next_index,
        )
        strategy = (
            self._host.get_attribute(element, self._host.prefixed(LOAD_DIRECTIVE))
            or self.options.default_strategy
        )
        url = self._host.get_attribute(element, self._host.prefixed(LOAD_SRC_ATTRIBUTE))
        if url:
            self.loader.async_url(name, url)

        component_id = self._host.get_attribute(element, ID_ATTRIBUTE) or str(
            self.next_index()
        )
        return Component(id=component_id, name=name, strategy=strategy, element=element)

    def _activate(self, element: Any) -> None:
        self._host.destroy_tree(element)
        self._host.clear_inert(element)
        # An inert ancestor initializes this subtree when it activates.
        if self._host.has_inert_ancestor(element):
            return
        self._host.init_tree(element)


def install(
    host: HostRuntime,
    *,
    window: Window | None = None,
    options: AsyncOptions | None = None,
) -> AsyncActivator:
    """Create an activator for a host and register its directive.

    Args:
        host: Component framework to drive.
        window: Page environment for the built-in strategies.
        options: Activation options. Defaults to the ``options`` section of
            the layered configuration (lazyhydrate.yaml, user config and
            LAZYHYDRATE_OPTIONS__* environment variables).

    Returns:
        The installed AsyncActivator.

    Raises:
        ConfigError: If options are omitted and the configuration is invalid.
    """
    if options is None:
        options = load_config().options
    activator = AsyncActivator(host, window=window, options=options)
    activator.install()
    return activator
