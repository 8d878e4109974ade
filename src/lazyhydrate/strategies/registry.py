"""Strategy registry mapping condition names to async strategies.

The registry is an explicit object owned by an AsyncActivator, populated
once when the activator is installed. Lookups of unregistered names return
None rather than raising: the evaluator treats such conditions as never
satisfied.
"""

from __future__ import annotations

from collections.abc import Callable

from lazyhydrate.logging import get_logger
from lazyhydrate.strategies.models import Strategy

logger = get_logger(__name__)


class StrategyRegistry:
    """Registry of named strategies.

    Example:
        ```python
        registry = StrategyRegistry()

        @registry.register("ready")
        async def ready(context: StrategyContext) -> None:
            await app_ready.wait()

        registry.get("ready")  # -> ready
        registry.get("nope")  # -> None
        ```
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._strategies: dict[str, Strategy] = {}

    def register(self, name: str) -> Callable[[Strategy], Strategy]:
        """Register a strategy function under a name.

        Use as a decorator on an async function taking a StrategyContext.

        Args:
            name: Condition name used in requirement strings.

        Returns:
            Decorator that registers the function and returns it unchanged.

        Raises:
            ValueError: If a strategy with this name already exists.
        """

        def decorator(fn: Strategy) -> Strategy:
            self.register_strategy(name, fn)
            return fn

        return decorator

    def register_strategy(self, name: str, strategy: Strategy) -> None:
        """Register a strategy callable directly.

        Args:
            name: Condition name used in requirement strings.
            strategy: Async callable taking a StrategyContext.

        Raises:
            ValueError: If the name is empty or already registered.
        """
        if not name:
            raise ValueError("Strategy name must not be empty")
        if name in self._strategies:
            raise ValueError(f"Strategy '{name}' is already registered")

        self._strategies[name] = strategy
        logger.debug("strategy_registered", strategy=name)

    def get(self, name: str) -> Strategy | None:
        """Look up a strategy by name.

        Args:
            name: Condition name.

        Returns:
            The strategy, or None if nothing is registered under the name.
        """
        return self._strategies.get(name)

    def has(self, name: str) -> bool:
        return name in self._strategies

    def list_names(self) -> list[str]:
        """List registered strategy names, sorted."""
        return sorted(self._strategies)

    def clear(self) -> None:
        """Remove every strategy. Primarily useful for testing."""
        self._strategies.clear()
