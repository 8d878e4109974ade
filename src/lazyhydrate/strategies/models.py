"""Data structures shared by strategies and the requirement evaluator.

- StrategyComponent: what a strategy may know about the component it gates
- StrategyContext: the single argument every strategy receives
- Strategy: the async callable type stored in the registry
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol


class StrategyComponent(Protocol):
    """The component view handed to strategies.

    Any object exposing the host element and a stable identifier satisfies
    this protocol; the activator's Component descriptor is the usual one.
    """

    @property
    def element(self) -> Any: ...

    @property
    def id(self) -> str: ...


@dataclass(frozen=True, slots=True)
class StrategyContext:
    """Arguments for a single strategy invocation.

    Attributes:
        component: The component whose activation is being gated.
        argument: Verbatim text from inside the condition's parentheses,
            e.g. ``"min-width: 600px"`` for ``media(min-width: 600px)``.

    Example:
        >>> ctx = StrategyContext(component=component, argument="-50px 0px")
        >>> await visible(ctx)  # doctest: +SKIP
    """

    component: StrategyComponent
    argument: str | None = None


#: An async predicate that resolves once its condition is met. The resolved
#: value is ignored; strategies are not expected to raise.
Strategy = Callable[[StrategyContext], Awaitable[Any]]
