"""Asynchronous evaluation of requirement trees.

- Condition: await the registered strategy; an unknown name never resolves
- AND: start every child at once and wait for all of them
- OR: start every child at once and resolve with the first success

Nothing is cancelled: an OR keeps its losing branches running, and nothing
imposes a timeout. A requirement that can never be met stalls its component
silently.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

from lazyhydrate.logging import get_logger
from lazyhydrate.requirements.errors import RequirementEvaluationError
from lazyhydrate.requirements.parser import (
    ConditionNode,
    ExpressionNode,
    Operator,
    RequirementNode,
    parse_requirements,
)
from lazyhydrate.strategies.models import StrategyComponent, StrategyContext
from lazyhydrate.strategies.registry import StrategyRegistry

__all__ = ["RequirementComponent", "RequirementEvaluator", "await_requirements"]

logger = get_logger(__name__)


class RequirementComponent(StrategyComponent, Protocol):
    """A component carrying its own requirement string."""

    @property
    def strategy(self) -> str: ...


class RequirementEvaluator:
    """Evaluates requirement trees against a strategy registry.

    Example:
        ```python
        evaluator = RequirementEvaluator(registry)
        await evaluator.evaluate(component, parse_requirements("visible && idle"))
        ```
    """

    def __init__(self, registry: StrategyRegistry) -> None:
        self._registry = registry
        # Strong references to branches whose result no longer matters.
        self._stragglers: set[asyncio.Task[Any]] = set()

    async def evaluate(
        self,
        component: StrategyComponent,
        node: RequirementNode,
        *,
        expression: str | None = None,
    ) -> Any:
        """Wait until a requirement node is satisfied.

        Args:
            component: Component passed to every strategy.
            node: Root of the requirement tree.
            expression: Original requirement string, used in error messages.

        Returns:
            The strategy result for a condition, a list of child results for
            AND, or the winning child's result for OR.

        Raises:
            RequirementEvaluationError: If every branch of an OR failed.
            Exception: Whatever a strategy under an AND raised.
        """
        if isinstance(node, ConditionNode):
            return await self._evaluate_condition(component, node)
        if node.operator is Operator.AND:
            return await self._evaluate_all(component, node, expression)
        return await self._evaluate_any(component, node, expression)

    async def _evaluate_condition(
        self, component: StrategyComponent, node: ConditionNode
    ) -> Any:
        strategy = self._registry.get(node.name)
        if strategy is None:
            logger.debug(
                "unknown_strategy",
                strategy=node.name,
                component_id=component.id,
            )
            # Never satisfied.
            return await asyncio.get_running_loop().create_future()

        context = StrategyContext(component=component, argument=node.argument)
        return await strategy(context)

    async def _evaluate_all(
        self,
        component: StrategyComponent,
        node: ExpressionNode,
        expression: str | None,
    ) -> list[Any]:
        tasks = [
            asyncio.ensure_future(self.evaluate(component, child, expression=expression))
            for child in node.children
        ]
        try:
            return await asyncio.gather(*tasks)
        except Exception:
            # Siblings of a failed child keep running, as OR losers do.
            self._keep_running({task for task in tasks if not task.done()})
            raise

    async def _evaluate_any(
        self,
        component: StrategyComponent,
        node: ExpressionNode,
        expression: str | None,
    ) -> Any:
        pending: set[asyncio.Task[Any]] = {
            asyncio.ensure_future(self.evaluate(component, child, expression=expression))
            for child in node.children
        }
        errors: list[BaseException] = []

        while pending:
            done, pending = await asyncio.wait(
                pending, return_when=asyncio.FIRST_COMPLETED
            )
            winner: asyncio.Task[Any] | None = None
            for task in done:
                error = task.exception()
                if error is None:
                    winner = task
                else:
                    errors.append(error)

            if winner is not None:
                self._keep_running(pending)
                return winner.result()

        raise RequirementEvaluationError(
            "All alternatives failed",
            expression=expression,
            errors=errors,
        )

    def _keep_running(self, tasks: set[asyncio.Task[Any]]) -> None:
        for task in tasks:
            self._stragglers.add(task)
            task.add_done_callback(self._forget_straggler)

    def _forget_straggler(self, task: asyncio.Task[Any]) -> None:
        self._stragglers.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.debug("abandoned_branch_failed", error=str(task.exception()))


async def await_requirements(
    component: RequirementComponent,
    registry: StrategyRegistry,
    *,
    evaluator: RequirementEvaluator | None = None,
) -> None:
    """Parse a component's requirement string and wait until it is met.

    Args:
        component: Component whose ``strategy`` holds the requirement string.
        registry: Strategies available to the requirement.
        evaluator: Evaluator to reuse; a new one is created when omitted.

    Raises:
        RequirementSyntaxError: If the requirement string is malformed.
        RequirementEvaluationError: If every branch of an OR failed.
    """
    requirements = parse_requirements(component.strategy)
    evaluator = evaluator or RequirementEvaluator(registry)
    await evaluator.evaluate(component, requirements, expression=component.strategy)
