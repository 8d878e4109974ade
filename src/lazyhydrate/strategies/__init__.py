"""Strategies: named async conditions a requirement string refers to."""

from __future__ import annotations

from lazyhydrate.strategies.builtin import (
    BUILTIN_NAMES,
    BuiltinStrategies,
    register_builtin_strategies,
)
from lazyhydrate.strategies.models import Strategy, StrategyComponent, StrategyContext
from lazyhydrate.strategies.registry import StrategyRegistry

__all__ = [
    "BUILTIN_NAMES",
    "BuiltinStrategies",
    "Strategy",
    "StrategyComponent",
    "StrategyContext",
    "StrategyRegistry",
    "register_builtin_strategies",
]
