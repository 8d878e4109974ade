"""Requirement strings: parsing and asynchronous evaluation.

A requirement string names the strategies a component waits for and how
they combine:

    eager
    visible && idle
    event(ready) || eager
    (event(a) || event(b)) && visible
    media(min-width: 600px)

Module Structure
----------------
- parser.py: tokenizer and recursive-descent parser producing an AND/OR tree
- evaluator.py: concurrent AND/OR evaluation against a StrategyRegistry
- errors.py: RequirementSyntaxError and friends
"""

from __future__ import annotations

from lazyhydrate.requirements.errors import (
    RequirementError,
    RequirementErrorInfo,
    RequirementEvaluationError,
    RequirementSyntaxError,
)
from lazyhydrate.requirements.evaluator import (
    RequirementComponent,
    RequirementEvaluator,
    await_requirements,
)
from lazyhydrate.requirements.parser import (
    ConditionNode,
    ConditionToken,
    ExpressionNode,
    Operator,
    OperatorToken,
    ParenthesisToken,
    RequirementNode,
    Token,
    parse_requirements,
    tokenize,
)

__all__: list[str] = [
    # Errors
    "RequirementError",
    "RequirementErrorInfo",
    "RequirementEvaluationError",
    "RequirementSyntaxError",
    # Parsing
    "ConditionNode",
    "ConditionToken",
    "ExpressionNode",
    "Operator",
    "OperatorToken",
    "ParenthesisToken",
    "RequirementNode",
    "Token",
    "parse_requirements",
    "tokenize",
    # Evaluation
    "RequirementComponent",
    "RequirementEvaluator",
    "await_requirements",
]
