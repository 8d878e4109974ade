"""Output formatting helpers for CLI commands."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from rich.tree import Tree

from lazyhydrate.requirements import (
    ConditionNode,
    ExpressionNode,
    Operator,
    RequirementNode,
)

__all__ = ["OutputFormat", "format_error", "format_json", "requirement_tree"]


class OutputFormat(str, Enum):
    """Supported output formats."""

    TEXT = "text"
    JSON = "json"


def format_error(message: str, suggestion: str | None = None) -> str:
    """Format an error message with an optional suggestion.

    Example:
        >>> print(format_error("Empty requirement: ''", suggestion="Try 'eager'"))
        Error: Empty requirement: ''
        Suggestion: Try 'eager'
    """
    lines = [f"Error: {message}"]
    if suggestion:
        lines.append(f"Suggestion: {suggestion}")
    return "\n".join(lines)


def format_json(data: Any) -> str:
    """Format data as JSON with 2-space indentation."""
    return json.dumps(data, indent=2)


def _label(node: RequirementNode) -> str:
    if isinstance(node, ConditionNode):
        if node.argument is None:
            return f"[bold]{node.name}[/bold]"
        return f"[bold]{node.name}[/bold]([italic]{node.argument}[/italic])"
    word = "AND" if node.operator is Operator.AND else "OR"
    return f"[cyan]{word}[/cyan] {node.operator.value}"


def requirement_tree(node: RequirementNode, tree: Tree | None = None) -> Tree:
    """Render a requirement tree as a Rich Tree."""
    branch = tree.add(_label(node)) if tree is not None else Tree(_label(node))
    if isinstance(node, ExpressionNode):
        for child in node.children:
            requirement_tree(child, branch)
    return branch
