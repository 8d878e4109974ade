"""Requirement-string tokenizer and parser.

A requirement string combines named strategies with ``&&`` and ``||``:

- ``eager`` - a single strategy
- ``media(min-width: 600px)`` - a strategy with a free-text argument
- ``visible && idle`` - both strategies must be met
- ``event(ready) || eager`` - either strategy is enough
- ``(event(a) || event(b)) && visible`` - parentheses group terms

Both operators bind equally and fold left to right, so ``a && b || c`` means
``(a && b) || c`` and ``a || b && c`` means ``(a || b) && c``. Runs of the
same operator collapse into one node: ``a && b && c`` is a single AND with
three children.

Backwards compatibility:
- A single ``|`` is read as ``&&``.
- ``immediate`` is read as ``eager``.
"""

from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from lazyhydrate.constants import DEFAULT_STRATEGY, LEGACY_EAGER_ALIAS
from lazyhydrate.requirements.errors import RequirementSyntaxError

__all__ = [
    "Operator",
    "ParenthesisToken",
    "OperatorToken",
    "ConditionToken",
    "Token",
    "ConditionNode",
    "ExpressionNode",
    "RequirementNode",
    "tokenize",
    "parse_requirements",
]


class Operator(str, Enum):
    """Boolean operator joining requirement terms."""

    AND = "&&"
    OR = "||"


# Alternatives are tried in order at each position: a lone parenthesis, an
# operator, then a condition segment holding at most one non-nested
# parenthesised argument.
_TOKEN_PATTERN = re.compile(
    r"\s*([()])\s*"
    r"|\s*(\|\||&&|\|)\s*"
    r"|\s*((?:[^()&|]+\([^()]+\))|[^()&|]+)\s*"
)

_OPERATORS: dict[str, Operator] = {
    "&&": Operator.AND,
    "||": Operator.OR,
    "|": Operator.AND,
}


@dataclass(frozen=True, slots=True)
class ParenthesisToken:
    """An opening or closing parenthesis."""

    value: Literal["(", ")"]
    position: int = field(default=0, compare=False, repr=False)

    def render(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class OperatorToken:
    """An ``&&`` or ``||`` operator (``|`` is already normalized to AND)."""

    value: Operator
    position: int = field(default=0, compare=False, repr=False)

    def render(self) -> str:
        return self.value.value


@dataclass(frozen=True, slots=True)
class ConditionToken:
    """A strategy reference with an optional verbatim argument."""

    name: str
    argument: str | None = None
    position: int = field(default=0, compare=False, repr=False)

    def render(self) -> str:
        if self.argument is None:
            return self.name
        return f"{self.name}({self.argument})"


Token = ParenthesisToken | OperatorToken | ConditionToken


@dataclass(frozen=True, slots=True)
class ConditionNode:
    """Leaf node naming a strategy to await.

    Attributes:
        name: Strategy name looked up in the registry.
        argument: Free-text argument passed to the strategy, if any.
    """

    name: str
    argument: str | None = None

    def render(self) -> str:
        if self.argument is None:
            return self.name
        return f"{self.name}({self.argument})"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": "condition", "name": self.name}
        if self.argument is not None:
            data["argument"] = self.argument
        return data


@dataclass(slots=True)
class ExpressionNode:
    """AND/OR node over two or more children.

    The root returned by parse_requirements() may hold a single child: a
    bare condition is normalized to a one-child AND node.

    Attributes:
        operator: How the children combine.
        children: Ordered child nodes.
    """

    operator: Operator
    children: list[RequirementNode]

    def render(self) -> str:
        parts = [
            f"({child.render()})"
            if isinstance(child, ExpressionNode)
            else child.render()
            for child in self.children
        ]
        return f" {self.operator.value} ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "expression",
            "operator": self.operator.value,
            "children": [child.to_dict() for child in self.children],
        }


RequirementNode = ConditionNode | ExpressionNode


def _condition_token(segment: str, position: int) -> ConditionToken:
    """Split a condition segment into its name and argument."""
    name = segment.strip()
    argument: str | None = None

    if "(" in segment:
        open_index = segment.index("(")
        name = segment[:open_index].strip()
        argument = segment[open_index + 1 : segment.index(")")]

    if name == LEGACY_EAGER_ALIAS:
        name = DEFAULT_STRATEGY

    return ConditionToken(name=name, argument=argument, position=position)


def tokenize(expression: str) -> list[Token]:
    """Tokenize a requirement string.

    Never raises: characters no alternative can match (a lone ``&`` for
    example) are skipped, and structural problems are left to the parser.

    Args:
        expression: Requirement string, e.g. ``"visible && idle"``.

    Returns:
        Tokens in source order.

    Examples:
        >>> [t.render() for t in tokenize("(a || b) && media(min-width: 600px)")]
        ['(', 'a', '||', 'b', ')', '&&', 'media(min-width: 600px)']
        >>> tokenize("immediate")
        [ConditionToken(name='eager', argument=None)]
    """
    tokens: list[Token] = []

    for match in _TOKEN_PATTERN.finditer(expression):
        parenthesis, operator, segment = match.groups()

        if parenthesis is not None:
            tokens.append(
                ParenthesisToken(value=parenthesis, position=match.start(1))  # type: ignore[arg-type]
            )
        elif operator is not None:
            tokens.append(
                OperatorToken(value=_OPERATORS[operator], position=match.start(2))
            )
        else:
            tokens.append(_condition_token(segment, match.start(3)))

    return tokens


class _Parser:
    """Recursive-descent parser over a token queue."""

    def __init__(self, expression: str, tokens: list[Token]) -> None:
        self._expression = expression
        self._tokens: deque[Token] = deque(tokens)

    def parse(self) -> RequirementNode:
        node = self.parse_expression()
        if self._tokens:
            leftover = self._tokens[0]
            raise RequirementSyntaxError(
                f"Unexpected '{leftover.render()}' after complete requirement",
                expression=self._expression,
                position=leftover.position,
            )
        return node

    def parse_expression(self) -> RequirementNode:
        node = self.parse_term()

        while self._tokens and isinstance(self._tokens[0], OperatorToken):
            operator = self._tokens.popleft().value  # type: ignore[union-attr]
            right = self.parse_term()

            if isinstance(node, ExpressionNode) and node.operator is operator:
                node.children.append(right)
            else:
                node = ExpressionNode(operator=operator, children=[node, right])

        return node

    def parse_term(self) -> RequirementNode:
        if not self._tokens:
            raise RequirementSyntaxError(
                "Expected a condition but the requirement ended",
                expression=self._expression,
                position=len(self._expression.rstrip()),
            )

        token = self._tokens.popleft()

        if isinstance(token, ParenthesisToken) and token.value == "(":
            node = self.parse_expression()
            # A missing closing parenthesis is tolerated.
            head = self._tokens[0] if self._tokens else None
            if isinstance(head, ParenthesisToken) and head.value == ")":
                self._tokens.popleft()
            return node

        if isinstance(token, ConditionToken):
            if not token.name:
                raise RequirementSyntaxError(
                    "Condition is missing a name",
                    expression=self._expression,
                    position=token.position,
                )
            return ConditionNode(name=token.name, argument=token.argument)

        raise RequirementSyntaxError(
            f"Expected a condition, got '{token.render()}'",
            expression=self._expression,
            position=token.position,
        )


def parse_requirements(expression: str) -> ExpressionNode:
    """Parse a requirement string into an AND/OR tree.

    The result is always an ExpressionNode; a bare condition becomes an AND
    node with one child so evaluation only ever starts from an expression.

    Args:
        expression: Requirement string to parse.

    Returns:
        Root ExpressionNode.

    Raises:
        RequirementSyntaxError: For an empty string, a dangling operator, a
            misplaced parenthesis or trailing tokens.

    Examples:
        >>> parse_requirements("a && b || c").render()
        '(a && b) || c'
        >>> parse_requirements("visible")
        ExpressionNode(operator=<Operator.AND: '&&'>, children=[ConditionNode(name='visible', argument=None)])
    """
    if not expression or expression.isspace():
        raise RequirementSyntaxError("Empty requirement", expression=expression)

    node = _Parser(expression, tokenize(expression)).parse()

    if isinstance(node, ConditionNode):
        return ExpressionNode(operator=Operator.AND, children=[node])
    return node
