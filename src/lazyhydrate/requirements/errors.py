"""Requirement-string error types.

Parsing errors carry the offending expression and the character position of
the problem; evaluation errors carry the underlying strategy failures.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from lazyhydrate.exceptions import LazyHydrateError


class RequirementError(LazyHydrateError):
    """Base exception for requirement-string errors.

    Attributes:
        message: Human-readable error message.
        expression: The requirement string involved, if known.
    """

    def __init__(
        self,
        message: str,
        expression: str | None = None,
    ) -> None:
        self.expression = expression
        super().__init__(message)


class RequirementSyntaxError(RequirementError):
    """Raised when a requirement string cannot be parsed.

    Covers empty strings, dangling operators, a misplaced closing parenthesis
    and tokens left over after a complete expression. A missing closing
    parenthesis is tolerated and does not raise.

    Attributes:
        message: Human-readable error message.
        expression: The requirement string that failed to parse.
        position: Character offset of the offending token (0 if unknown).
    """

    def __init__(
        self,
        message: str,
        expression: str,
        position: int = 0,
    ) -> None:
        self.position = position
        if position > 0 and expression:
            caret_line = f"{expression}\n{' ' * position}^"
            full_message = f"{message} at position {position}:\n{caret_line}"
        else:
            full_message = f"{message}: {expression!r}"
        super().__init__(full_message, expression=expression)


class RequirementEvaluationError(RequirementError):
    """Raised when every branch of an OR requirement failed.

    Strategies are not expected to fail. When one does, AND propagates the
    first failure unchanged; OR only fails once all of its children have
    failed, and reports them together through this exception.

    Attributes:
        message: Human-readable error message.
        expression: The requirement string being evaluated.
        errors: The exceptions raised by the individual branches.
    """

    def __init__(
        self,
        message: str,
        expression: str | None = None,
        errors: Sequence[BaseException] = (),
    ) -> None:
        self.errors = tuple(errors)
        if self.errors:
            reasons = "; ".join(f"{type(e).__name__}: {e}" for e in self.errors)
            message = f"{message} ({reasons})"
        super().__init__(message, expression=expression)


@dataclass(frozen=True, slots=True)
class RequirementErrorInfo:
    """Immutable summary of a requirement error for reporting.

    Attributes:
        expression: The requirement string that failed.
        message: Human-readable error message.
        position: Character position in the expression (0 if not applicable).
    """

    expression: str
    message: str
    position: int = 0

    @classmethod
    def from_error(cls, error: RequirementError) -> RequirementErrorInfo:
        return cls(
            expression=error.expression or "",
            message=error.message,
            position=getattr(error, "position", 0),
        )
