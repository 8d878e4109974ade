from __future__ import annotations


class LazyHydrateError(Exception):
    """Base exception class for all lazyhydrate errors.

    Every exception raised deliberately by lazyhydrate inherits from this
    class, so host integrations can catch library failures at one boundary
    while letting unrelated exceptions propagate.

    Attributes:
        message: Human-readable error message.
    """

    def __init__(self, message: str) -> None:
        """Initialize the LazyHydrateError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)
