"""Exit codes for the lazyhydrate CLI."""

from __future__ import annotations

from enum import IntEnum

__all__ = ["ExitCode"]


class ExitCode(IntEnum):
    """Standard exit codes.

    - 0 for success
    - 1 for failure (including requirement syntax errors)
    - 130 for keyboard interrupt (128 + SIGINT=2)
    """

    SUCCESS = 0
    FAILURE = 1
    INTERRUPTED = 130
