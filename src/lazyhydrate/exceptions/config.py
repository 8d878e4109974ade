from __future__ import annotations

from typing import Any

from lazyhydrate.exceptions.base import LazyHydrateError


class ConfigError(LazyHydrateError):
    """Exception for configuration loading and validation errors.

    Raised when ``lazyhydrate.yaml`` cannot be parsed, when a value fails
    Pydantic validation, or when runtime option overrides are invalid.

    Attributes:
        message: Human-readable error message.
        field: Dotted name of the offending field, if known.
        value: The value that failed validation, if known.

    Examples:
        ```python
        raise ConfigError(
            "Invalid configuration: Input should be a valid boolean",
            field="options.keep_relative_urls",
            value="maybe",
        )
        ```
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        """Initialize the ConfigError.

        Args:
            message: Human-readable error message.
            field: Optional field name that caused the error.
            value: Optional value that failed validation.
        """
        self.field = field
        self.value = value
        super().__init__(message)
