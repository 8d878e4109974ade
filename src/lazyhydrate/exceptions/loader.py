from __future__ import annotations

from lazyhydrate.exceptions.base import LazyHydrateError


class ModuleLoadError(LazyHydrateError):
    """Raised when a component's data implementation cannot be fetched.

    Attributes:
        message: Human-readable error message.
        name: Data name of the component whose module failed to load.
        url: Resolved URL that was fetched, if the module came from a URL.
    """

    def __init__(
        self,
        message: str,
        name: str,
        url: str | None = None,
    ) -> None:
        self.name = name
        self.url = url
        detail = f"{message} (component '{name}'"
        detail += f", url '{url}')" if url else ")"
        super().__init__(detail)
