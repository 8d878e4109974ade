"""lazyhydrate exception hierarchy.

All exceptions can be imported from this package:
    from lazyhydrate.exceptions import ConfigError, ModuleLoadError
"""

from __future__ import annotations

from lazyhydrate.exceptions.base import LazyHydrateError
from lazyhydrate.exceptions.config import ConfigError
from lazyhydrate.exceptions.loader import ModuleLoadError

__all__ = [
    "LazyHydrateError",
    "ConfigError",
    "ModuleLoadError",
]
