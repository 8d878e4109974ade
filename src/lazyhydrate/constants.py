"""Constants shared across lazyhydrate.

Attribute names, event channel names and default option values live here so
that the activator, loader and strategies agree on a single spelling.
"""

from __future__ import annotations

# =============================================================================
# Directive and attribute names (unprefixed; the host applies its prefix)
# =============================================================================

#: Directive carrying the requirement string, e.g. ``x-load="visible"``
LOAD_DIRECTIVE: str = "load"

#: Attribute carrying a module URL for the component's data implementation
LOAD_SRC_ATTRIBUTE: str = "load-src"

#: Attribute carrying the component's data name, e.g. ``x-data="counter"``
DATA_ATTRIBUTE: str = "data"

#: Inert marker attribute; the host skips elements that carry it
IGNORE_ATTRIBUTE: str = "ignore"

#: Plain identifier attribute used to correlate load events
ID_ATTRIBUTE: str = "id"

# =============================================================================
# Event channel names
# =============================================================================

#: Broadcast event used by ``event`` strategies without an argument
LOAD_EVENT: str = "lazyhydrate:load"

#: Dispatched once the activator has been installed on a host
INIT_EVENT: str = "lazyhydrate:init"

# =============================================================================
# Defaults
# =============================================================================

#: Strategy used when an element declares an empty requirement string
DEFAULT_STRATEGY: str = "eager"

#: Legacy strategy name rewritten to ``eager`` at tokenization time
LEGACY_EAGER_ALIAS: str = "immediate"

#: Prefix of names generated for components without a data name
GENERATED_NAME_PREFIX: str = "_x_async_"

#: Placeholder substituted by the component name in string aliases
ALIAS_NAME_PLACEHOLDER: str = "[name]"

#: Seconds to wait when the host has no idle callback
IDLE_FALLBACK_SECONDS: float = 0.2

#: Root margin used by ``visible`` when no argument is given
DEFAULT_ROOT_MARGIN: str = "0px 0px 0px 0px"

#: Base URL relative module URLs are resolved against
DEFAULT_BASE_URL: str = "http://localhost/"

#: Timeout for fetching a module over HTTP
FETCH_TIMEOUT_SECONDS: float = 10.0

#: Attempts made when fetching a module over HTTP
FETCH_ATTEMPTS: int = 3
