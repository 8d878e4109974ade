"""Component data modules: registration, aliasing and download.

A component's data implementation can be registered three ways:

- directly: ``loader.async_data("counter", load_counter)``
- by URL: ``loader.async_url("counter", "components/counter.py")``, or the
  element's ``x-load-src`` attribute
- by alias for any unregistered name: ``loader.async_alias("/js/[name].py")``
  or ``loader.async_alias(load_by_name)``

Each name is downloaded at most once and handed to the host with
``register_data``. A name with nothing registered is skipped silently.
"""

from __future__ import annotations

import asyncio
import importlib.util
import inspect
import re
import sys
import types
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin, urlsplit
from urllib.request import url2pathname

import aiohttp
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from lazyhydrate.config import AsyncOptions
from lazyhydrate.constants import ALIAS_NAME_PLACEHOLDER, GENERATED_NAME_PREFIX
from lazyhydrate.exceptions import ModuleLoadError
from lazyhydrate.host import HostRuntime
from lazyhydrate.logging import get_logger

__all__ = ["Download", "ModuleFetcher", "ModuleLoader", "parse_name"]

logger = get_logger(__name__)

#: Called with the component name; returns the module or implementation.
Download = Callable[[str], Awaitable[Any] | Any]

_ABSOLUTE_URL = re.compile(r"^(?:[a-z+]+:)?//", re.IGNORECASE)
_NAME_DELIMITERS = re.compile(r"[({]")


def parse_name(attribute: str | None, next_index: Callable[[], int]) -> str:
    """Extract a component's data name from its data attribute.

    ``counter({ start: 1 })`` and ``counter`` both name ``counter``. A missing
    or expression-only attribute gets a generated ``_x_async_<n>`` name,
    which the loader never downloads.

    Args:
        attribute: The element's data attribute value.
        next_index: Counter shared with id generation.

    Returns:
        The data name.
    """
    parsed = _NAME_DELIMITERS.split(attribute or "")[0]
    return parsed or f"{GENERATED_NAME_PREFIX}{next_index()}"


class _RetryableFetchError(Exception):
    """Internal signal that a module fetch may succeed if retried."""


class ModuleFetcher:
    """Loads a Python module from a URL or local path.

    ``http``/``https`` URLs are fetched with aiohttp, retried with exponential
    backoff on timeouts, connection errors and 5xx responses, and executed
    into a fresh module. ``file`` URLs and plain paths are imported with
    importlib.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float,
        attempts: int,
    ) -> None:
        self._timeout = timeout_seconds
        self._attempts = attempts

    async def fetch(self, url: str, name: str) -> types.ModuleType:
        """Load the module at a URL.

        Args:
            url: Absolute URL, ``file:`` URL or filesystem path.
            name: Component name, used for the module name and errors.

        Returns:
            The executed module.

        Raises:
            ModuleLoadError: If the module cannot be fetched or compiled.
        """
        scheme = urlsplit(url).scheme.lower()
        if scheme in ("http", "https"):
            source = await self._fetch_source(url, name)
            return self._module_from_source(source, url, name)
        if scheme in ("", "file"):
            return self._module_from_path(url, name)
        raise ModuleLoadError(f"Unsupported URL scheme '{scheme}'", name=name, url=url)

    async def _fetch_source(self, url: str, name: str) -> str:
        async def _request() -> str:
            try:
                timeout = aiohttp.ClientTimeout(total=self._timeout)
                async with (
                    aiohttp.ClientSession(timeout=timeout) as session,
                    session.get(url) as resp,
                ):
                    if resp.status == 200:
                        return await resp.text()
                    if resp.status >= 500:
                        raise _RetryableFetchError(f"HTTP {resp.status}")
                    raise ModuleLoadError(
                        f"Failed to fetch module: HTTP {resp.status}",
                        name=name,
                        url=url,
                    )
            except TimeoutError:
                raise _RetryableFetchError("Request timed out") from None
            except aiohttp.ClientError as e:
                raise _RetryableFetchError(f"Client error: {e}") from e

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._attempts),
                wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
                retry=retry_if_exception_type(_RetryableFetchError),
                reraise=True,
            ):
                with attempt:
                    try:
                        source = await _request()
                    except _RetryableFetchError as e:
                        logger.warning(
                            "module_fetch_attempt_failed",
                            component_name=name,
                            url=url,
                            attempt=attempt.retry_state.attempt_number,
                            error=str(e),
                        )
                        raise
        except _RetryableFetchError as e:
            raise ModuleLoadError(f"Failed to fetch module: {e}", name=name, url=url) from e

        logger.debug("module_fetched", component_name=name, url=url)
        return source

    def _module_from_source(self, source: str, url: str, name: str) -> types.ModuleType:
        try:
            code = compile(source, url, "exec")
        except SyntaxError as e:
            raise ModuleLoadError(f"Invalid module source: {e}", name=name, url=url) from e
        module = types.ModuleType(f"lazyhydrate_remote_{name}")
        module.__file__ = url
        try:
            exec(code, module.__dict__)  # noqa: S102
        except Exception as e:
            raise ModuleLoadError(
                f"Module raised during import: {type(e).__name__}: {e}",
                name=name,
                url=url,
            ) from e
        return module

    def _module_from_path(self, url: str, name: str) -> types.ModuleType:
        parts = urlsplit(url)
        path = url2pathname(parts.path) if parts.scheme == "file" else url
        module_name = f"lazyhydrate_local_{name}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ModuleLoadError("Not an importable module", name=name, url=url)

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise ModuleLoadError(
                f"Failed to import module: {type(e).__name__}: {e}",
                name=name,
                url=url,
            ) from e
        return module


@dataclass(slots=True)
class _DataEntry:
    download: Download | None
    url: str | None = None
    loaded: bool = False
    task: asyncio.Task[None] | None = field(default=None, repr=False)


def _pick_export(module: Any, name: str) -> Any:
    """Choose the implementation exported by a downloaded module.

    A callable that is not a module is the implementation itself. Otherwise
    the attribute (or key) named after the component wins, then ``default``,
    then the first public export.
    """
    if callable(module) and not isinstance(module, types.ModuleType):
        return module

    if isinstance(module, Mapping):
        exports: Mapping[str, Any] = module
        public = [k for k in exports if not str(k).startswith("_")]
    elif isinstance(module, types.ModuleType):
        exports = vars(module)
        public = list(getattr(module, "__all__", ())) or [
            key
            for key, value in exports.items()
            if not key.startswith("_")
            and getattr(value, "__module__", None) == module.__name__
        ]
    else:
        exports = vars(module)
        public = [k for k in exports if not k.startswith("_")]

    return (
        exports.get(name)
        or exports.get("default")
        or (exports.get(public[0]) if public else None)
    )


class ModuleLoader:
    """Registry and downloader of component data implementations.

    Attributes:
        options: Current activation options; the owning activator replaces
            this when its options change. Unless a fetcher was supplied,
            replacing the options also rebuilds the fetcher with the new
            timeout and attempt count.
    """

    def __init__(
        self,
        host: HostRuntime,
        options: AsyncOptions,
        *,
        fetcher: ModuleFetcher | None = None,
    ) -> None:
        self._host = host
        self._custom_fetcher = fetcher is not None
        if fetcher is not None:
            self._fetcher = fetcher
        self.options = options
        self._data: dict[str, _DataEntry] = {}
        self._alias: str | Download | None = None

    @property
    def options(self) -> AsyncOptions:
        return self._options

    @options.setter
    def options(self, options: AsyncOptions) -> None:
        self._options = options
        if not self._custom_fetcher:
            self._fetcher = ModuleFetcher(
                timeout_seconds=options.fetch_timeout_seconds,
                attempts=options.fetch_attempts,
            )

    def async_data(self, name: str, download: Download | None = None) -> None:
        """Register a download callable for a component name.

        Re-registering a name replaces the previous entry.

        Args:
            name: Component data name.
            download: Called with the name; returns the module or
                implementation, possibly as an awaitable.
        """
        self._data[name] = _DataEntry(download=download)

    def async_url(self, name: str, url: str) -> None:
        """Register a module URL for a component name.

        Ignored when either argument is empty or the name is already
        registered.
        """
        if not name or not url or name in self._data:
            return

        async def download(_: str) -> types.ModuleType:
            return await self._fetcher.fetch(self.parse_url(url), name)

        self._data[name] = _DataEntry(download=download, url=url)

    def async_alias(self, alias: str | Download) -> None:
        """Set the fallback used for unregistered names.

        Args:
            alias: A download callable, or a URL pattern in which ``[name]``
                is replaced by the component name.
        """
        self._alias = alias

    def is_registered(self, name: str) -> bool:
        return name in self._data

    def is_loaded(self, name: str) -> bool:
        entry = self._data.get(name)
        return entry is not None and entry.loaded

    def parse_url(self, url: str) -> str:
        """Resolve a relative module URL against ``options.base_url``.

        Absolute URLs (``scheme://`` or ``//host``) and, with
        ``keep_relative_urls``, every URL are returned unchanged.
        """
        if self.options.keep_relative_urls or _ABSOLUTE_URL.match(url):
            return url
        return urljoin(self.options.base_url, url)

    async def download(self, name: str) -> None:
        """Download a component's implementation and bind it on the host.

        Concurrent calls for the same name share one download.

        Args:
            name: Component data name.

        Raises:
            ModuleLoadError: If fetching the module failed.
        """
        if name.startswith(GENERATED_NAME_PREFIX):
            return

        self._apply_alias(name)
        entry = self._data.get(name)
        if entry is None or entry.loaded:
            return

        if entry.task is None:
            entry.task = asyncio.ensure_future(self._load(name, entry))
        try:
            await asyncio.shield(entry.task)
        except ModuleLoadError:
            entry.task = None
            raise

    async def _load(self, name: str, entry: _DataEntry) -> None:
        implementation = await self.get_module(name)
        if implementation is not None:
            self._host.register_data(name, implementation)
        entry.loaded = True
        logger.debug("module_loaded", component_name=name, bound=implementation is not None)

    async def get_module(self, name: str) -> Any:
        """Run a name's download and pick its exported implementation.

        Returns:
            The implementation, or None when nothing is registered.

        Raises:
            ModuleLoadError: If the download failed, whatever it raised.
        """
        entry = self._data.get(name)
        if entry is None or entry.download is None:
            return None

        try:
            module = entry.download(name)
            if inspect.isawaitable(module):
                module = await module
        except ModuleLoadError:
            raise
        except Exception as e:
            raise ModuleLoadError(
                f"Download raised {type(e).__name__}: {e}", name=name, url=entry.url
            ) from e
        return _pick_export(module, name)

    def _apply_alias(self, name: str) -> None:
        if self._alias is None or name in self._data:
            return
        if isinstance(self._alias, str):
            self.async_url(name, self._alias.replace(ALIAS_NAME_PLACEHOLDER, name))
        else:
            self.async_data(name, self._alias)
