"""
Process-wide memoization of built catalogs.

Guarantees that each named catalog is fetched and built at most once while a build is
in flight or has succeeded, and that a failed build can be retried by the next caller.
"""

import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar


class CatalogState(Enum):
    EMPTY = "empty"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


@dataclass
class _CatalogEntry:
    state: CatalogState = CatalogState.PENDING
    future: Future = field(default_factory=Future)


class CatalogCache:
    """
    Single-flight cache keyed by catalog name.

    The first caller for a name runs the build function in its own thread; callers that
    arrive while the build is in flight wait on the same Future and receive the same result
    (or the same exception). A waiter that stops waiting never cancels the shared build.
    """

    _shared: ClassVar["CatalogCache | None"] = None
    _shared_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: dict[str, _CatalogEntry] = dict()

    @classmethod
    def shared(cls) -> "CatalogCache":
        """Return the process-wide instance (created on first use)."""
        with cls._shared_lock:
            if cls._shared is None:
                cls._shared = cls()
            return cls._shared

    def get_all(
        self, catalog_name: str, builder_fn: Callable[[], Iterable[Any]], timeout: float | None = None
    ) -> tuple[Any, ...]:
        """
        Return the built catalog, building it first if no build has succeeded or is in flight.

        Args:
            catalog_name: Name of the catalog (e.g., 'dataset')
            builder_fn: Zero-argument function that fetches and builds the catalog items
            timeout: Seconds to wait for another caller's in-flight build (None waits forever)

        Returns:
            Immutable tuple of catalog items

        Raises:
            Whatever builder_fn raised, for every caller waiting on that attempt
            concurrent.futures.TimeoutError: If timeout expires while waiting
        """
        with self._lock:
            existing = self._entries.get(catalog_name)
            if existing is not None and existing.state is not CatalogState.FAILED:
                entry, is_owner = existing, False
            else:
                entry, is_owner = _CatalogEntry(), True
                self._entries[catalog_name] = entry

        if not is_owner:
            if entry.state is CatalogState.PENDING:
                logging.debug(f"Waiting on in-flight build of catalog '{catalog_name}'")
            return entry.future.result(timeout=timeout)

        logging.debug(f"Building catalog '{catalog_name}'")
        try:
            items = tuple(builder_fn())
        except BaseException as e:
            with self._lock:
                entry.state = CatalogState.FAILED
            entry.future.set_exception(e)
            logging.warning(f"Build of catalog '{catalog_name}' failed; next request will retry: {e}")
            raise

        with self._lock:
            entry.state = CatalogState.READY
        entry.future.set_result(items)
        return items

    def state(self, catalog_name: str) -> CatalogState:
        with self._lock:
            entry = self._entries.get(catalog_name)
            return entry.state if entry is not None else CatalogState.EMPTY

    def clear(self, catalog_name: str | None = None):
        """Forget one catalog (or all of them). In-flight builds still deliver to their waiters."""
        with self._lock:
            if catalog_name is None:
                self._entries.clear()
            else:
                self._entries.pop(catalog_name, None)
