"""Wrap variant cache.

Default-spec variants are produced once per symbol and shared by every
consumer in the process, across all exporters built for the same provider.
Each key owns a single-initialization cell with its own lock, so concurrent
requests for one key wait for a single wrap call while requests for other
keys proceed independently.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Hashable
from typing import Any

from .errors import WrapFailureError
from .models import WrapSpec
from .registry import Registry
from .types import Exportable, WrapService

logger = logging.getLogger(__name__)

# (provider, symbol, callable, canonical wrap spec)
CacheKey = tuple[str, str, Exportable, Hashable]


class _Cell:
    """Holds one lazily produced value."""

    __slots__ = ("lock", "ready", "value")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.ready = False
        self.value: Any = None


class VariantStore:
    """Process-wide cells for the variants produced by one wrap service."""

    def __init__(self, wrap_service: WrapService):
        self.wrap_service = wrap_service
        self.cells: dict[CacheKey, _Cell] = {}
        self.lock = threading.Lock()

    def cell(self, key: CacheKey) -> _Cell:
        cell = self.cells.get(key)
        if cell is None:
            with self.lock:
                cell = self.cells.setdefault(key, _Cell())
        return cell


# Keyed by id(); each store holds its service, so the id stays unique
_stores: dict[int, VariantStore] = {}
_stores_lock = threading.Lock()


def shared_store(wrap_service: WrapService) -> VariantStore:
    """Return the process-wide store for ``wrap_service``."""
    with _stores_lock:
        store = _stores.get(id(wrap_service))
        if store is None:
            store = _stores[id(wrap_service)] = VariantStore(wrap_service)
    return store


class WrapCache:
    """Materializes exported callables, memoizing default-spec variants."""

    def __init__(self, registry: Registry, wrap_service: WrapService):
        self.registry = registry
        self.wrap_service = wrap_service
        self._store = shared_store(wrap_service)

    def _key(self, symbol: str, spec: WrapSpec) -> CacheKey:
        return (self.registry.provider, symbol, self.registry.get_callable(symbol), spec.canonical())

    def materialize(self, symbol: str, spec: WrapSpec) -> Exportable:
        """Return the callable to bind for ``symbol`` under ``spec``."""
        func = self.registry.get_callable(symbol)

        if not spec.enabled:
            return func

        if not spec.is_default:
            logger.debug("Wrapping %s with custom spec %s", symbol, spec.conversion)
            return self._wrap(symbol, func, spec)

        # No metadata to wrap against
        if self.registry.is_passthrough(symbol):
            return func

        cell = self._store.cell(self._key(symbol, spec))
        if cell.ready:
            return cell.value
        with cell.lock:
            if not cell.ready:
                logger.debug("Wrap cache miss for %s", symbol)
                cell.value = self._wrap(symbol, func, spec)
                cell.ready = True
            else:
                logger.debug("Wrap cache hit for %s", symbol)
        return cell.value

    def _wrap(self, symbol: str, func: Exportable, spec: WrapSpec) -> Exportable:
        try:
            return self.wrap_service.wrap(func, spec)
        except Exception as e:
            raise WrapFailureError(symbol, str(e)) from e

    def _own_keys(self) -> list[CacheKey]:
        return [key for key in list(self._store.cells) if key[0] == self.registry.provider]

    def __contains__(self, key: object) -> bool:
        """``(symbol, canonical spec)`` membership for this provider."""
        if not isinstance(key, tuple) or len(key) != 2 or key[0] not in self.registry:
            return False
        symbol, canonical = key
        cell = self._store.cells.get(
            (self.registry.provider, symbol, self.registry.get_callable(symbol), canonical)
        )
        return cell is not None and cell.ready

    def __len__(self) -> int:
        return sum(1 for key in self._own_keys() if self._store.cells[key].ready)

    def clear(self) -> None:
        """Drop this provider's shared variants."""
        with self._store.lock:
            for key in self._own_keys():
                self._store.cells.pop(key, None)
