"""Metadata registry: the per-provider table of exportable symbols.

A registry is filled once while the provider loads (``register``/``expose``)
and then frozen. After ``freeze()`` it is read-only, so concurrent
resolutions can read it without locking.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import ModuleType
from typing import Any

from .errors import DuplicateSymbolError, RegistryFrozenError
from .models import SymbolMetadata
from .types import Exportable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistryEntry:
    """A registered callable and its metadata (``None`` for pass-through)."""

    name: str
    func: Exportable
    metadata: SymbolMetadata | None

    @property
    def is_passthrough(self) -> bool:
        return self.metadata is None


class Registry:
    """Symbol table of one provider with a tag -> symbols reverse index."""

    def __init__(self, provider: str = "<anonymous>"):
        self.provider = provider
        self._entries: dict[str, RegistryEntry] = {}
        self._tag_index: dict[str, list[str]] = {}
        self._default_exports: list[str] | None = None
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """End the registration phase."""
        self._frozen = True
        logger.debug("Registry %s frozen with %d symbols", self.provider, len(self._entries))

    def _check_writable(self, symbol: str) -> None:
        if self._frozen:
            raise RegistryFrozenError(symbol)
        if symbol in self._entries:
            raise DuplicateSymbolError(symbol)

    def register(
        self,
        symbol: str,
        metadata: SymbolMetadata | Mapping[str, Any],
        func: Exportable,
    ) -> RegistryEntry:
        """Register an exportable callable with its metadata."""
        self._check_writable(symbol)
        if not isinstance(metadata, SymbolMetadata):
            metadata = SymbolMetadata.from_spec(symbol, metadata)
        entry = RegistryEntry(name=symbol, func=func, metadata=metadata)
        self._entries[symbol] = entry
        for tag in sorted(metadata.tags):
            self._tag_index.setdefault(tag, []).append(symbol)
        logger.debug("Registered %s.%s tags=%s", self.provider, symbol, sorted(metadata.tags))
        return entry

    def expose(self, symbol: str, func: Exportable) -> RegistryEntry:
        """Register a pass-through callable: no metadata, exportable by name only."""
        self._check_writable(symbol)
        entry = RegistryEntry(name=symbol, func=func, metadata=None)
        self._entries[symbol] = entry
        logger.debug("Exposed pass-through %s.%s", self.provider, symbol)
        return entry

    def set_default_exports(self, names: Iterable[str]) -> None:
        """Declare an explicit default-name list, used when no symbol is tagged default."""
        if self._frozen:
            raise RegistryFrozenError("<default exports>")
        self._default_exports = list(names)

    @property
    def default_exports(self) -> list[str] | None:
        return list(self._default_exports) if self._default_exports is not None else None

    def lookup_by_name(self, name: str) -> SymbolMetadata | None:
        entry = self._entries.get(name)
        return entry.metadata if entry else None

    def lookup_by_tag(self, tag: str) -> tuple[str, ...]:
        """Symbols carrying ``tag`` in registration order, never-exportable ones excluded."""
        return tuple(
            symbol
            for symbol in self._tag_index.get(tag, ())
            if not self._entries[symbol].metadata.never_export
        )

    def get(self, name: str) -> RegistryEntry | None:
        return self._entries.get(name)

    def get_callable(self, name: str) -> Exportable:
        return self._entries[name].func

    def is_passthrough(self, name: str) -> bool:
        entry = self._entries.get(name)
        return entry is not None and entry.is_passthrough

    def is_exportable(self, name: str) -> bool:
        """Whether ``name`` can be requested explicitly."""
        entry = self._entries.get(name)
        if entry is None:
            return False
        return entry.is_passthrough or not entry.metadata.never_export

    def symbols(self) -> list[str]:
        return list(self._entries)

    def tags(self) -> list[str]:
        return sorted(self._tag_index)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def from_module(cls, module: ModuleType) -> Registry:
        """Build and freeze a registry from a provider module's declarations.

        The module may define:

        - ``EXPORT_SPEC``: symbol -> metadata declaration
        - ``EXPORT_DEFAULT``: explicit default-name list
        - ``EXPORT_OK``: names exported without metadata
        """
        registry = cls(provider=module.__name__)
        spec: Mapping[str, Mapping[str, Any]] = getattr(module, "EXPORT_SPEC", {}) or {}
        for symbol, declaration in spec.items():
            func = getattr(module, symbol, None)
            if not callable(func):
                logger.warning("%s declares metadata for missing callable '%s'", module.__name__, symbol)
                continue
            registry.register(symbol, SymbolMetadata.from_spec(symbol, declaration), func)

        default_names = list(getattr(module, "EXPORT_DEFAULT", None) or [])
        passthrough = default_names + list(getattr(module, "EXPORT_OK", None) or [])
        for symbol in passthrough:
            if symbol in registry:
                continue
            func = getattr(module, symbol, None)
            if callable(func):
                registry.expose(symbol, func)
            else:
                logger.warning("%s lists missing callable '%s' for export", module.__name__, symbol)

        if hasattr(module, "EXPORT_DEFAULT"):
            registry.set_default_exports(default_names)
        registry.freeze()
        return registry
