"""Export spec resolver: expands a request into a binding plan."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import (
    InvalidIdentifierError,
    InvalidOptionError,
    TargetNameCollisionError,
    UnknownSymbolError,
)
from .models import (
    DEFAULT_WRAP_SPEC,
    BindingPlan,
    ExportItem,
    ExportOptions,
    ExportRequest,
    ResolvedExport,
)
from .registry import Registry
from .types import DEFAULT_TAG, canonical_tag, is_valid_identifier

logger = logging.getLogger(__name__)

BASE_OPTIONS = ExportOptions(prefix="", suffix="", wrap=DEFAULT_WRAP_SPEC)


@dataclass
class _Selection:
    """The item that last selected a symbol."""

    item: ExportItem
    options: ExportOptions


def default_items(registry: Registry, default_names: list[str] | None = None) -> list[ExportItem]:
    """Items used when the request is empty.

    Symbols tagged ``default`` win; otherwise the provider's declared
    default-name list, then ``default_names`` from the exporter config.
    """
    if registry.lookup_by_tag(DEFAULT_TAG):
        return [ExportItem(kind="tag", identifier=DEFAULT_TAG)]

    names = registry.default_exports or default_names
    if names:
        return [ExportItem(kind="name", identifier=name) for name in names]

    logger.info("Provider %s has no default exports", registry.provider)
    return []


def expand_item(item: ExportItem, registry: Registry) -> tuple[str, ...]:
    """Symbols selected by a single item, in registry order."""
    if item.kind == "tag":
        if item.options.as_ is not None:
            raise InvalidOptionError(
                f"Option 'as' cannot be used with tag ':{item.identifier}'",
                tag=item.identifier,
            )
        symbols = registry.lookup_by_tag(canonical_tag(item.identifier))
        if not symbols:
            logger.debug("Tag :%s matched no symbols in %s", item.identifier, registry.provider)
        return symbols

    if not registry.is_exportable(item.identifier):
        raise UnknownSymbolError(item.identifier)
    return (item.identifier,)


def target_name(symbol: str, item: ExportItem, options: ExportOptions) -> str:
    """Name a symbol will be bound to."""
    if item.kind == "name" and options.as_ is not None:
        return options.as_
    return f"{options.prefix or ''}{symbol}{options.suffix or ''}"


def resolve(
    request: ExportRequest,
    registry: Registry,
    defaults: ExportOptions | None = None,
    default_names: list[str] | None = None,
) -> BindingPlan:
    """Resolve ``request`` against ``registry`` into an immutable BindingPlan.

    Options are merged item over ``defaults`` over built-in defaults. A
    symbol selected by several items appears once, with the options of the
    last item that selected it, ordered by where that last item appears.
    """
    base = defaults.merged_onto(BASE_OPTIONS) if defaults is not None else BASE_OPTIONS
    if request.is_empty:
        items = default_items(registry, default_names)
    else:
        items = list(request.items)

    selections: dict[str, _Selection] = {}
    for item in items:
        options = item.options.merged_onto(base)
        for symbol in expand_item(item, registry):
            # Move to the position of the final item that selects it
            selections.pop(symbol, None)
            selections[symbol] = _Selection(item=item, options=options)

    entries: list[ResolvedExport] = []
    owners: dict[str, str] = {}
    for symbol, selection in selections.items():
        name = target_name(symbol, selection.item, selection.options)
        if name in owners:
            raise TargetNameCollisionError(name, (owners[name], symbol))
        owners[name] = symbol
        entries.append(
            ResolvedExport(
                source_symbol=symbol,
                target_name=name,
                wrap_spec=selection.options.wrap or DEFAULT_WRAP_SPEC,
                on_clash=selection.item.options.on_clash,
            )
        )

    for entry in entries:
        if not is_valid_identifier(entry.target_name):
            raise InvalidIdentifierError(entry.target_name, entry.source_symbol)

    plan = BindingPlan(entries=tuple(entries), on_clash=request.on_clash)
    logger.debug("Resolved %d export(s) from %s", len(plan), registry.provider)
    return plan
