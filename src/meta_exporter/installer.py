"""Clash resolution and installation of a binding plan into a namespace."""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any

from .errors import NameClashError
from .models import BindingPlan, ResolvedExport
from .types import ClashPolicy, Exportable, Namespace
from .wrap_cache import WrapCache

logger = logging.getLogger(__name__)


class DictNamespace:
    """Namespace backed by a mapping, e.g. a module's ``globals()``."""

    def __init__(self, mapping: MutableMapping[str, Any] | None = None):
        self.mapping = mapping if mapping is not None else {}

    def has_binding(self, name: str) -> bool:
        return name in self.mapping

    def bind(self, name: str, value: Exportable) -> None:
        self.mapping[name] = value


class ObjectNamespace:
    """Namespace backed by the attributes of a module, class or instance."""

    def __init__(self, target: Any):
        self.target = target

    def has_binding(self, name: str) -> bool:
        return hasattr(self.target, name)

    def bind(self, name: str, value: Exportable) -> None:
        setattr(self.target, name, value)


def as_namespace(target: Any) -> Namespace:
    """Adapt ``target`` to the Namespace interface."""
    if hasattr(target, "has_binding") and hasattr(target, "bind"):
        return target
    if isinstance(target, MutableMapping):
        return DictNamespace(target)
    return ObjectNamespace(target)


@dataclass
class ClashCheck:
    """Outcome of checking one plan entry against the namespace."""

    entry: ResolvedExport
    exists: bool
    policy: ClashPolicy

    @property
    def blocked(self) -> bool:
        return self.exists and self.policy == "bail"


def effective_policy(entry: ResolvedExport, plan: BindingPlan, default: ClashPolicy) -> ClashPolicy:
    return entry.on_clash or plan.on_clash or default


def check_clashes(
    plan: BindingPlan, namespace: Namespace, default_policy: ClashPolicy = "force"
) -> list[ClashCheck]:
    """Check every plan entry against the namespace without raising."""
    return [
        ClashCheck(
            entry=entry,
            exists=namespace.has_binding(entry.target_name),
            policy=effective_policy(entry, plan, default_policy),
        )
        for entry in plan
    ]


def install(
    plan: BindingPlan,
    namespace: Namespace,
    cache: WrapCache,
    default_policy: ClashPolicy = "force",
) -> list[str]:
    """Install ``plan`` into ``namespace``, all or nothing.

    Every entry is validated and materialized before the first ``bind``.
    Returns the target names bound, in plan order.
    """
    checks = check_clashes(plan, namespace, default_policy)
    for check in checks:
        if check.blocked:
            raise NameClashError(check.entry.target_name)

    materialized = [
        (entry, cache.materialize(entry.source_symbol, entry.wrap_spec)) for entry in plan
    ]

    for check in checks:
        if check.exists:
            logger.warning("Overwriting existing binding '%s'", check.entry.target_name)

    bound: list[str] = []
    for entry, func in materialized:
        namespace.bind(entry.target_name, func)
        bound.append(entry.target_name)
        logger.debug("Bound %s -> %s", entry.source_symbol, entry.target_name)
    return bound
