"""Core functionality: the per-provider exporter."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Optional, Sequence

import yaml

from .installer import ClashCheck, as_namespace, check_clashes, install
from .models import BindingPlan, ExporterConfig, ExportRequest
from .registry import Registry
from .request import parse_request
from .resolver import resolve
from .types import WrapService
from .wrap_cache import WrapCache
from .wrapping import DEFAULT_WRAP_SERVICE


@dataclass
class ExportReport:
    """Dry run report showing what an export would bind."""

    provider: str
    plan: BindingPlan
    checks: Sequence[ClashCheck]
    text_summary: str
    json_summary: dict

    @property
    def would_fail(self) -> bool:
        return any(check.blocked for check in self.checks)


def load_config(path: Path) -> ExporterConfig:
    """Load exporter configuration from a YAML file."""
    data = yaml.safe_load(path.read_text()) or {}
    return ExporterConfig(**data)


class Exporter:
    """Resolves and installs export requests for one provider.

    Holds the provider's frozen registry, its install-time configuration and
    the wrap cache shared by all consumers of the provider.
    """

    def __init__(
        self,
        registry: Registry,
        config: Optional[ExporterConfig] = None,
        wrap_service: Optional[WrapService] = None,
    ):
        if not registry.frozen:
            registry.freeze()
        self.registry = registry
        self.config = config or ExporterConfig()
        self.cache = WrapCache(registry, wrap_service or DEFAULT_WRAP_SERVICE)

    @classmethod
    def from_module(
        cls,
        module: ModuleType,
        config: Optional[ExporterConfig] = None,
        wrap_service: Optional[WrapService] = None,
    ) -> Exporter:
        """Build an exporter from a provider module's declarations."""
        return cls(Registry.from_module(module), config=config, wrap_service=wrap_service)

    def resolve(self, args: Sequence[Any] | ExportRequest = (), **options: Any) -> BindingPlan:
        """Resolve request tokens into a binding plan without touching any namespace."""
        if isinstance(args, ExportRequest):
            request = args
        elif len(args) == 1 and isinstance(args[0], ExportRequest):
            request = args[0]
        else:
            request = parse_request(args, **options)
        return resolve(
            request,
            self.registry,
            self.config.default_options(),
            default_names=self.config.default_exports,
        )

    def export(self, target: Any, *args: Any, **options: Any) -> list[str]:
        """Export into ``target`` (a Namespace, mapping, module or object).

        ``args`` are request tokens, ``options`` request-wide options such as
        ``on_clash``. Nothing is bound unless every binding can be made.
        Returns the names bound.
        """
        plan = self.resolve(args, **options)
        return install(plan, as_namespace(target), self.cache, self.config.default_on_clash)

    def export_to_caller(self, *args: Any, **options: Any) -> list[str]:
        """Export into the globals of the calling module."""
        import inspect

        frame = inspect.currentframe()
        try:
            caller_globals = frame.f_back.f_globals  # type: ignore[union-attr]
        finally:
            del frame
        return self.export(caller_globals, *args, **options)

    def dry_run(self, target: Any, *args: Any, **options: Any) -> ExportReport:
        """Resolve a request and check it against ``target`` without binding anything."""
        plan = self.resolve(args, **options)
        checks = check_clashes(plan, as_namespace(target), self.config.default_on_clash)
        return ExportReport(
            provider=self.registry.provider,
            plan=plan,
            checks=checks,
            text_summary=_generate_text_summary(self.registry.provider, checks),
            json_summary=_generate_json_summary(self.registry.provider, plan, checks),
        )


def _describe_wrap(check: ClashCheck) -> str:
    spec = check.entry.wrap_spec
    if not spec.enabled:
        return "unwrapped"
    if spec.is_default:
        return "wrapped"
    return f"wrapped {spec.conversion}"


def _generate_text_summary(provider: str, checks: Sequence[ClashCheck]) -> str:
    """Generate human-readable text summary."""
    lines = [f"=== Export Plan ({provider}) ==="]
    for check in checks:
        entry = check.entry
        line = f"{entry.source_symbol} -> {entry.target_name} ({_describe_wrap(check)})"
        if check.blocked:
            line += " CLASH: bail"
        elif check.exists:
            line += " overwrites existing"
        lines.append(line)

    if not checks:
        lines.append("(nothing to export)")

    blocked = [check.entry.target_name for check in checks if check.blocked]
    lines.append("\n=== Result ===")
    if blocked:
        lines.append(f"would fail: {', '.join(blocked)} already defined")
    else:
        lines.append(f"would bind {len(checks)} name(s)")
    return "\n".join(lines)


def _generate_json_summary(provider: str, plan: BindingPlan, checks: Sequence[ClashCheck]) -> dict:
    """Generate machine-readable JSON summary."""
    return {
        "provider": provider,
        "on_clash": plan.on_clash,
        "exports": [
            {
                "source": check.entry.source_symbol,
                "target": check.entry.target_name,
                "wrap": {
                    "enabled": check.entry.wrap_spec.enabled,
                    "conversion": check.entry.wrap_spec.conversion,
                },
                "exists": check.exists,
                "policy": check.policy,
                "blocked": check.blocked,
            }
            for check in checks
        ],
        "would_fail": any(check.blocked for check in checks),
    }
