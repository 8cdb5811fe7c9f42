"""Data models for the export engine."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .types import DEFAULT_TAG, NEVER_TAG, ClashPolicy, canonical_tag

TAG_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_:.\-]*$")


def _freeze(value: Any) -> Any:
    """Turn nested mappings and sequences into a hashable, order-stable form."""
    if isinstance(value, Mapping):
        return tuple(sorted((str(k), _freeze(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return tuple(sorted((_freeze(v) for v in value), key=repr))
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value


class WrapSpec(BaseModel):
    """How a callable should be wrapped before it is exported."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    conversion: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_default(self) -> bool:
        return self.enabled and not self.conversion

    def canonical(self) -> tuple[bool, Any]:
        """Hashable form used as part of a cache key."""
        return (self.enabled, _freeze(self.conversion))


DEFAULT_WRAP_SPEC = WrapSpec()
NO_WRAP_SPEC = WrapSpec(enabled=False)


def coerce_wrap(value: Any) -> WrapSpec:
    """Build a WrapSpec from the ``wrap`` option forms: bool, mapping or WrapSpec.

    A mapping may carry ``enabled`` and the conversion under ``convert``
    (or ``conversion``).
    """
    if isinstance(value, WrapSpec):
        return value
    if isinstance(value, bool):
        return WrapSpec(enabled=value)
    if isinstance(value, int) and value in (0, 1):
        return WrapSpec(enabled=bool(value))
    if isinstance(value, Mapping):
        unknown = set(value) - {"enabled", "convert", "conversion"}
        if unknown:
            raise ValueError(f"Unknown wrap keys: {sorted(unknown)}")
        conversion = value.get("convert", value.get("conversion")) or {}
        if not isinstance(conversion, Mapping):
            raise ValueError("Wrap conversion must be a mapping")
        return WrapSpec(enabled=bool(value.get("enabled", True)), conversion=dict(conversion))
    raise ValueError(f"Invalid wrap value: {value!r}")


class SymbolMetadata(BaseModel):
    """Metadata a provider attaches to an exportable callable."""

    model_config = ConfigDict(frozen=True)

    name: str
    tags: frozenset[str] = Field(default_factory=frozenset)
    arg_spec: dict[str, int] | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v: Any) -> frozenset[str]:
        if v is None:
            return frozenset()
        if isinstance(v, str):
            v = [v]
        return frozenset(canonical_tag(str(tag)) for tag in v)

    @field_validator("tags")
    @classmethod
    def _check_tag_syntax(cls, v: frozenset[str]) -> frozenset[str]:
        for tag in v:
            if not TAG_PATTERN.match(tag):
                raise ValueError(f"Invalid tag '{tag}'")
        return v

    @property
    def is_default(self) -> bool:
        return DEFAULT_TAG in self.tags

    @property
    def never_export(self) -> bool:
        return NEVER_TAG in self.tags

    @classmethod
    def from_spec(cls, name: str, spec: Mapping[str, Any]) -> SymbolMetadata:
        """Build metadata from a declaration like ``{"tags": [...], "args": {...}}``.

        Argument positions can be given either as ``arg_spec`` (param -> pos)
        or as ``args`` (param -> {"pos": n}); arguments without a position
        are left out.
        """
        arg_spec = spec.get("arg_spec")
        if arg_spec is None and spec.get("args"):
            arg_spec = {
                param: int(arg["pos"])
                for param, arg in spec["args"].items()
                if isinstance(arg, Mapping) and arg.get("pos") is not None
            }
        return cls(name=name, tags=spec.get("tags") or (), arg_spec=arg_spec or None)


class ExportOptions(BaseModel):
    """Per-item (or default) export options. Unset fields are ``None``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    as_: str | None = Field(default=None, alias="as")
    prefix: str | None = None
    suffix: str | None = None
    wrap: WrapSpec | None = None
    on_clash: ClashPolicy | None = None

    def merged_onto(self, base: ExportOptions) -> ExportOptions:
        """Return ``base`` overridden field by field by every field set here."""
        updates = {name: value for name, value in self if value is not None}
        return base.model_copy(update=updates)


class ExportItem(BaseModel):
    """One entry of an export request: a symbol name or a tag."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["name", "tag"]
    identifier: str
    options: ExportOptions = Field(default_factory=ExportOptions)


class ExportRequest(BaseModel):
    """Ordered export items plus request-wide options."""

    model_config = ConfigDict(frozen=True)

    items: tuple[ExportItem, ...] = ()
    on_clash: ClashPolicy | None = None

    @property
    def is_empty(self) -> bool:
        return not self.items


class ExporterConfig(BaseModel):
    """Install-time defaults for a provider's exporter."""

    default_wrap: bool | dict[str, Any] = True
    default_on_clash: ClashPolicy = "force"
    default_prefix: str | None = None
    default_suffix: str | None = None
    default_exports: list[str] | None = None

    @model_validator(mode="after")
    def _check_default_wrap(self) -> ExporterConfig:
        coerce_wrap(self.default_wrap)
        return self

    def default_options(self) -> ExportOptions:
        return ExportOptions(
            prefix=self.default_prefix or "",
            suffix=self.default_suffix or "",
            wrap=coerce_wrap(self.default_wrap),
        )


@dataclass(frozen=True)
class ResolvedExport:
    """A single binding to be made."""

    source_symbol: str
    target_name: str
    wrap_spec: WrapSpec
    on_clash: ClashPolicy | None = None


@dataclass(frozen=True)
class BindingPlan:
    """Ordered bindings produced by one resolution; target names are unique."""

    entries: tuple[ResolvedExport, ...]
    on_clash: ClashPolicy | None = None

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def target_names(self) -> list[str]:
        return [entry.target_name for entry in self.entries]

    def as_mapping(self) -> dict[str, str]:
        """Source symbol -> target name, in plan order."""
        return {entry.source_symbol: entry.target_name for entry in self.entries}
