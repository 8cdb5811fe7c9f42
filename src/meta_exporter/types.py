"""Type definitions for the export engine."""

from __future__ import annotations

import keyword
from typing import Any, Callable, Literal, Protocol

# Reserved tags
DEFAULT_TAG = "default"
NEVER_TAG = "never"
TAG_ALIASES = {
    "export:default": DEFAULT_TAG,
    "export:never": NEVER_TAG,
}

# Request grammar markers
TAG_MARKER = ":"
OPTION_MARKER = "-"


# Type aliases
ClashPolicy = Literal["force", "bail"]
Exportable = Callable[..., Any]
Errors = list[str]


class Namespace(Protocol):
    """Binding table owned by the consumer."""

    def has_binding(self, name: str) -> bool:
        """Return whether ``name`` is already bound."""
        ...

    def bind(self, name: str, value: Exportable) -> None:
        """Bind ``value`` to ``name``."""
        ...


class WrapService(Protocol):
    """Produces a wrapped variant of a callable for a given wrap spec."""

    def wrap(self, func: Exportable, spec: Any) -> Exportable:
        ...


# Utility functions
def is_valid_identifier(name: str) -> bool:
    """Return whether ``name`` can be bound as a Python name."""
    return name.isidentifier() and not keyword.iskeyword(name)


def canonical_tag(tag: str) -> str:
    """Map reserved tag aliases to their canonical spelling."""
    return TAG_ALIASES.get(tag, tag)
