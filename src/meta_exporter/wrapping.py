"""Reference wrap service.

The exporter only needs something with ``wrap(func, spec) -> callable``.
This implementation marks wrapped variants and supports a ``curry``
conversion; anything else is rejected so that a misspelled conversion fails
at export time instead of being silently ignored.
"""

from __future__ import annotations

import functools
from collections.abc import Mapping
from typing import Any

from .models import WrapSpec
from .types import Exportable

SUPPORTED_CONVERSIONS = frozenset({"curry"})


class DefaultWrapService:
    """Wraps callables with ``functools.wraps`` and applies ``curry``."""

    def wrap(self, func: Exportable, spec: WrapSpec) -> Exportable:
        unsupported = set(spec.conversion) - SUPPORTED_CONVERSIONS
        if unsupported:
            raise ValueError(f"Unsupported conversion(s): {', '.join(sorted(unsupported))}")

        curried: Mapping[str, Any] = spec.conversion.get("curry") or {}
        if not isinstance(curried, Mapping):
            raise ValueError("curry conversion must be a mapping of argument values")
        curried = dict(curried)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            already_set = sorted(set(kwargs) & set(curried))
            if already_set:
                raise TypeError(f"Argument(s) already set by curry: {', '.join(already_set)}")
            return func(*args, **curried, **kwargs)

        wrapper.__wrap_spec__ = spec  # type: ignore[attr-defined]
        return wrapper


DEFAULT_WRAP_SERVICE = DefaultWrapService()
