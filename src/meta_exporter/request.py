"""Parser for the export request grammar.

A request is a sequence of tokens::

    parse_request(["f1", ":a", {"prefix": "a_"}, ("f2", {"as": "bar"}), "-on_clash", "bail"])

- ``"name"`` requests a symbol by name
- ``":tag"`` requests every symbol carrying ``tag``
- a mapping right after a name or tag holds that item's options
- a ``(name_or_tag, options)`` pair is the same thing in one token
- ``"-option"`` followed by a value sets a request-wide option
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from .errors import InvalidOptionError
from .models import ExportItem, ExportOptions, ExportRequest, coerce_wrap
from .types import OPTION_MARKER, TAG_MARKER

ITEM_OPTION_KEYS = frozenset({"as", "prefix", "suffix", "wrap", "on_clash", "args_as", "curry"})
WRAP_SHORTCUTS = ("args_as", "curry")
REQUEST_OPTIONS = frozenset({"on_clash"})


def parse_options(options: Mapping[str, Any]) -> ExportOptions:
    """Validate an item's options mapping into ExportOptions."""
    unknown = set(options) - ITEM_OPTION_KEYS
    if unknown:
        raise InvalidOptionError(
            f"Unknown export option(s): {', '.join(sorted(unknown))}",
            options=sorted(unknown),
        )

    for key in ("as", "prefix", "suffix"):
        if key in options and not isinstance(options[key], str):
            raise InvalidOptionError(f"Option '{key}' must be a string", option=key)

    wrap = None
    try:
        if "wrap" in options:
            wrap = coerce_wrap(options["wrap"])
        shortcuts = {key: options[key] for key in WRAP_SHORTCUTS if key in options}
        if shortcuts:
            base = wrap or coerce_wrap(True)
            if not base.enabled:
                raise ValueError(f"{', '.join(shortcuts)} cannot be combined with wrap disabled")
            wrap = base.model_copy(update={"conversion": {**base.conversion, **shortcuts}})

        return ExportOptions(
            **{
                "as": options.get("as"),
                "prefix": options.get("prefix"),
                "suffix": options.get("suffix"),
                "wrap": wrap,
                "on_clash": options.get("on_clash"),
            }
        )
    except (ValueError, ValidationError) as e:
        raise InvalidOptionError(f"Invalid export options: {e}") from e


def _make_item(token: str, options: Mapping[str, Any] | None = None) -> ExportItem:
    if token.startswith(TAG_MARKER):
        kind, identifier = "tag", token[len(TAG_MARKER):]
    else:
        kind, identifier = "name", token
    if not identifier:
        raise InvalidOptionError(f"Empty {kind} in export request", token=token)
    return ExportItem(
        kind=kind,
        identifier=identifier,
        options=parse_options(options) if options is not None else ExportOptions(),
    )


def parse_request(args: Sequence[Any] = (), **request_options: Any) -> ExportRequest:
    """Parse request tokens into an ExportRequest.

    Request-wide options can also be passed as keyword arguments,
    e.g. ``parse_request(["f1"], on_clash="bail")``.
    """
    items: list[ExportItem] = []
    options: dict[str, Any] = {}
    # Index of the last item that may still receive an options mapping
    open_item: int | None = None

    tokens = list(args)
    i = 0
    while i < len(tokens):
        token = tokens[i]
        i += 1

        if isinstance(token, Mapping):
            if open_item is None:
                raise InvalidOptionError("Export options must follow a name or tag")
            previous = items[open_item]
            items[open_item] = _make_item(
                TAG_MARKER + previous.identifier if previous.kind == "tag" else previous.identifier,
                token,
            )
            open_item = None
            continue

        if isinstance(token, tuple):
            if len(token) != 2 or not isinstance(token[0], str) or not isinstance(token[1], Mapping):
                raise InvalidOptionError(f"Invalid export pair: {token!r}")
            items.append(_make_item(token[0], token[1]))
            open_item = None
            continue

        if not isinstance(token, str):
            raise InvalidOptionError(f"Invalid export token: {token!r}")

        if token.startswith(OPTION_MARKER):
            name = token[len(OPTION_MARKER):]
            if i >= len(tokens):
                raise InvalidOptionError(f"Missing value for option '{token}'", option=name)
            options[name] = tokens[i]
            i += 1
            open_item = None
            continue

        items.append(_make_item(token))
        open_item = len(items) - 1

    options.update(request_options)
    unknown = set(options) - REQUEST_OPTIONS
    if unknown:
        raise InvalidOptionError(
            f"Unknown request option(s): {', '.join(sorted(unknown))}",
            options=sorted(unknown),
        )
    try:
        return ExportRequest(items=tuple(items), on_clash=options.get("on_clash"))
    except ValidationError as e:
        raise InvalidOptionError(f"Invalid request options: {e}") from e
