"""Semantic validation of a provider's export declarations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .types import DEFAULT_TAG, NEVER_TAG, is_valid_identifier

if TYPE_CHECKING:
    from .registry import Registry
    from .types import Errors


def semantic_validate(registry: Registry, strict: bool = False) -> Errors:
    """
    Perform semantic validation on a provider registry.

    Args:
        registry: The registry to validate
        strict: Whether to perform strict validation

    Returns:
        A list of validation errors, empty if valid
    """
    errors = []

    errors.extend(validate_symbol_names(registry))
    errors.extend(validate_conflicting_tags(registry))
    errors.extend(validate_arg_positions(registry))
    errors.extend(validate_default_exports(registry))

    if strict:
        errors.extend(validate_strict_rules(registry))

    return errors


def validate_symbol_names(registry: Registry) -> Errors:
    """Validate that every symbol could be bound under its own name."""
    errors = []

    for symbol in registry.symbols():
        if not is_valid_identifier(symbol):
            errors.append(f"Symbol '{symbol}' is not a valid identifier")

    return errors


def validate_conflicting_tags(registry: Registry) -> Errors:
    """Validate that no symbol is tagged both default and never."""
    errors = []

    for symbol in registry.symbols():
        metadata = registry.lookup_by_name(symbol)
        if metadata and {DEFAULT_TAG, NEVER_TAG} <= metadata.tags:
            errors.append(
                f"Symbol '{symbol}' is tagged both '{DEFAULT_TAG}' and '{NEVER_TAG}'"
            )

    return errors


def validate_arg_positions(registry: Registry) -> Errors:
    """
    Validate argument positions in each symbol's arg spec.

    Rules:
    - Positions must be non-negative
    - Positions must be unique
    - Positions must be sequential from 0 (no gaps)
    """
    errors = []

    for symbol in registry.symbols():
        metadata = registry.lookup_by_name(symbol)
        if not metadata or not metadata.arg_spec:
            continue

        positions = list(metadata.arg_spec.values())
        if any(pos < 0 for pos in positions):
            errors.append(f"Symbol '{symbol}' has negative argument positions")
            continue

        unique_positions = set(positions)
        if len(positions) != len(unique_positions):
            errors.append(f"Symbol '{symbol}' must have unique argument positions")

        expected = set(range(len(unique_positions)))
        if unique_positions != expected:
            errors.append(
                f"Symbol '{symbol}' must have sequential argument positions "
                f"(found: {sorted(unique_positions)}, expected: {sorted(expected)})"
            )

    return errors


def validate_default_exports(registry: Registry) -> Errors:
    """Validate that every name in the default-name list can be exported."""
    errors = []

    for name in registry.default_exports or []:
        if name not in registry:
            errors.append(f"Default export '{name}' is not provided")
        elif not registry.is_exportable(name):
            errors.append(f"Default export '{name}' is marked never-exportable")

    return errors


def validate_strict_rules(registry: Registry) -> Errors:
    """
    Perform additional strict validations.

    Rules:
    - Symbols with metadata should carry at least one tag
    - The provider should declare some default exports
    """
    errors = []

    for symbol in registry.symbols():
        metadata = registry.lookup_by_name(symbol)
        if metadata is not None and not metadata.tags:
            errors.append(f"Symbol '{symbol}' should have at least one tag")

    if not registry.lookup_by_tag(DEFAULT_TAG) and not registry.default_exports:
        errors.append("Provider declares no default exports")

    return errors
