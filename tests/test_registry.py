"""Tests for the metadata registry."""

import types

import pytest

from meta_exporter.errors import DuplicateSymbolError, RegistryFrozenError
from meta_exporter.models import SymbolMetadata
from meta_exporter.registry import Registry


def _noop():
    return None


def test_from_module_registers_in_declaration_order(registry):
    """Test that symbols keep the provider's declaration order."""
    assert registry.symbols()[:9] == [f"f{i}" for i in range(1, 10)]
    assert "plain" in registry
    assert "_private" not in registry
    assert registry.frozen


def test_lookup_by_tag_preserves_registration_order(registry):
    """Test tag lookup order and never-exportable exclusion."""
    assert registry.lookup_by_tag("a") == ("f1", "f3", "f5", "f6")
    assert registry.lookup_by_tag("b") == ("f1", "f2", "f5", "f7")
    assert registry.lookup_by_tag("default") == ("f1", "f2", "f3", "f4")
    assert registry.lookup_by_tag("never") == ()
    assert registry.lookup_by_tag("nonexistent") == ()


def test_lookup_by_name(registry):
    """Test metadata lookup by name."""
    metadata = registry.lookup_by_name("f5")
    assert metadata.tags == frozenset({"a", "b"})
    assert registry.lookup_by_name("plain") is None
    assert registry.lookup_by_name("missing") is None


def test_arg_spec_from_args_declaration(registry):
    """Test that argument positions are read from ``args`` declarations."""
    assert registry.lookup_by_name("add").arg_spec == {"x": 0, "y": 1}


def test_exportability(registry):
    """Test which symbols can be requested by name."""
    assert registry.is_exportable("f8")
    assert registry.is_exportable("plain")
    assert registry.is_passthrough("plain")
    assert not registry.is_exportable("f9")
    assert not registry.is_exportable("missing")


def test_duplicate_registration_fails():
    """Test that registering a symbol twice raises DuplicateSymbolError."""
    registry = Registry("test")
    registry.register("f", {"tags": ["x"]}, _noop)

    with pytest.raises(DuplicateSymbolError) as exc_info:
        registry.register("f", {"tags": ["y"]}, _noop)
    assert exc_info.value.symbol == "f"

    with pytest.raises(DuplicateSymbolError):
        registry.expose("f", _noop)


def test_frozen_registry_rejects_registration():
    """Test that the registry is read-only after freeze."""
    registry = Registry("test")
    registry.freeze()

    with pytest.raises(RegistryFrozenError):
        registry.register("f", SymbolMetadata(name="f"), _noop)
    with pytest.raises(RegistryFrozenError):
        registry.expose("g", _noop)
    with pytest.raises(RegistryFrozenError):
        registry.set_default_exports(["f"])


def test_reserved_tag_aliases():
    """Test that export:default and export:never map to the reserved tags."""
    registry = Registry("test")
    registry.register("f", {"tags": ["export:default"]}, _noop)
    registry.register("g", {"tags": ["a", "export:never"]}, _noop)

    assert registry.lookup_by_tag("default") == ("f",)
    assert registry.lookup_by_tag("a") == ()
    assert not registry.is_exportable("g")


def test_from_module_reads_default_list_and_skips_missing():
    """Test EXPORT_DEFAULT handling and missing callables."""
    module = types.ModuleType("provider")
    module.EXPORT_SPEC = {"f": {"tags": ["x"]}, "ghost": {"tags": ["x"]}}
    module.EXPORT_DEFAULT = ["f", "g"]
    module.f = _noop
    module.g = _noop

    registry = Registry.from_module(module)

    assert registry.symbols() == ["f", "g"]
    assert registry.is_passthrough("g")
    assert registry.default_exports == ["f", "g"]
    assert "ghost" not in registry
