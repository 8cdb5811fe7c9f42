"""Metadata-aware exporter - resolve export requests into namespace bindings."""

__version__ = "0.1.0"

from .models import ExporterConfig, ExportOptions, SymbolMetadata, WrapSpec
from .registry import Registry
from .core import Exporter, load_config
from .request import parse_request

__all__ = [
    "Exporter",
    "ExporterConfig",
    "ExportOptions",
    "Registry",
    "SymbolMetadata",
    "WrapSpec",
    "load_config",
    "parse_request",
]
