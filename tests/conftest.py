"""Shared fixtures for the exporter tests."""

import threading

import pytest

import export_examples
from meta_exporter.core import Exporter
from meta_exporter.registry import Registry
from meta_exporter.wrapping import DefaultWrapService


class CountingWrapService(DefaultWrapService):
    """Wrap service that records every call."""

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def wrap(self, func, spec):
        with self._lock:
            self.calls.append((func.__name__, spec))
        return super().wrap(func, spec)

    def count(self, name):
        return sum(1 for called, _ in self.calls if called == name)


@pytest.fixture
def registry():
    """Frozen registry built from the example provider module."""
    return Registry.from_module(export_examples)


@pytest.fixture
def wrap_service():
    return CountingWrapService()


@pytest.fixture
def exporter(registry, wrap_service):
    return Exporter(registry, wrap_service=wrap_service)
