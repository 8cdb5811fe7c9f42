"""Exception types raised by the export engine."""

from __future__ import annotations

from typing import Any


class ExportError(Exception):
    """Base class for every error raised while registering or exporting."""

    code = "export_error"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "context": dict(self.context)}


class DuplicateSymbolError(ExportError):
    code = "duplicate_symbol"

    def __init__(self, symbol: str):
        super().__init__(f"Symbol '{symbol}' is already registered", symbol=symbol)
        self.symbol = symbol


class RegistryFrozenError(ExportError):
    code = "registry_frozen"

    def __init__(self, symbol: str):
        super().__init__(
            f"Cannot register '{symbol}': registry is frozen", symbol=symbol
        )
        self.symbol = symbol


class UnknownSymbolError(ExportError):
    code = "unknown_symbol"

    def __init__(self, symbol: str):
        super().__init__(f"'{symbol}' is not exported", symbol=symbol)
        self.symbol = symbol


class InvalidOptionError(ExportError):
    code = "invalid_option"


class InvalidIdentifierError(ExportError):
    code = "invalid_identifier"

    def __init__(self, name: str, symbol: str | None = None):
        super().__init__(f"Invalid target name '{name}'", name=name, symbol=symbol)
        self.name = name
        self.symbol = symbol


class TargetNameCollisionError(ExportError):
    code = "target_name_collision"

    def __init__(self, target_name: str, symbols: tuple[str, str]):
        super().__init__(
            f"'{symbols[0]}' and '{symbols[1]}' would both be exported as '{target_name}'",
            target_name=target_name,
            symbols=symbols,
        )
        self.target_name = target_name
        self.symbols = symbols


class NameClashError(ExportError):
    code = "name_clash"

    def __init__(self, target_name: str):
        super().__init__(
            f"'{target_name}' already exists in the target namespace",
            target_name=target_name,
        )
        self.target_name = target_name


class WrapFailureError(ExportError):
    code = "wrap_failure"

    def __init__(self, symbol: str, reason: str):
        super().__init__(f"Failed to wrap '{symbol}': {reason}", symbol=symbol)
        self.symbol = symbol
