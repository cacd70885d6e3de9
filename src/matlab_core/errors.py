"""Error taxonomy shared by sessions and drivers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class DriverResolutionError(LookupError):
    """Raised when no usable driver can be selected. No engine has been contacted."""


class DriverNotFound(DriverResolutionError):
    """Raised when an explicitly named driver is unknown or fails to load."""


class NoDriverAvailable(DriverResolutionError):
    """Raised when auto-discovery exhausts every registered driver."""


class UsageError(RuntimeError):
    """Raised when an operation is invoked on a session that is not open."""


@dataclass(eq=False)
class EngineError(Exception):
    """Base class for failures reported by a driver or the remote engine."""

    message: str
    diagnostic: Optional[str] = None
    driver: Optional[str] = None
    cleanup_error: Optional[BaseException] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.diagnostic and self.diagnostic not in self.message:
            return f"{self.message}: {self.diagnostic}"
        return self.message


@dataclass(eq=False)
class EngineUnreachable(EngineError):
    """The driver could not open a handle to the engine."""


@dataclass(eq=False)
class EvaluationError(EngineError):
    """The engine rejected or raised on an evaluated expression."""


@dataclass(eq=False)
class ConversionError(EngineError):
    """A value could not cross the Python/engine boundary."""


@dataclass(eq=False)
class VariableNotFound(EngineError):
    """A read targeted a variable that is not defined in the remote workspace."""


@dataclass(eq=False)
class CloseError(EngineError):
    """Releasing the engine handle failed."""
