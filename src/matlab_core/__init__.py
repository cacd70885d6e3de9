"""
Python sessions for a live MATLAB engine.

``matlab_core`` exposes a remote engine through a small driver interface and
turns ordinary Python calls into engine expressions (see ``session``).
"""

from .config import SessionConfig
from .drivers import Driver, DriverRegistry
from .errors import (
    CloseError,
    ConversionError,
    DriverNotFound,
    DriverResolutionError,
    EngineError,
    EngineUnreachable,
    EvaluationError,
    NoDriverAvailable,
    UsageError,
    VariableNotFound,
)
from .session import RemoteFunction, Session, SessionState, open_session

__version__ = "0.1.0"

__all__ = [
    "CloseError",
    "ConversionError",
    "Driver",
    "DriverNotFound",
    "DriverRegistry",
    "DriverResolutionError",
    "EngineError",
    "EngineUnreachable",
    "EvaluationError",
    "NoDriverAvailable",
    "RemoteFunction",
    "Session",
    "SessionConfig",
    "SessionState",
    "UsageError",
    "VariableNotFound",
    "open_session",
]
