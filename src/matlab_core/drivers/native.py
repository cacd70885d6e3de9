"""In-process driver built on the MATLAB Engine API for Python.

The engine API ships with MATLAB (``pip install matlabengine`` against a
local installation). It is imported when the driver is instantiated, so an
installation without MATLAB simply makes this driver unavailable during
auto-discovery.
"""

from __future__ import annotations

import logging
import shlex
from types import ModuleType
from typing import Any, List, Optional, Tuple

from ..errors import (
    CloseError,
    ConversionError,
    EngineUnreachable,
    EvaluationError,
    VariableNotFound,
)

LOGGER = logging.getLogger(__name__)

SHARED_PREFIX = "shared"


class NativeDriver:
    """Driver that runs MATLAB through ``matlab.engine``; handles are engine objects."""

    name = "native"

    def __init__(self, engine_module: Optional[ModuleType] = None) -> None:
        if engine_module is None:
            import matlab.engine as engine_module

        self._engine = engine_module
        self._execution_errors = _execution_error_types(engine_module)

    # ------------------------------------------------------------------ #
    # Driver API
    # ------------------------------------------------------------------ #

    def open(self, command: str) -> Any:
        try:
            shared, value = parse_command(command)
            if shared:
                LOGGER.debug("Connecting to shared MATLAB session %r", value or "<first available>")
                return self._engine.connect_matlab(value) if value else self._engine.connect_matlab()
            LOGGER.debug("Starting MATLAB with options %r", value)
            return self._engine.start_matlab(value) if value else self._engine.start_matlab()
        except Exception as exc:
            raise EngineUnreachable(
                message=f"Unable to open MATLAB engine for command '{command}'",
                diagnostic=str(exc),
                driver=self.name,
            ) from exc

    def eval_string(self, handle: Any, expression: str) -> None:
        try:
            handle.eval(expression, nargout=0)
        except self._execution_errors as exc:
            raise EvaluationError(
                message=f"MATLAB rejected expression '{expression}'",
                diagnostic=str(exc).strip(),
                driver=self.name,
            ) from exc

    def put_variable(self, handle: Any, name: str, value: Any) -> None:
        try:
            handle.workspace[name] = value
        except (TypeError, ValueError) as exc:
            raise ConversionError(
                message=f"Cannot send {type(value).__name__} value for '{name}' to MATLAB",
                diagnostic=str(exc),
                driver=self.name,
            ) from exc
        except self._execution_errors as exc:
            raise ConversionError(
                message=f"MATLAB refused value for '{name}'",
                diagnostic=str(exc).strip(),
                driver=self.name,
            ) from exc

    def get_variable(self, handle: Any, name: str) -> Any:
        try:
            defined = handle.exist(name, "var", nargout=1)
        except self._execution_errors as exc:
            raise EvaluationError(
                message=f"Unable to check MATLAB workspace for '{name}'",
                diagnostic=str(exc).strip(),
                driver=self.name,
            ) from exc
        if not defined:
            raise VariableNotFound(
                message=f"Variable '{name}' is not defined in the MATLAB workspace",
                driver=self.name,
            )

        try:
            return handle.workspace[name]
        except (TypeError, ValueError) as exc:
            raise ConversionError(
                message=f"Cannot convert MATLAB variable '{name}'",
                diagnostic=str(exc),
                driver=self.name,
            ) from exc
        except self._execution_errors as exc:
            raise ConversionError(
                message=f"Cannot convert MATLAB variable '{name}'",
                diagnostic=str(exc).strip(),
                driver=self.name,
            ) from exc

    def close(self, handle: Any) -> None:
        try:
            handle.quit()
        except Exception as exc:
            raise CloseError(
                message="Failed to shut down MATLAB engine",
                diagnostic=str(exc),
                driver=self.name,
            ) from exc


def parse_command(command: str) -> Tuple[bool, str]:
    """Split a launch command into ``(shared, value)``.

    ``"shared"`` / ``"shared:<name>"`` attach to a shared session; anything else
    is a startup command whose leading ``matlab`` executable token is dropped,
    leaving the option string ``start_matlab`` expects.
    """

    text = (command or "").strip()
    head, sep, tail = text.partition(":")
    if head.strip().lower() == SHARED_PREFIX and (sep or not tail):
        return True, tail.strip()

    tokens: List[str] = shlex.split(text)
    if tokens and _is_matlab_executable(tokens[0]):
        tokens = tokens[1:]
    return False, " ".join(tokens)


def _is_matlab_executable(token: str) -> bool:
    basename = token.replace("\\", "/").rsplit("/", 1)[-1].lower()
    return basename in {"matlab", "matlab.exe"}


def _execution_error_types(engine_module: ModuleType) -> Tuple[type, ...]:
    types = []
    for attribute in ("MatlabExecutionError", "RejectedExecutionError", "EngineError"):
        candidate = getattr(engine_module, attribute, None)
        if isinstance(candidate, type) and issubclass(candidate, BaseException):
            types.append(candidate)
    return tuple(types) or (RuntimeError,)
