"""Engine sessions: one driver, one handle, and the dynamic call protocol.

Usage::

    from matlab_core import open_session

    with open_session() as engine:
        engine.set_variable("x", 123.456)
        engine.set_variable("y", 789.101112)
        engine.evaluate("z = x * y")
        engine.get_variable("z")

        engine.sqrt(16.0)          # same as engine.call("sqrt", [16.0])

Each positional argument of a dynamic call is written to a temporary remote
variable, the function is evaluated on those variables, the engine's implicit
result slot is read back, and the temporaries are cleared again.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, TypeVar

from .config import SessionConfig
from .dispatch import (
    build_call_expression,
    build_clear_expression,
    temporary_variable_names,
    validate_function_name,
)
from .drivers.base import Driver, DriverSpec, Handle, driver_name
from .drivers.registry import DriverRegistry
from .errors import EngineError, EngineUnreachable, UsageError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class SessionState(str, Enum):
    """Lifecycle of a session's engine handle."""

    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class RemoteFunction:
    """Callable proxy for a function living in the engine."""

    session: "Session"
    name: str

    def __call__(self, *args: Any) -> Any:
        return self.session.call(self.name, args)


class Session:
    """Exclusive owner of one engine handle obtained from a driver.

    Attribute access for any public name that is not defined here yields a
    ``RemoteFunction``, so ``session.max(a, b)`` dispatches ``max`` remotely.
    All operations are serialized on an internal lock.
    """

    def __init__(
        self,
        driver: DriverSpec = None,
        *,
        config: Optional[SessionConfig] = None,
        registry: Optional[DriverRegistry] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config or SessionConfig()
        self.logger = logger or LOGGER

        selector = driver if driver is not None else self.config.driver
        self._driver: Driver = (registry or DriverRegistry.builtin()).resolve(selector)
        self._handle: Optional[Handle] = None
        self._state = SessionState.UNOPENED
        self._lock = threading.RLock()

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    @property
    def driver(self) -> Driver:
        return self._driver

    @property
    def handle(self) -> Optional[Handle]:
        return self._handle

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is SessionState.CLOSED

    def open(self, command: Optional[str] = None) -> "Session":
        """Ask the driver for a handle. Returns ``self`` for chaining."""

        with self._lock:
            if self._state is not SessionState.UNOPENED:
                raise UsageError(f"Cannot open a session that is {self._state.value}.")

            target = command if command is not None else self.config.command
            try:
                handle = self._driver.open(target)
            except EngineUnreachable:
                raise
            except Exception as exc:
                raise EngineUnreachable(
                    message=f"Unable to open engine with '{target}'",
                    diagnostic=str(exc),
                    driver=driver_name(self._driver),
                ) from exc

            self._handle = handle
            self._state = SessionState.OPEN
            self.logger.info("Opened engine session via driver '%s'", driver_name(self._driver))
            return self

    def close(self) -> None:
        """Release the handle. Closing an already closed session is a no-op."""

        with self._lock:
            if self._state is SessionState.CLOSED:
                return
            if self._state is SessionState.UNOPENED:
                self._state = SessionState.CLOSED
                return

            handle = self._handle
            try:
                self._driver.close(handle)
            finally:
                self._handle = None
                self._state = SessionState.CLOSED
            self.logger.info("Closed engine session via driver '%s'", driver_name(self._driver))

    def __enter__(self) -> "Session":
        if self._state is SessionState.UNOPENED:
            self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Engine primitives
    # ------------------------------------------------------------------ #

    def evaluate(self, expression: str) -> None:
        """Send ``expression`` to the engine verbatim."""

        with self._lock:
            self._require_open("evaluate")
            self.logger.debug("eval: %s", expression)
            self._driver.eval_string(self._handle, expression)

    def set_variable(self, name: str, value: Any) -> None:
        with self._lock:
            self._require_open("set_variable")
            self.logger.debug("put: %s", name)
            self._driver.put_variable(self._handle, name, value)

    def get_variable(self, name: str) -> Any:
        with self._lock:
            self._require_open("get_variable")
            self.logger.debug("get: %s", name)
            return self._driver.get_variable(self._handle, name)

    eval_string = evaluate
    put_variable = set_variable

    # ------------------------------------------------------------------ #
    # Dynamic dispatch
    # ------------------------------------------------------------------ #

    def call(self, name: str, args: Sequence[Any] = ()) -> Any:
        """Invoke remote function ``name`` on ``args`` and return the engine's result slot.

        Temporaries are cleared before returning or raising. If clearing fails
        after an earlier error, the earlier error wins and carries the cleanup
        failure as ``cleanup_error``.
        """

        with self._lock:
            self._require_open("call")
            function_name = validate_function_name(name)
            arguments = list(args)
            variable_names = temporary_variable_names(
                function_name, len(arguments), prefix=self.config.temp_prefix
            )
            created: List[str] = []
            try:
                for variable_name, value in zip(variable_names, arguments):
                    created.append(variable_name)
                    self.set_variable(variable_name, value)
                self.evaluate(build_call_expression(function_name, variable_names))
                result = self.get_variable(self.config.result_variable)
            except BaseException as exc:
                self._clear_temporaries(created, original=exc)
                raise

            self._clear_temporaries(created)
            return result

    def __getattr__(self, name: str) -> RemoteFunction:
        if name.startswith("_"):
            raise AttributeError(name)
        return RemoteFunction(self, name)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _require_open(self, operation: str) -> None:
        if self._state is not SessionState.OPEN:
            raise UsageError(f"Cannot {operation} on a session that is {self._state.value}.")

    def _clear_temporaries(self, names: List[str], *, original: Optional[BaseException] = None) -> None:
        # A bare clear would wipe the caller's whole workspace.
        if not names:
            return

        try:
            self.evaluate(build_clear_expression(names, command=self.config.clear_command))
        except Exception as cleanup_exc:
            if original is None:
                raise
            self.logger.warning("Failed to clear temporaries %s after error: %s", names, cleanup_exc)
            if isinstance(original, EngineError) and original.cleanup_error is None:
                original.cleanup_error = cleanup_exc

    def __repr__(self) -> str:
        return f"<Session driver={driver_name(self._driver)!r} state={self._state.value}>"


def open_session(
    command: Optional[str] = None,
    *,
    driver: DriverSpec = None,
    config: Optional[SessionConfig] = None,
    registry: Optional[DriverRegistry] = None,
    logger: Optional[logging.Logger] = None,
    callback: Optional[Callable[[Session], T]] = None,
) -> Any:
    """Resolve a driver, open a session and return it.

    With ``callback``, the open session is passed to it and closed exactly once
    afterwards, whatever the callback does; the callback's return value is returned.
    """

    session = Session(driver, config=config, registry=registry, logger=logger)
    session.open(command)

    if callback is None:
        return session

    try:
        return callback(session)
    finally:
        session.close()
