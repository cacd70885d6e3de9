from __future__ import annotations

import math
import operator
import re
from typing import Any, Callable, Dict, List, Tuple

import pytest

from matlab_core import DriverRegistry, Session, SessionConfig
from matlab_core.errors import EvaluationError, VariableNotFound

_CALL = re.compile(r"^([A-Za-z][\w.]*)\((.*)\)$")
_BINARY = re.compile(r"^(\w+)\s*=\s*(\w+)\s*([*+/-])\s*(\w+)$")
_OPERATORS = {"*": operator.mul, "+": operator.add, "-": operator.sub, "/": operator.truediv}


class RecordingDriver:
    """In-memory engine that records every primitive it receives.

    Understands just enough of the engine language for tests: ``clear a b``,
    ``f(a, b)`` for functions in ``functions`` and ``z = x <op> y``.
    """

    name = "recording"

    def __init__(self) -> None:
        self.calls: List[Tuple[Any, ...]] = []
        self.workspace: Dict[str, Any] = {}
        self.functions: Dict[str, Callable[..., Any]] = {
            "sqrt": math.sqrt,
            "max": max,
            "pi": lambda: math.pi,
        }
        self.failures: Dict[str, Exception] = {}
        self.handle = object()

    # Driver API --------------------------------------------------------- #

    def open(self, command: str) -> Any:
        self.calls.append(("open", command))
        self._maybe_fail("open")
        return self.handle

    def eval_string(self, handle: Any, expression: str) -> None:
        assert handle is self.handle
        self.calls.append(("eval", expression))
        if expression.startswith("clear"):
            self._maybe_fail("clear")
            for name in expression.split()[1:]:
                self.workspace.pop(name, None)
            return

        self._maybe_fail("eval")
        call = _CALL.match(expression)
        if call:
            function = self.functions.get(call.group(1))
            if function is None:
                raise EvaluationError(
                    message=f"Undefined function '{call.group(1)}'",
                    diagnostic=f"Undefined function or variable '{call.group(1)}'.",
                    driver=self.name,
                )
            names = [item.strip() for item in call.group(2).split(",") if item.strip()]
            self.workspace["ans"] = function(*[self.workspace[name] for name in names])
            return

        binary = _BINARY.match(expression)
        if binary:
            target, left, op, right = binary.groups()
            self.workspace[target] = _OPERATORS[op](self.workspace[left], self.workspace[right])
            return

        raise EvaluationError(message="Parse error", diagnostic=f"Cannot parse '{expression}'", driver=self.name)

    def put_variable(self, handle: Any, name: str, value: Any) -> None:
        assert handle is self.handle
        self.calls.append(("put", name, value))
        self._maybe_fail("put")
        self.workspace[name] = value

    def get_variable(self, handle: Any, name: str) -> Any:
        assert handle is self.handle
        self.calls.append(("get", name))
        self._maybe_fail("get")
        if name not in self.workspace:
            raise VariableNotFound(message=f"Variable '{name}' is not defined", driver=self.name)
        return self.workspace[name]

    def close(self, handle: Any) -> None:
        assert handle is self.handle
        self.calls.append(("close",))
        self._maybe_fail("close")

    # Helpers ------------------------------------------------------------ #

    def fail(self, operation: str, error: Exception) -> None:
        self.failures[operation] = error

    def operations(self) -> List[str]:
        return [call[0] for call in self.calls]

    def _maybe_fail(self, operation: str) -> None:
        error = self.failures.get(operation)
        if error is not None:
            raise error


@pytest.fixture
def driver() -> RecordingDriver:
    return RecordingDriver()


@pytest.fixture
def registry(driver: RecordingDriver) -> DriverRegistry:
    registry = DriverRegistry()
    registry.register("recording", lambda: driver)
    return registry


@pytest.fixture
def session(driver: RecordingDriver) -> Session:
    return Session(driver, config=SessionConfig(command="matlab -nojvm")).open()


@pytest.fixture
def recording_driver_class() -> type:
    return RecordingDriver


def find_calls(driver: RecordingDriver, operation: str) -> List[Tuple[Any, ...]]:
    return [call for call in driver.calls if call[0] == operation]


@pytest.fixture
def calls_of() -> Callable[[RecordingDriver, str], List[Tuple[Any, ...]]]:
    return find_calls
