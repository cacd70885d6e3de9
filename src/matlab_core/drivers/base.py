from __future__ import annotations

from typing import Any, Callable, Protocol, Union, runtime_checkable


Handle = Any


@runtime_checkable
class Driver(Protocol):
    """Capability set every engine transport implements.

    Drivers own value conversion and the meaning of the handle they return;
    sessions treat both as opaque.
    """

    def open(self, command: str) -> Handle: ...

    def eval_string(self, handle: Handle, expression: str) -> None: ...

    def put_variable(self, handle: Handle, name: str, value: Any) -> None: ...

    def get_variable(self, handle: Handle, name: str) -> Any: ...

    def close(self, handle: Handle) -> None: ...


DriverFactory = Callable[[], Driver]
DriverSpec = Union[str, Driver, DriverFactory, None]


def driver_name(driver: Any) -> str:
    """Human-readable identity of a driver instance for logs and error payloads."""

    name = getattr(driver, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(driver).__name__
