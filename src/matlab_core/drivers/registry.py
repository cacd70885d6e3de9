from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from ..errors import DriverNotFound, NoDriverAvailable
from .base import Driver, DriverSpec

LOGGER = logging.getLogger(__name__)

# Discovery order for ``resolve(None)``.
BUILTIN_DRIVERS = [
    ("native", "matlab_core.drivers.native:NativeDriver"),
]

FactoryTarget = Union[str, Callable[[], Any]]


@dataclass
class DriverEntry:
    """Registry entry binding a driver name to a lazily imported factory."""

    name: str
    target: FactoryTarget

    def load(self) -> Driver:
        """Import (if needed) and instantiate the driver this entry points at."""

        factory = _import_target(self.target) if isinstance(self.target, str) else self.target
        return _instantiate(factory)


class DriverRegistry:
    """Ordered name-to-factory mapping used to select a session's driver."""

    def __init__(self, entries: Optional[Iterable[DriverEntry]] = None) -> None:
        self._entries: Dict[str, DriverEntry] = {}
        for entry in entries or []:
            self.register(entry.name, entry.target)

    @classmethod
    def builtin(cls) -> "DriverRegistry":
        return cls(DriverEntry(name=name, target=target) for name, target in BUILTIN_DRIVERS)

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, name: str, target: FactoryTarget) -> None:
        """Register ``target`` (``"module:attribute"`` or a factory) under ``name``."""

        key = _normalise_name(name)
        if not key:
            raise ValueError("Driver name cannot be empty.")
        if isinstance(target, str) and ":" not in target:
            raise ValueError(f"Driver target '{target}' must look like 'module:attribute'.")
        self._entries[key] = DriverEntry(name=key, target=target)

    def names(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _normalise_name(name) in self._entries

    # ------------------------------------------------------------------ #
    # Resolution
    # ------------------------------------------------------------------ #

    def resolve(self, driver: DriverSpec = None) -> Driver:
        """Return a ready-to-open driver for ``driver``.

        Accepts a driver object, a driver class or zero-argument factory, a
        registered name, or ``None`` for auto-discovery. Never contacts the engine.
        """

        if driver is None:
            return self.discover()
        if isinstance(driver, str):
            return self.load(driver)
        if isinstance(driver, type) or not isinstance(driver, Driver):
            if not callable(driver):
                raise TypeError(f"Unsupported driver selector type: {type(driver)!r}")
            return _instantiate(driver)
        return driver

    def load(self, name: str) -> Driver:
        """Instantiate the driver registered under ``name`` (case-insensitive)."""

        key = _normalise_name(name)
        entry = self._entries.get(key)
        if entry is None:
            raise DriverNotFound(f"Driver '{name}' is not registered.")
        try:
            driver = entry.load()
        except SyntaxError:
            raise
        except Exception as exc:
            raise DriverNotFound(f"Driver '{name}' could not be loaded: {exc}") from exc
        LOGGER.info("Loaded engine driver '%s'", key)
        return driver

    def discover(self) -> Driver:
        """Return the first registered driver that loads, in registration order."""

        failures: List[str] = []
        for key, entry in self._entries.items():
            try:
                driver = entry.load()
            except SyntaxError:
                raise
            except Exception as exc:
                LOGGER.warning("Driver '%s' unavailable: %s", key, exc)
                failures.append(f"{key}: {exc}")
                continue
            LOGGER.info("Auto-selected engine driver '%s'", key)
            return driver

        detail = "; ".join(failures) if failures else "no drivers registered"
        raise NoDriverAvailable(f"No engine driver could be loaded ({detail}).")


def _normalise_name(name: str) -> str:
    return name.strip().lower()


def _import_target(target: str) -> Callable[[], Any]:
    module_name, _, attribute = target.partition(":")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attribute)
    except AttributeError as exc:
        raise ImportError(f"Module '{module_name}' has no attribute '{attribute}'") from exc


def _instantiate(factory: Callable[[], Any]) -> Driver:
    driver = factory()
    if not isinstance(driver, Driver):
        raise TypeError(f"{factory!r} did not produce an engine driver (got {type(driver)!r}).")
    return driver
