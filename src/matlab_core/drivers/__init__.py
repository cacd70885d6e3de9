"""
Engine drivers for matlab-core sessions.

A driver implements five primitives (open, eval_string, put_variable,
get_variable, close) against one concrete transport. Drivers are selected
through a ``DriverRegistry`` by name, by object, or by auto-discovery.
"""

from .base import Driver, DriverFactory, DriverSpec, Handle
from .registry import BUILTIN_DRIVERS, DriverEntry, DriverRegistry

__all__ = [
    "BUILTIN_DRIVERS",
    "Driver",
    "DriverEntry",
    "DriverFactory",
    "DriverRegistry",
    "DriverSpec",
    "Handle",
]
