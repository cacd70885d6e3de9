"""Pure helpers that turn a function-style call into engine expression text."""

from __future__ import annotations

import re
from typing import List, Sequence

IDENTIFIER_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
FUNCTION_NAME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_]*(?:\.[A-Za-z][A-Za-z0-9_]*)*")

# MATLAB's namelengthmax.
MAX_IDENTIFIER_LENGTH = 63

_NON_IDENTIFIER_CHARS = re.compile(r"[^A-Za-z0-9_]")


def validate_function_name(name: str) -> str:
    """Return ``name`` stripped, or raise ``ValueError`` if it cannot name a remote function.

    Package-qualified names such as ``stats.mean`` are accepted.
    """

    if not isinstance(name, str):
        raise TypeError(f"Function name must be a string, got {type(name)!r}")
    candidate = name.strip()
    if not FUNCTION_NAME_PATTERN.fullmatch(candidate):
        raise ValueError(f"'{name}' is not a valid remote function name.")
    return candidate


def temporary_variable_name(function_name: str, index: int, *, prefix: str = "mr") -> str:
    """Name of the temporary holding argument ``index`` of a call to ``function_name``."""

    if index < 0:
        raise ValueError("Argument index cannot be negative.")
    head = f"{prefix}{index}_"
    if len(head) >= MAX_IDENTIFIER_LENGTH:
        raise ValueError(
            f"Prefix '{prefix}' leaves no room for argument {index} within {MAX_IDENTIFIER_LENGTH} characters."
        )
    suffix = _NON_IDENTIFIER_CHARS.sub("_", function_name)
    return f"{head}{suffix}"[:MAX_IDENTIFIER_LENGTH]


def temporary_variable_names(function_name: str, count: int, *, prefix: str = "mr") -> List[str]:
    # Truncation only cuts the function-name suffix; the prefix and ordinal are always kept whole.
    return [temporary_variable_name(function_name, index, prefix=prefix) for index in range(count)]


def build_call_expression(function_name: str, variable_names: Sequence[str]) -> str:
    """``f(a, b)`` style expression invoking ``function_name`` on the given variables."""

    return f"{function_name}({', '.join(variable_names)})"


def build_clear_expression(variable_names: Sequence[str], *, command: str = "clear") -> str:
    """Statement removing ``variable_names`` from the remote workspace.

    An empty name list is rejected: a bare ``clear`` empties the whole workspace.
    """

    if not variable_names:
        raise ValueError("At least one variable name is required.")
    return f"{command} {' '.join(variable_names)}"
