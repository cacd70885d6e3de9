"""Session configuration with environment overrides."""

from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .dispatch import IDENTIFIER_PATTERN, MAX_IDENTIFIER_LENGTH

# Leaves room for the ordinal and function name in temporary variable names.
MAX_TEMP_PREFIX_LENGTH = 40

DEFAULT_COMMAND = "matlab -nodesktop -nosplash"


class SessionConfig(BaseModel):
    """Runtime settings for one engine session.

    Attributes:
        command: Launch command or connection descriptor handed to ``Driver.open``.
        driver: Preferred driver name. ``None`` triggers auto-discovery.
        result_variable: The engine's implicit last-result slot read back by ``call``.
        temp_prefix: Prefix for temporary argument variables created by ``call``.
        clear_command: Engine statement used to remove temporaries.
    """

    command: str = Field(default=DEFAULT_COMMAND)
    driver: Optional[str] = Field(default=None)
    result_variable: str = Field(default="ans")
    temp_prefix: str = Field(default="mr")
    clear_command: str = Field(default="clear")

    @field_validator("driver", mode="before")
    @classmethod
    def _normalize_driver(cls, driver: Optional[str]) -> Optional[str]:
        if driver is None:
            return None
        if not isinstance(driver, str):
            raise ValueError(f"Unsupported driver name type '{type(driver)}'")
        normalized = driver.strip().lower()
        return normalized or None

    @field_validator("result_variable", "temp_prefix")
    @classmethod
    def _require_identifier(cls, value: str) -> str:
        value = value.strip()
        if not IDENTIFIER_PATTERN.fullmatch(value):
            raise ValueError(f"'{value}' is not a valid engine identifier")
        if len(value) > MAX_IDENTIFIER_LENGTH:
            raise ValueError(f"'{value}' exceeds {MAX_IDENTIFIER_LENGTH} characters")
        return value

    @field_validator("temp_prefix")
    @classmethod
    def _limit_prefix(cls, value: str) -> str:
        if len(value) > MAX_TEMP_PREFIX_LENGTH:
            raise ValueError(f"temp_prefix cannot exceed {MAX_TEMP_PREFIX_LENGTH} characters")
        return value

    @field_validator("command", "clear_command")
    @classmethod
    def _require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Value cannot be empty.")
        return value

    @classmethod
    def from_env(cls, **overrides: object) -> "SessionConfig":
        """Build a config from ``MATLAB_COMMAND`` / ``MATLAB_DRIVER``, then apply overrides."""

        values: dict[str, object] = {}
        command = os.environ.get("MATLAB_COMMAND")
        if command and command.strip():
            values["command"] = command
        driver = os.environ.get("MATLAB_DRIVER")
        if driver and driver.strip():
            values["driver"] = driver
        values.update(overrides)
        return cls(**values)
