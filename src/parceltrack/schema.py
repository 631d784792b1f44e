"""
Schema definitions for parceltrack.

This module defines the Pydantic models used throughout parceltrack:
- ParcelStatus: The fixed set of parcel states
- Parcel: One row of the parcel table
- Settings: Database location, connection timeout and log level

Design Decisions:
    - Parcel is frozen; updated copies come from model_copy()
    - Status is stored as a plain string so the store never rejects
      a value the caller chose to write
    - Settings forbid unknown keys so typos in YAML surface early
"""

import logging
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from parceltrack.errors import ConfigError


# =============================================================================
# Enums
# =============================================================================


class ParcelStatus(str, Enum):
    """Lifecycle states of a parcel."""

    REGISTERED = "registered"
    SENT = "sent"
    DELIVERED = "delivered"


def status_value(status: ParcelStatus | str) -> str:
    """Return the plain string stored in the status column."""
    if isinstance(status, ParcelStatus):
        return status.value
    return status


def now_rfc3339() -> str:
    """Get current UTC time as an RFC3339 timestamp with second precision."""
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


# =============================================================================
# Parcel Model
# =============================================================================


class Parcel(BaseModel):
    """
    A shipment record tracked by the store.

    Attributes:
        number: Primary key assigned by the store (0 until stored)
        client: Identifier of the owning client
        address: Delivery address
        status: Current status, normally one of ParcelStatus
        created_at: RFC3339 creation timestamp
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    number: int = Field(default=0, description="Primary key assigned on insert")
    client: int = Field(..., description="Owning client identifier")
    address: str = Field(..., description="Delivery address")
    status: str = Field(
        default=ParcelStatus.REGISTERED.value,
        description="Current parcel status",
    )
    created_at: str = Field(
        default_factory=now_rfc3339,
        description="RFC3339 creation timestamp",
    )

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        """Store enum members as their string value."""
        if isinstance(v, ParcelStatus):
            return v.value
        return v


# =============================================================================
# Settings
# =============================================================================


class Settings(BaseModel):
    """
    Runtime settings for the CLI.

    Attributes:
        db_path: SQLite database file
        timeout: Seconds sqlite3 waits on a locked database
        log_level: Logging level name used when --verbose is not given
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    db_path: Path = Field(default=Path("tracker.db"))
    timeout: float = Field(default=5.0, gt=0)
    log_level: str = Field(default="WARNING")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept only level names the logging module knows."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            msg = f"Unknown log level: {v}"
            raise ValueError(msg)
        return level


def load_settings(path: Path | str) -> Settings:
    """
    Load settings from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated Settings object

    Raises:
        ConfigError: If the file can't be read or doesn't match the schema
    """
    path = Path(path)
    try:
        with path.open() as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(path=str(path), underlying_error=str(e)) from e

    return load_settings_from_string(content, source=str(path))


def load_settings_from_string(content: str, source: str = "<string>") -> Settings:
    """Load settings from a YAML string."""
    try:
        data = yaml.safe_load(content)
        return Settings.model_validate(data or {})
    except (yaml.YAMLError, ValidationError) as e:
        raise ConfigError(path=source, underlying_error=str(e)) from e
