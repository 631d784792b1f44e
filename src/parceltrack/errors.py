"""
Exception hierarchy for parceltrack.

All parceltrack exceptions inherit from ParcelTrackError, allowing callers to
catch every package-specific failure with a single except clause.

Exception Categories:
    - ParcelNotFoundError: No parcel with the requested number
    - InvalidStatusTransitionError: Parcel cannot advance any further
    - StorageError: Opening the database or creating the schema failed
    - ConfigError: Settings file missing or invalid

Errors raised by sqlite3 while ParcelStore executes a statement are not
wrapped here; they reach the caller as the original sqlite3.Error.

Subclasses declare their code and suggestion as class attributes and
override describe()/details(); the base fills in whatever the caller
didn't pass explicitly.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar


# =============================================================================
# Error Codes
# =============================================================================

# Workflow errors: 3xxx
ERROR_STATUS_TRANSITION = 3001

# Lookup errors: 4xxx
ERROR_PARCEL_NOT_FOUND = 4001

# Storage errors: 5xxx
ERROR_STORAGE_CONNECTION = 5001
ERROR_STORAGE_SCHEMA = 5002

# Configuration errors: 6xxx
ERROR_CONFIG_INVALID = 6001


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class ParcelTrackError(Exception):
    """
    Base exception for all parceltrack errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code; defaults to the class's default_code
        suggestion: Optional hint; defaults to the class's default_suggestion
        context: Debugging info, extended with details() on construction
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    default_code: ClassVar[int] = 0
    default_suggestion: ClassVar[str | None] = None

    def __post_init__(self) -> None:
        if self.code == 0:
            self.code = self.default_code
        if self.suggestion is None:
            self.suggestion = self.default_suggestion
        if not self.message:
            self.message = self.describe()
        self.context.update(self.details())

    def describe(self) -> str:
        """Message used when none was given."""
        return self.__class__.__name__

    def details(self) -> dict[str, Any]:
        """Class-specific fields merged into context."""
        return {}

    def __str__(self) -> str:
        lines = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            lines.append(f"Suggestion: {self.suggestion}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(code={self.code}, "
            f"message={self.message!r}, context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "context": dict(self.context),
        }


# =============================================================================
# Lookup Errors
# =============================================================================


@dataclass
class ParcelNotFoundError(ParcelTrackError):
    """
    Raised when a point lookup by parcel number matches no row.

    Kept apart from storage failures so callers can tell
    "doesn't exist" from "database broken".
    """

    number: int = 0

    default_code: ClassVar[int] = ERROR_PARCEL_NOT_FOUND

    def describe(self) -> str:
        return f"Parcel not found: {self.number}"

    def details(self) -> dict[str, Any]:
        return {"number": self.number}


# =============================================================================
# Workflow Errors
# =============================================================================


@dataclass
class InvalidStatusTransitionError(ParcelTrackError):
    """Raised when a parcel's status has no successor."""

    number: int = 0
    status: str = ""

    default_code: ClassVar[int] = ERROR_STATUS_TRANSITION

    def describe(self) -> str:
        return f"Parcel {self.number} cannot leave status '{self.status}'"

    def details(self) -> dict[str, Any]:
        return {"number": self.number, "status": self.status}


# =============================================================================
# Storage Errors
# =============================================================================


@dataclass
class StorageError(ParcelTrackError):
    """
    Base class for connection and schema lifecycle errors.

    Attributes:
        operation: The operation that failed (e.g., "connect", "init_schema")
    """

    operation: str = ""

    def details(self) -> dict[str, Any]:
        return {"operation": self.operation}


@dataclass
class StorageConnectionError(StorageError):
    """Raised when the database cannot be opened."""

    db_path: str = ""

    default_code: ClassVar[int] = ERROR_STORAGE_CONNECTION
    default_suggestion: ClassVar[str | None] = (
        "Check that the database path is valid and writable"
    )

    def describe(self) -> str:
        return f"Failed to connect to database: {self.db_path}"

    def details(self) -> dict[str, Any]:
        return {**super().details(), "db_path": self.db_path}


@dataclass
class StorageSchemaError(StorageError):
    """Raised when the parcel table cannot be created."""

    underlying_error: str = ""

    default_code: ClassVar[int] = ERROR_STORAGE_SCHEMA

    def describe(self) -> str:
        return f"Schema initialization failed: {self.underlying_error}"

    def details(self) -> dict[str, Any]:
        return {**super().details(), "underlying_error": self.underlying_error}


# =============================================================================
# Configuration Errors
# =============================================================================


@dataclass
class ConfigError(ParcelTrackError):
    """Raised when a settings file cannot be read or validated."""

    path: str = ""
    underlying_error: str = ""

    default_code: ClassVar[int] = ERROR_CONFIG_INVALID
    default_suggestion: ClassVar[str | None] = "Fix the YAML file or pass --db explicitly"

    def describe(self) -> str:
        return f"Invalid configuration {self.path}: {self.underlying_error}"

    def details(self) -> dict[str, Any]:
        return {"path": self.path, "underlying_error": self.underlying_error}
