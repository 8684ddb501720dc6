"""
Enumeration types for the expiry monitor.

These enums provide type-safe constants for record states, filter buckets,
error codes, and configuration options throughout the system.
"""

from enum import Enum
from typing import Optional


class SyncStatus(Enum):
    """Outcome of the most recent attempt to resolve a record's certificate."""

    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "SyncStatus":
        """Map the service's ``status`` field onto a sync status."""
        if value == "success":
            return cls.RESOLVED
        if value == "error":
            return cls.FAILED
        return cls.PENDING

    def to_wire(self) -> str:
        """Map back onto the service's ``status`` vocabulary."""
        return {
            SyncStatus.PENDING: "loading",
            SyncStatus.RESOLVED: "success",
            SyncStatus.FAILED: "error",
        }[self]


class TransientOp(Enum):
    """Local-only per-record operation marker."""

    NONE = "none"
    DELETING = "deleting"


class ExpiryBucket(Enum):
    """Named day-count thresholds used to filter records."""

    NONE = "none"
    EXPIRED_ONLY = "expired"
    WITHIN_2_DAYS = "2"
    WITHIN_7_DAYS = "7"
    WITHIN_30_DAYS = "30"


class ExpiryUrgency(Enum):
    """Badge level derived from a day count."""

    UNKNOWN = "unknown"
    EXPIRED = "expired"
    CRITICAL = "critical"
    WARNING = "warning"
    NOTICE = "notice"
    OK = "ok"


class EmptyState(Enum):
    """Why a dashboard view has no rows."""

    NO_DOMAINS = "no_domains"
    NO_MATCHES = "no_matches"


class TestEmailKind(Enum):
    """Variants of the notification test trigger."""

    __test__ = False

    ALL = "all"
    SEVEN_DAYS = "7days"
    TWO_DAYS = "2days"
    TODAY = "today"


class SyncErrorCode(Enum):
    """Error codes for sync client and store operations."""

    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    PARSE_ERROR = "parse_error"
    EMPTY_INPUT = "empty_input"
    SERVER_REJECTED = "server_rejected"
    UNKNOWN_RECORD = "unknown_record"
    DELETE_IN_PROGRESS = "delete_in_progress"
    ID_MISMATCH = "id_mismatch"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
