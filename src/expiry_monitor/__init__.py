"""
Expiry Monitor - TLS certificate and domain registration expiry tracking.

This package keeps a local collection of domain records in sync with a remote
certificate-lookup service and derives expiry countdowns, search and bucket
filters, and summary counts from it.
"""

__version__ = "0.1.0"
__author__ = "Expiry Monitor Team"

from expiry_monitor.exceptions import (
    MonitorError,
    ValidationError,
    NetworkError,
    ProtocolError,
    CreateError,
    DeleteError,
    RefreshError,
    NotificationError,
)
from expiry_monitor.enums import (
    SyncStatus,
    TransientOp,
    ExpiryBucket,
    ExpiryUrgency,
    EmptyState,
    TestEmailKind,
    SyncErrorCode,
    LogLevel,
)
from expiry_monitor.config import (
    ServiceConfig,
    LoggingConfig,
    MonitorConfig,
)
from expiry_monitor.models import (
    CertificateInfo,
    DomainRecord,
    StoreSnapshot,
)
from expiry_monitor.date_parser import parse_timestamp
from expiry_monitor.expiry import (
    days_until,
    classify_urgency,
)
from expiry_monitor.filter_engine import (
    filter_records,
    matches_search,
    matches_bucket,
)
from expiry_monitor.stats import (
    Summary,
    summarize,
)
from expiry_monitor.sync_client import (
    SyncClient,
    parse_record,
)
from expiry_monitor.domain_store import (
    DomainStore,
)
from expiry_monitor.view_model import (
    DashboardView,
    RecordRow,
    build_view,
)
from expiry_monitor.audit_logger import (
    AuditLogger,
    LogEntry,
)
from expiry_monitor.i18n import (
    get_message,
    get_all_message_keys,
    has_translation,
    get_missing_translations,
    validate_translations,
    TRANSLATIONS,
    SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
)
from expiry_monitor.cli import (
    main as cli_main,
    create_parser,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
)

__all__ = [
    # Exceptions
    "MonitorError",
    "ValidationError",
    "NetworkError",
    "ProtocolError",
    "CreateError",
    "DeleteError",
    "RefreshError",
    "NotificationError",
    # Enums
    "SyncStatus",
    "TransientOp",
    "ExpiryBucket",
    "ExpiryUrgency",
    "EmptyState",
    "TestEmailKind",
    "SyncErrorCode",
    "LogLevel",
    # Configuration
    "ServiceConfig",
    "LoggingConfig",
    "MonitorConfig",
    # Models
    "CertificateInfo",
    "DomainRecord",
    "StoreSnapshot",
    # Derivations
    "parse_timestamp",
    "days_until",
    "classify_urgency",
    "filter_records",
    "matches_search",
    "matches_bucket",
    "Summary",
    "summarize",
    "DashboardView",
    "RecordRow",
    "build_view",
    # Sync
    "SyncClient",
    "parse_record",
    "DomainStore",
    # Logging
    "AuditLogger",
    "LogEntry",
    # I18n
    "get_message",
    "get_all_message_keys",
    "has_translation",
    "get_missing_translations",
    "validate_translations",
    "TRANSLATIONS",
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
    # CLI
    "cli_main",
    "create_parser",
    "create_default_config",
    "load_config_from_file",
    "save_config_to_file",
]
