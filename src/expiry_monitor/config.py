"""
Configuration dataclasses for the expiry monitor.

This module defines the settings for the certificate service connection,
logging, and output language.
"""

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_CONFIG_PATH = Path.home() / ".expiry_monitor" / "config.json"


@dataclass
class ServiceConfig:
    """Connection settings for the remote certificate service."""

    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 15.0
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class MonitorConfig:
    """Main configuration combining all sub-configurations."""

    service: ServiceConfig = field(default_factory=ServiceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    language: str = "en"  # 'de' or 'en'
