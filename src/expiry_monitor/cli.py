"""
Command-line interface for the expiry monitor.

This module provides the main CLI entry point with commands for:
- list: Show tracked domains with expiry countdowns, search and bucket filters
- add / remove / refresh: Mutate a single record on the certificate service
- test-email: Trigger the service's notification test email
- config: Configuration management
"""

import argparse
import asyncio
import json
import os
import sys
import time
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from . import __version__
from .audit_logger import AuditLogger
from .config import (
    DEFAULT_BASE_URL,
    DEFAULT_CONFIG_PATH,
    LoggingConfig,
    MonitorConfig,
    ServiceConfig,
)
from .domain_store import DomainStore
from .enums import EmptyState, ExpiryBucket, LogLevel, TestEmailKind, TransientOp
from .exceptions import MonitorError
from .i18n import SUPPORTED_LANGUAGES, get_message
from .sync_client import SyncClient
from .view_model import DashboardView, RecordRow, build_row, build_view

ENV_PREFIX = "EXPIRY_MONITOR_"


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def create_default_config(
    base_url: Optional[str] = None,
    language: str = "en",
) -> MonitorConfig:
    """
    Create a default configuration.

    Args:
        base_url: Root URL of the certificate service
        language: Output language ('de' or 'en')

    Returns:
        MonitorConfig with default settings
    """
    service = ServiceConfig()
    if base_url:
        service.base_url = base_url
    return MonitorConfig(
        service=service,
        logging=LoggingConfig(level="info", output_format="text"),
        language=language,
    )


def load_config_from_file(config_path: Path) -> Optional[MonitorConfig]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        MonitorConfig if successful, None otherwise
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        service_data = data.get("service", {})
        service = ServiceConfig(
            base_url=service_data.get("base_url", DEFAULT_BASE_URL),
            timeout_seconds=float(service_data.get("timeout_seconds", 15.0)),
            headers=dict(service_data.get("headers", {})),
        )

        logging_data = data.get("logging", {})
        logging_config = LoggingConfig(
            level=logging_data.get("level", "info"),
            output_format=logging_data.get("output_format", "text"),
        )

        language = data.get("language", "en")
        if language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language: {language}")

        return MonitorConfig(
            service=service,
            logging=logging_config,
            language=language,
        )

    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None
    except FileNotFoundError:
        return None


def save_config_to_file(config: MonitorConfig, config_path: Path) -> bool:
    """
    Save configuration to a JSON file.

    Args:
        config: MonitorConfig to save
        config_path: Path to save the configuration

    Returns:
        True if successful, False otherwise
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(asdict(config), f, indent=2, ensure_ascii=False)
        return True
    except (OSError, TypeError) as e:
        print(f"Error saving config: {e}", file=sys.stderr)
        return False


def apply_env_overrides(config: MonitorConfig) -> MonitorConfig:
    """
    Overlay ``EXPIRY_MONITOR_*`` environment variables onto a configuration.

    Unparseable numeric values keep the configured value.
    """
    base_url = os.getenv(f"{ENV_PREFIX}API_BASE", "").strip()
    if base_url:
        config.service.base_url = base_url

    config.service.timeout_seconds = _float_env(
        f"{ENV_PREFIX}TIMEOUT", config.service.timeout_seconds
    )

    token = os.getenv(f"{ENV_PREFIX}API_TOKEN", "").strip()
    if token:
        config.service.headers["Authorization"] = f"Bearer {token}"

    language = os.getenv(f"{ENV_PREFIX}LANGUAGE", "").strip().lower()
    if language in SUPPORTED_LANGUAGES:
        config.language = language

    level = os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "").strip().lower()
    if level in {lvl.value for lvl in LogLevel}:
        config.logging.level = level

    return config


def resolve_config(args: argparse.Namespace) -> Optional[MonitorConfig]:
    """Build the effective configuration: defaults, file, environment, then flags."""
    config = None
    if args.config:
        config = load_config_from_file(Path(args.config))
        if config is None:
            print(f"Error: Could not load config from {args.config}", file=sys.stderr)
            return None
    elif DEFAULT_CONFIG_PATH.exists():
        config = load_config_from_file(DEFAULT_CONFIG_PATH)

    if config is None:
        config = create_default_config()

    config = apply_env_overrides(config)

    if args.api_base:
        config.service.base_url = args.api_base
    if args.language:
        config.language = args.language
    return config


def create_logger(config: MonitorConfig, verbose: bool) -> Optional[AuditLogger]:
    if not verbose:
        return None
    try:
        level = LogLevel(config.logging.level)
    except ValueError:
        level = LogLevel.INFO
    return AuditLogger(output_format=config.logging.output_format, min_level=level)


def create_client(config: MonitorConfig, logger: Optional[AuditLogger] = None) -> SyncClient:
    return SyncClient(
        base_url=config.service.base_url,
        timeout=config.service.timeout_seconds,
        headers=config.service.headers,
        logger=logger,
    )


# ----------------------------------------------------------------------
# Rendering


def _format_date(epoch: Optional[float]) -> str:
    if epoch is None:
        return "-"
    try:
        return datetime.fromtimestamp(epoch).strftime("%d %b %y")
    except (OverflowError, OSError, ValueError):
        return "-"


def _format_datetime(epoch: Optional[float]) -> str:
    if epoch is None:
        return "-"
    try:
        return datetime.fromtimestamp(epoch).strftime("%d %b %y %I:%M %p")
    except (OverflowError, OSError, ValueError):
        return "-"


def format_days(days: Optional[int], language: str) -> str:
    if days is None:
        return get_message("expiry.unknown", language)
    if days < 0:
        return get_message("expiry.expired", language)
    return get_message("expiry.days", language, days=days)


def format_row(row: RecordRow, language: str) -> str:
    record = row.record
    if record.transient_op is TransientOp.DELETING:
        status = get_message("status.deleting", language)
    else:
        status = get_message(f"status.{record.sync_status.value}", language)

    issued = record.certificate_info.issued_at if record.certificate_info else None
    dns = get_message("row.ips", language, count=len(record.dns_hosts)) if record.dns_hosts else "-"
    ns = get_message("row.ns", language, count=len(record.name_servers)) if record.name_servers else "-"

    return " | ".join([
        record.id,
        record.domain_name,
        status,
        dns,
        ns,
        _format_date(issued),
        _format_datetime(record.expires_at),
        _format_datetime(record.registration_expiry),
        format_days(row.certificate_days, language),
    ])


def render_view(view: DashboardView, language: str) -> str:
    stats = view.stats
    lines = [
        f"{get_message('stats.total', language)}: {stats.total}  "
        f"{get_message('stats.active', language)}: {stats.resolved_count}  "
        f"{get_message('stats.errors', language)}: {stats.error_count}  "
        f"{get_message('stats.expiring_soon', language)}: {stats.expiring_soon_count}",
    ]
    if view.show_expiring_warning:
        lines.append(get_message("warning.expiring_soon", language, count=stats.expiring_soon_count))

    if view.empty_state is EmptyState.NO_DOMAINS:
        lines.append(get_message("empty.no_domains", language))
    elif view.empty_state is EmptyState.NO_MATCHES:
        lines.append(get_message("empty.no_matches", language))
    else:
        lines.append(get_message("row.header", language))
        lines.extend(format_row(row, language) for row in view.rows)
    return "\n".join(lines)


def view_to_dict(view: DashboardView) -> dict:
    return {
        "stats": asdict(view.stats),
        "domains": [
            {
                **row.record.to_dict(),
                "days_until_expiry": row.certificate_days,
                "days_until_domain_expiry": row.registration_days,
                "urgency": row.urgency.value,
            }
            for row in view.rows
        ],
    }


# ----------------------------------------------------------------------
# Commands


async def list_domains(
    config: MonitorConfig,
    search_text: str = "",
    bucket: ExpiryBucket = ExpiryBucket.NONE,
    as_json: bool = False,
    verbose: bool = False,
) -> int:
    """
    Load all records and print the dashboard view.

    Returns:
        Exit code (0 on success, 1 if the bulk fetch failed)
    """
    language = config.language
    logger = create_logger(config, verbose)

    if not as_json:
        print(get_message("cli.loading", language))

    async with create_client(config, logger) as client:
        store = DomainStore(client, logger)
        await store.load_all()

    if store.last_load_error is not None:
        print(
            get_message("cli.load_failed", language, error=store.last_load_error.message),
            file=sys.stderr,
        )

    view = build_view(store.snapshot(), search_text, bucket)
    if as_json:
        print(json.dumps(view_to_dict(view), indent=2, ensure_ascii=False))
    else:
        print(render_view(view, language))

    return 0 if store.last_load_error is None else 1


async def add_domain(config: MonitorConfig, domain: str, verbose: bool = False) -> int:
    language = config.language
    logger = create_logger(config, verbose)
    async with create_client(config, logger) as client:
        store = DomainStore(client, logger)
        try:
            record = await store.add(domain)
        except MonitorError as e:
            print(get_message("cli.add_failed", language, error=e.message), file=sys.stderr)
            return 1
    print(get_message("cli.added", language, domain=record.domain_name, id=record.id))
    return 0


async def remove_domain(config: MonitorConfig, record_id: str, verbose: bool = False) -> int:
    language = config.language
    logger = create_logger(config, verbose)
    async with create_client(config, logger) as client:
        store = DomainStore(client, logger)
        await store.load_all()
        if store.last_load_error is not None:
            print(
                get_message("cli.load_failed", language, error=store.last_load_error.message),
                file=sys.stderr,
            )
            return 1
        try:
            await store.remove(record_id)
        except MonitorError as e:
            print(get_message("cli.remove_failed", language, error=e.message), file=sys.stderr)
            return 1
    print(get_message("cli.removed", language, id=record_id))
    return 0


async def refresh_domain(config: MonitorConfig, record_id: str, verbose: bool = False) -> int:
    language = config.language
    logger = create_logger(config, verbose)
    async with create_client(config, logger) as client:
        store = DomainStore(client, logger)
        await store.load_all()
        if store.last_load_error is not None:
            print(
                get_message("cli.load_failed", language, error=store.last_load_error.message),
                file=sys.stderr,
            )
            return 1
        try:
            record = await store.refresh(record_id)
        except MonitorError as e:
            print(get_message("cli.refresh_failed", language, error=e.message), file=sys.stderr)
            return 1
    print(get_message("cli.refreshed", language, domain=record.domain_name))
    print(format_row(build_row(record, time.time()), language))
    return 0


async def trigger_test_email(config: MonitorConfig, kind: TestEmailKind, verbose: bool = False) -> int:
    language = config.language
    logger = create_logger(config, verbose)
    async with create_client(config, logger) as client:
        try:
            message = await client.send_test_email(kind)
        except MonitorError as e:
            print(get_message("cli.test_email_failed", language, error=e.message), file=sys.stderr)
            return 1
    print(message)
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """Handle the 'list' command."""
    config = resolve_config(args)
    if config is None:
        return 1
    return asyncio.run(list_domains(
        config=config,
        search_text=args.search,
        bucket=ExpiryBucket(args.bucket),
        as_json=args.json,
        verbose=args.verbose,
    ))


def cmd_add(args: argparse.Namespace) -> int:
    """Handle the 'add' command."""
    config = resolve_config(args)
    if config is None:
        return 1
    return asyncio.run(add_domain(config, args.domain, verbose=args.verbose))


def cmd_remove(args: argparse.Namespace) -> int:
    """Handle the 'remove' command."""
    config = resolve_config(args)
    if config is None:
        return 1
    return asyncio.run(remove_domain(config, args.id, verbose=args.verbose))


def cmd_refresh(args: argparse.Namespace) -> int:
    """Handle the 'refresh' command."""
    config = resolve_config(args)
    if config is None:
        return 1
    return asyncio.run(refresh_domain(config, args.id, verbose=args.verbose))


def cmd_test_email(args: argparse.Namespace) -> int:
    """Handle the 'test-email' command."""
    config = resolve_config(args)
    if config is None:
        return 1
    return asyncio.run(trigger_test_email(config, TestEmailKind(args.kind), verbose=args.verbose))


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH
    language = args.language or "en"

    if args.action == "show":
        config = load_config_from_file(config_path)
        if config is None:
            print(get_message("config.not_found", language, path=config_path))
            return 1

        print(f"Configuration from: {config_path}")
        print(f"  Service: {config.service.base_url}")
        print(f"  Timeout: {config.service.timeout_seconds}s")
        print(f"  Language: {config.language}")
        print(f"  Log level: {config.logging.level}")
        print(f"  Log format: {config.logging.output_format}")
        return 0

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(get_message("config.exists", language, path=config_path))
            return 1

        config = create_default_config(language=language)
        if save_config_to_file(config, config_path):
            print(get_message("config.created", language, path=config_path))
            return 0
        return 1

    elif args.action == "validate":
        config = load_config_from_file(config_path)
        if config is None:
            print(get_message("config.invalid", language, error=config_path), file=sys.stderr)
            return 1

        print(get_message("config.valid", language, path=config_path))
        return 0

    return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="expiry-monitor",
        description="Track TLS certificate and domain registration expiry",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    common.add_argument(
        "--api-base",
        help="Root URL of the certificate service",
    )
    common.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        default=None,
        help="Output language (default: from configuration)",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'list' command
    list_parser = subparsers.add_parser(
        "list",
        parents=[common],
        help="Show tracked domains and expiry countdowns",
    )
    list_parser.add_argument(
        "--search", "-s",
        default="",
        help="Only show domains containing this text",
    )
    list_parser.add_argument(
        "--bucket", "-b",
        choices=[bucket.value for bucket in ExpiryBucket],
        default=ExpiryBucket.NONE.value,
        help="Only show certificates expiring within this many days",
    )
    list_parser.add_argument(
        "--json",
        action="store_true",
        help="Print records and stats as JSON",
    )
    list_parser.set_defaults(func=cmd_list)

    # 'add' command
    add_parser = subparsers.add_parser(
        "add",
        parents=[common],
        help="Start tracking a domain",
    )
    add_parser.add_argument(
        "domain",
        help="Domain to track (e.g., example.com)",
    )
    add_parser.set_defaults(func=cmd_add)

    # 'remove' command
    remove_parser = subparsers.add_parser(
        "remove",
        parents=[common],
        help="Stop tracking a domain",
    )
    remove_parser.add_argument("id", help="Record id as shown by 'list'")
    remove_parser.set_defaults(func=cmd_remove)

    # 'refresh' command
    refresh_parser = subparsers.add_parser(
        "refresh",
        parents=[common],
        help="Re-resolve one domain's certificate",
    )
    refresh_parser.add_argument("id", help="Record id as shown by 'list'")
    refresh_parser.set_defaults(func=cmd_refresh)

    # 'test-email' command
    test_email_parser = subparsers.add_parser(
        "test-email",
        parents=[common],
        help="Ask the service to send a notification test email",
    )
    test_email_parser.add_argument(
        "--kind", "-k",
        choices=[kind.value for kind in TestEmailKind],
        default=TestEmailKind.ALL.value,
        help="Which expiry alert to simulate (default: all)",
    )
    test_email_parser.set_defaults(func=cmd_test_email)

    # 'config' command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init", "validate"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--path", "-p",
        help="Path to configuration file",
    )
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        default=None,
        help="Default language for new configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
