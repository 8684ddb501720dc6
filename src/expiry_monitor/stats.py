"""
Aggregate counts over the whole record collection.

Always recomputed from scratch; collections are small.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from .enums import SyncStatus
from .expiry import days_until
from .models import DomainRecord

EXPIRING_SOON_DAYS = 30


@dataclass(frozen=True)
class Summary:
    """Dashboard counters."""

    total: int = 0
    resolved_count: int = 0
    error_count: int = 0
    expiring_soon_count: int = 0


def is_expiring_soon(record: DomainRecord, now: Optional[float] = None) -> bool:
    """True for known certificate expiries under 30 days away, expired ones included."""
    days = days_until(record.expires_at, now)
    return days is not None and days < EXPIRING_SOON_DAYS


def summarize(records: Iterable[DomainRecord], now: Optional[float] = None) -> Summary:
    records = list(records)
    return Summary(
        total=len(records),
        resolved_count=sum(1 for r in records if r.sync_status is SyncStatus.RESOLVED),
        error_count=sum(1 for r in records if r.sync_status is SyncStatus.FAILED),
        expiring_soon_count=sum(1 for r in records if is_expiring_soon(r, now)),
    )
