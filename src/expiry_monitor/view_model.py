"""
Dashboard view model.

Derives everything the presentation layer shows from one store snapshot:
the filtered rows with their countdowns, the collection-wide counters,
and which empty-state message (if any) applies.
"""

import time
from dataclasses import dataclass, field
from typing import Optional

from .enums import EmptyState, ExpiryBucket, ExpiryUrgency
from .expiry import classify_urgency, days_until
from .filter_engine import filter_records
from .models import DomainRecord, StoreSnapshot
from .stats import Summary, summarize


@dataclass(frozen=True)
class RecordRow:
    """One visible record with its derived countdowns."""

    record: DomainRecord
    certificate_days: Optional[int]
    registration_days: Optional[int]
    urgency: ExpiryUrgency


@dataclass(frozen=True)
class DashboardView:
    rows: tuple[RecordRow, ...] = field(default_factory=tuple)
    stats: Summary = field(default_factory=Summary)
    loading: bool = False
    creating: bool = False
    empty_state: Optional[EmptyState] = None

    @property
    def show_expiring_warning(self) -> bool:
        return self.stats.expiring_soon_count > 0


def build_row(record: DomainRecord, now: float) -> RecordRow:
    certificate_days = days_until(record.expires_at, now)
    return RecordRow(
        record=record,
        certificate_days=certificate_days,
        registration_days=days_until(record.registration_expiry, now),
        urgency=classify_urgency(certificate_days),
    )


def build_view(
    snapshot: StoreSnapshot,
    search_text: str = "",
    bucket: ExpiryBucket = ExpiryBucket.NONE,
    now: Optional[float] = None,
) -> DashboardView:
    """
    Build the dashboard view for a snapshot.

    Stats cover the whole collection; only the rows are filtered. All
    countdowns share one reference time.
    """
    if now is None:
        now = time.time()

    visible = filter_records(snapshot.records, search_text, bucket, now)

    empty_state = None
    if not visible and not snapshot.loading:
        empty_state = EmptyState.NO_DOMAINS if not snapshot.records else EmptyState.NO_MATCHES

    return DashboardView(
        rows=tuple(build_row(record, now) for record in visible),
        stats=summarize(snapshot.records, now),
        loading=snapshot.loading,
        creating=snapshot.creating,
        empty_state=empty_state,
    )
