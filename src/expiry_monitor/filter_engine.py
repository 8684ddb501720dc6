"""
Search and expiry-bucket filtering over a store snapshot.

Filtering is a pure projection: it never touches the store and returns the
same result for the same inputs (and the same ``now``).
"""

from typing import Iterable, Optional

from .enums import ExpiryBucket
from .expiry import days_until
from .models import DomainRecord

# Inclusive upper bounds on the day count for each bucket.
BUCKET_LIMITS = {
    ExpiryBucket.WITHIN_2_DAYS: 2,
    ExpiryBucket.WITHIN_7_DAYS: 7,
    ExpiryBucket.WITHIN_30_DAYS: 30,
}


def matches_search(record: DomainRecord, search_text: str) -> bool:
    """Case-insensitive substring match on the domain name."""
    return search_text.lower() in record.domain_name.lower()


def matches_bucket(
    record: DomainRecord,
    bucket: ExpiryBucket,
    now: Optional[float] = None,
) -> bool:
    """
    Check whether a record's certificate countdown falls in a bucket.

    Records with an unknown expiry never match a bucket other than NONE.
    EXPIRED_ONLY matches a count of exactly 0.
    """
    if bucket is ExpiryBucket.NONE:
        return True

    days = days_until(record.expires_at, now)
    if days is None:
        return False

    if bucket is ExpiryBucket.EXPIRED_ONLY:
        return days == 0
    return days <= BUCKET_LIMITS[bucket]


def filter_records(
    records: Iterable[DomainRecord],
    search_text: str = "",
    bucket: ExpiryBucket = ExpiryBucket.NONE,
    now: Optional[float] = None,
) -> list[DomainRecord]:
    """
    Filter records by search text and expiry bucket, preserving order.

    Args:
        records: Records in store order
        search_text: Substring to look for in the domain name
        bucket: Expiry bucket to restrict to
        now: Reference time in epoch seconds (defaults to the current time)

    Returns:
        A new list with the matching records
    """
    return [
        record
        for record in records
        if matches_search(record, search_text) and matches_bucket(record, bucket, now)
    ]
