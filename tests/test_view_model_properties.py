"""
Property-based tests for the dashboard view model.
"""

from typing import Optional

from hypothesis import given, settings
from hypothesis import strategies as st

from expiry_monitor.enums import EmptyState, ExpiryBucket, ExpiryUrgency, SyncStatus
from expiry_monitor.expiry import SECONDS_PER_DAY
from expiry_monitor.filter_engine import filter_records
from expiry_monitor.models import CertificateInfo, DomainRecord, StoreSnapshot
from expiry_monitor.stats import summarize
from expiry_monitor.view_model import build_view

NOW = 1_700_000_000


def make_record(
    record_id: str,
    domain: str,
    expires_at: Optional[float] = None,
    registration_expiry: Optional[float] = None,
) -> DomainRecord:
    certificate = None
    status = SyncStatus.PENDING
    if expires_at is not None:
        status = SyncStatus.RESOLVED
        certificate = CertificateInfo(registrar="R3", issued_at=None, expires_at=expires_at)
    return DomainRecord(
        id=record_id,
        domain_name=domain,
        sync_status=status,
        certificate_info=certificate,
        registration_expiry=registration_expiry,
    )


@st.composite
def snapshot_strategy(draw) -> StoreSnapshot:
    count = draw(st.integers(min_value=0, max_value=10))
    records = []
    for i in range(count):
        domain = draw(st.sampled_from(["alpha.com", "beta.de", "gamma.io", "delta.com"]))
        expires_at = draw(st.one_of(
            st.none(),
            st.integers(min_value=-10, max_value=60).map(lambda d: NOW + d * SECONDS_PER_DAY),
        ))
        records.append(make_record(f"r{i}", domain, expires_at))
    return StoreSnapshot(records=tuple(records), loading=draw(st.booleans()))


class TestViewProperty:
    """The view is filter + stats over one snapshot."""

    @given(
        snapshot=snapshot_strategy(),
        search=st.sampled_from(["", "a", ".com", "zzz"]),
        bucket=st.sampled_from(list(ExpiryBucket)),
    )
    @settings(max_examples=200)
    def test_rows_are_filtered_and_stats_are_not(
        self,
        snapshot: StoreSnapshot,
        search: str,
        bucket: ExpiryBucket,
    ) -> None:
        view = build_view(snapshot, search, bucket, NOW)

        assert [row.record for row in view.rows] == filter_records(
            snapshot.records, search, bucket, NOW
        )
        assert view.stats == summarize(snapshot.records, NOW)
        assert view.loading == snapshot.loading
        assert view.show_expiring_warning == (view.stats.expiring_soon_count > 0)

    @given(snapshot=snapshot_strategy(), search=st.sampled_from(["", "zzz"]))
    @settings(max_examples=100)
    def test_empty_state(self, snapshot: StoreSnapshot, search: str) -> None:
        view = build_view(snapshot, search, ExpiryBucket.NONE, NOW)

        if view.rows or snapshot.loading:
            assert view.empty_state is None
        elif not snapshot.records:
            assert view.empty_state is EmptyState.NO_DOMAINS
        else:
            assert view.empty_state is EmptyState.NO_MATCHES


class TestRowProperty:
    """Rows carry both countdowns and an urgency level."""

    def test_row_countdowns(self) -> None:
        record = make_record(
            "1",
            "alpha.com",
            expires_at=NOW + 5 * SECONDS_PER_DAY,
            registration_expiry=NOW + 200 * SECONDS_PER_DAY,
        )
        view = build_view(StoreSnapshot(records=(record,)), now=NOW)

        row = view.rows[0]
        assert row.certificate_days == 5
        assert row.registration_days == 200
        assert row.urgency is ExpiryUrgency.CRITICAL

    def test_unknown_expiry_row(self) -> None:
        view = build_view(StoreSnapshot(records=(make_record("1", "a.com"),)), now=NOW)

        row = view.rows[0]
        assert row.certificate_days is None
        assert row.registration_days is None
        assert row.urgency is ExpiryUrgency.UNKNOWN

    def test_no_domains_message_suppressed_while_loading(self) -> None:
        assert build_view(StoreSnapshot(loading=True), now=NOW).empty_state is None
        assert build_view(StoreSnapshot(), now=NOW).empty_state is EmptyState.NO_DOMAINS
