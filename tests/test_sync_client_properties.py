"""
Tests for the certificate service client.

The service is faked with httpx.MockTransport so every request can be
inspected and every failure mode can be produced on demand.
"""

import asyncio
import json
from datetime import datetime, timezone
from io import StringIO
from typing import Callable

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from expiry_monitor.audit_logger import AuditLogger
from expiry_monitor.enums import LogLevel, SyncErrorCode, SyncStatus, TestEmailKind
from expiry_monitor.exceptions import (
    CreateError,
    DeleteError,
    NetworkError,
    NotificationError,
    ProtocolError,
    RefreshError,
    ValidationError,
)
from expiry_monitor.sync_client import SyncClient, parse_record

BASE_URL = "http://certs.test"

Handler = Callable[[httpx.Request], httpx.Response]


def wire_record(record_id: str = "abc", domain: str = "example.com", **overrides) -> dict:
    record = {
        "_id": record_id,
        "domain": domain,
        "status": "success",
        "data": {
            "registrar": "Let's Encrypt",
            "issued_date": 1_690_000_000,
            "expiration_date": 1_700_000_000,
        },
        "dnsHost": ["93.184.216.34"],
        "nameServers": ["a.iana-servers.net", "b.iana-servers.net"],
        "domain_expiry_date": "2030-08-13T04:00:00.000Z",
    }
    record.update(overrides)
    return record


def run_with(handler: Handler, operation, logger: AuditLogger = None):
    """Run ``operation(client)`` against a client backed by ``handler``."""

    async def run():
        async with SyncClient(
            BASE_URL,
            transport=httpx.MockTransport(handler),
            logger=logger,
        ) as client:
            return await operation(client)

    return asyncio.run(run())


class RecordingHandler:
    """MockTransport handler that records requests and replies with a fixed response."""

    def __init__(self, status_code: int = 200, payload=None, content: bytes = None) -> None:
        self.requests: list[httpx.Request] = []
        self._status_code = status_code
        self._payload = payload
        self._content = content

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._content is not None:
            return httpx.Response(self._status_code, content=self._content)
        return httpx.Response(self._status_code, json=self._payload)


def failing_handler(exc_type) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_type("boom", request=request)

    return handler


class TestParseRecord:
    """Wire shape to DomainRecord."""

    def test_full_record(self) -> None:
        record = parse_record(wire_record())

        assert record.id == "abc"
        assert record.domain_name == "example.com"
        assert record.sync_status is SyncStatus.RESOLVED
        assert record.certificate_info.registrar == "Let's Encrypt"
        assert record.certificate_info.issued_at == 1_690_000_000
        assert record.expires_at == 1_700_000_000
        assert record.dns_hosts == ("93.184.216.34",)
        assert record.name_servers == ("a.iana-servers.net", "b.iana-servers.net")
        assert record.registration_expiry == datetime(
            2030, 8, 13, 4, tzinfo=timezone.utc
        ).timestamp()

    def test_plain_id_field(self) -> None:
        payload = wire_record()
        del payload["_id"]
        payload["id"] = 42
        assert parse_record(payload).id == "42"

    def test_success_without_data_is_failed(self) -> None:
        record = parse_record(wire_record(data=None))
        assert record.sync_status is SyncStatus.FAILED
        assert record.certificate_info is None

    def test_error_drops_certificate(self) -> None:
        record = parse_record(wire_record(status="error"))
        assert record.sync_status is SyncStatus.FAILED
        assert record.certificate_info is None

    def test_loading_is_pending_without_certificate(self) -> None:
        record = parse_record(wire_record(status="loading"))
        assert record.sync_status is SyncStatus.PENDING
        assert record.certificate_info is None

    def test_optional_fields_absent(self) -> None:
        record = parse_record({"_id": "x", "domain": "x.com", "status": "error"})
        assert record.dns_hosts == ()
        assert record.name_servers == ()
        assert record.registration_expiry is None

    def test_locale_timestamps_in_certificate(self) -> None:
        record = parse_record(wire_record(data={
            "registrar": "R3",
            "issued_date": "05/07/2007, 06:55:57",
            "expiration_date": "2007-07-05T06:55:57.000Z",
        }))
        assert record.certificate_info.issued_at == datetime(2007, 7, 5, 6, 55, 57).timestamp()
        assert record.expires_at == 1183618557

    @pytest.mark.parametrize("payload", [
        None,
        [],
        {"domain": "no-id.com"},
        {"_id": "", "domain": "empty-id.com"},
        {"_id": "x"},
        {"_id": "x", "domain": ""},
    ])
    def test_malformed_payload(self, payload) -> None:
        with pytest.raises(ProtocolError) as exc_info:
            parse_record(payload)
        assert exc_info.value.code == SyncErrorCode.PARSE_ERROR.value

    @given(
        status=st.sampled_from(["success", "error", "loading", None, "weird"]),
        has_data=st.booleans(),
    )
    @settings(max_examples=100)
    def test_status_invariant(self, status, has_data: bool) -> None:
        """
        *For any* wire status and data combination, a resolved record SHALL
        carry certificate info and any other record SHALL NOT.
        """
        payload = wire_record(status=status)
        if not has_data:
            payload["data"] = None
        record = parse_record(payload)

        if record.sync_status is SyncStatus.RESOLVED:
            assert record.certificate_info is not None
        else:
            assert record.certificate_info is None


class TestFetchAll:
    """GET /certificate-bulk."""

    def test_returns_records_in_service_order(self) -> None:
        handler = RecordingHandler(payload=[
            wire_record("1", "b.com"),
            wire_record("2", "a.com"),
        ])
        records = run_with(handler, lambda c: c.fetch_all())

        assert [r.id for r in records] == ["1", "2"]
        assert handler.requests[0].method == "GET"
        assert handler.requests[0].url.path == "/certificate-bulk"

    def test_non_success_status(self) -> None:
        with pytest.raises(NetworkError) as exc_info:
            run_with(RecordingHandler(500, {"error": "down"}), lambda c: c.fetch_all())
        assert exc_info.value.code == SyncErrorCode.HTTP_ERROR.value
        assert exc_info.value.details["status_code"] == 500

    def test_invalid_json(self) -> None:
        with pytest.raises(NetworkError) as exc_info:
            run_with(RecordingHandler(content=b"<html>"), lambda c: c.fetch_all())
        assert exc_info.value.code == SyncErrorCode.PARSE_ERROR.value

    def test_not_a_list(self) -> None:
        with pytest.raises(NetworkError) as exc_info:
            run_with(RecordingHandler(payload={"domains": []}), lambda c: c.fetch_all())
        assert exc_info.value.code == SyncErrorCode.PARSE_ERROR.value

    def test_malformed_entry(self) -> None:
        with pytest.raises(NetworkError):
            run_with(RecordingHandler(payload=[{"domain": "no-id.com"}]), lambda c: c.fetch_all())

    def test_connection_error(self) -> None:
        with pytest.raises(NetworkError) as exc_info:
            run_with(failing_handler(httpx.ConnectError), lambda c: c.fetch_all())
        assert exc_info.value.code == SyncErrorCode.NETWORK_ERROR.value

    def test_timeout(self) -> None:
        with pytest.raises(NetworkError) as exc_info:
            run_with(failing_handler(httpx.ReadTimeout), lambda c: c.fetch_all())
        assert exc_info.value.code == SyncErrorCode.TIMEOUT.value


class TestCreate:
    """POST /certificate-create."""

    @given(name=st.text(alphabet=" \t\n", max_size=5))
    @settings(max_examples=30)
    def test_blank_name_makes_no_request(self, name: str) -> None:
        handler = RecordingHandler(payload={"domain": wire_record()})
        with pytest.raises(ValidationError) as exc_info:
            run_with(handler, lambda c: c.create(name))
        assert exc_info.value.code == SyncErrorCode.EMPTY_INPUT.value
        assert handler.requests == []

    def test_sends_trimmed_name_and_returns_record(self) -> None:
        handler = RecordingHandler(payload={"domain": wire_record("new", "example.com")})
        record = run_with(handler, lambda c: c.create("  example.com  "))

        request = handler.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/certificate-create"
        assert json.loads(request.content) == {"domain": "example.com"}
        assert record.id == "new"
        assert record.sync_status is SyncStatus.RESOLVED

    def test_server_message_is_surfaced(self) -> None:
        handler = RecordingHandler(409, {"error": "Domain already exists"})
        with pytest.raises(CreateError) as exc_info:
            run_with(handler, lambda c: c.create("example.com"))
        assert exc_info.value.message == "Domain already exists"
        assert exc_info.value.code == SyncErrorCode.SERVER_REJECTED.value

    def test_default_message_without_body(self) -> None:
        with pytest.raises(CreateError) as exc_info:
            run_with(RecordingHandler(400, content=b""), lambda c: c.create("example.com"))
        assert exc_info.value.message == "Creation failed"

    def test_transport_failure(self) -> None:
        with pytest.raises(CreateError) as exc_info:
            run_with(failing_handler(httpx.ConnectError), lambda c: c.create("example.com"))
        assert exc_info.value.code == SyncErrorCode.NETWORK_ERROR.value


class TestDeleteOne:
    """DELETE /certificate-delete/{id}."""

    def test_success(self) -> None:
        handler = RecordingHandler(payload={"ok": True})
        assert run_with(handler, lambda c: c.delete_one("abc")) is None
        assert handler.requests[0].method == "DELETE"
        assert handler.requests[0].url.path == "/certificate-delete/abc"

    def test_id_is_escaped(self) -> None:
        handler = RecordingHandler(payload={})
        run_with(handler, lambda c: c.delete_one("a/b"))
        assert handler.requests[0].url.raw_path.endswith(b"/a%2Fb")

    def test_failure(self) -> None:
        with pytest.raises(DeleteError):
            run_with(RecordingHandler(500, {}), lambda c: c.delete_one("abc"))


class TestRefreshOne:
    """GET /certificate-single/{id}."""

    def test_success(self) -> None:
        handler = RecordingHandler(payload=wire_record("abc", status="error", data=None))
        record = run_with(handler, lambda c: c.refresh_one("abc"))

        assert handler.requests[0].url.path == "/certificate-single/abc"
        assert record.sync_status is SyncStatus.FAILED

    def test_not_found(self) -> None:
        with pytest.raises(RefreshError) as exc_info:
            run_with(RecordingHandler(404, {"error": "Domain not found"}), lambda c: c.refresh_one("abc"))
        assert exc_info.value.message == "Domain not found"

    def test_malformed_body(self) -> None:
        with pytest.raises(RefreshError) as exc_info:
            run_with(RecordingHandler(payload={"status": "success"}), lambda c: c.refresh_one("abc"))
        assert exc_info.value.code == SyncErrorCode.PARSE_ERROR.value


class TestSendTestEmail:
    """GET /test-email[-7days|-2days|-today]."""

    @pytest.mark.parametrize("kind,path", [
        (TestEmailKind.ALL, "/test-email"),
        (TestEmailKind.SEVEN_DAYS, "/test-email-7days"),
        (TestEmailKind.TWO_DAYS, "/test-email-2days"),
        (TestEmailKind.TODAY, "/test-email-today"),
    ])
    def test_paths(self, kind: TestEmailKind, path: str) -> None:
        handler = RecordingHandler(payload={"message": "Test email sent to 3 recipients"})
        message = run_with(handler, lambda c: c.send_test_email(kind))

        assert handler.requests[0].url.path == path
        assert message == "Test email sent to 3 recipients"

    def test_failure(self) -> None:
        with pytest.raises(NotificationError):
            run_with(RecordingHandler(500, {"message": "SMTP down"}), lambda c: c.send_test_email())


class TestClientLogging:
    """Round trips and failures are logged when a logger is given."""

    def test_round_trip_logged(self) -> None:
        logger = AuditLogger(output_format="json", output_stream=StringIO())
        run_with(RecordingHandler(payload=[]), lambda c: c.fetch_all(), logger)

        entry = logger.entries[0]
        assert entry.level is LogLevel.DEBUG
        assert entry.component == "SyncClient"
        assert entry.data["status_code"] == 200

    def test_failure_logged(self) -> None:
        logger = AuditLogger(output_format="json", output_stream=StringIO())
        with pytest.raises(DeleteError):
            run_with(RecordingHandler(503, {}), lambda c: c.delete_one("abc"), logger)

        errors = [e for e in logger.entries if e.level is LogLevel.ERROR]
        assert len(errors) == 1
        assert errors[0].data["response_status_code"] == 503

    def test_extra_headers_sent(self) -> None:
        handler = RecordingHandler(payload=[])

        async def run():
            async with SyncClient(
                BASE_URL,
                headers={"Authorization": "Bearer secret-token"},
                transport=httpx.MockTransport(handler),
            ) as client:
                return await client.fetch_all()

        asyncio.run(run())
        assert handler.requests[0].headers["authorization"] == "Bearer secret-token"
