"""
Async client for the remote certificate service.

This module provides the four record operations the store relies on
(bulk fetch, create, delete, refresh-one), the notification test trigger,
and parsing of the service's record wire shape.

Every operation is exactly one HTTP round trip; nothing is retried.
Transport failures and non-success responses are translated into the
error type of the operation, so raw httpx exceptions never escape.
"""

import time
from typing import Any, Optional, Type
from urllib.parse import quote

import httpx

from .audit_logger import AuditLogger
from .date_parser import parse_timestamp
from .enums import LogLevel, SyncErrorCode, SyncStatus, TestEmailKind
from .exceptions import (
    CreateError,
    DeleteError,
    MonitorError,
    NetworkError,
    NotificationError,
    ProtocolError,
    RefreshError,
    ValidationError,
)
from .models import CertificateInfo, DomainRecord

BULK_PATH = "/certificate-bulk"
CREATE_PATH = "/certificate-create"
DELETE_PATH = "/certificate-delete/{id}"
SINGLE_PATH = "/certificate-single/{id}"

TEST_EMAIL_PATHS = {
    TestEmailKind.ALL: "/test-email",
    TestEmailKind.SEVEN_DAYS: "/test-email-7days",
    TestEmailKind.TWO_DAYS: "/test-email-2days",
    TestEmailKind.TODAY: "/test-email-today",
}


def _string_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(item) for item in value if item is not None)


def parse_certificate(data: Any) -> Optional[CertificateInfo]:
    """Parse the ``data`` object of a record, or None if absent."""
    if not isinstance(data, dict):
        return None
    registrar = data.get("registrar")
    return CertificateInfo(
        registrar=str(registrar) if registrar else None,
        issued_at=parse_timestamp(data.get("issued_date")),
        expires_at=parse_timestamp(data.get("expiration_date")),
    )


def parse_record(payload: Any) -> DomainRecord:
    """
    Build a DomainRecord from the service's wire shape.

    The wire ``status`` and ``data`` fields are reconciled so that a resolved
    record always carries certificate info and any other record never does.

    Args:
        payload: One decoded JSON object from the service

    Returns:
        The parsed record, with ``transient_op`` left at NONE

    Raises:
        ProtocolError: If the payload lacks an id or a domain name
    """
    if not isinstance(payload, dict):
        raise ProtocolError(
            code=SyncErrorCode.PARSE_ERROR.value,
            message="Domain record must be a JSON object",
            details={"payload_type": type(payload).__name__},
        )

    record_id = payload.get("_id")
    if record_id is None or record_id == "":
        record_id = payload.get("id")
    if record_id is None or record_id == "" or isinstance(record_id, (bool, dict, list)):
        raise ProtocolError(
            code=SyncErrorCode.PARSE_ERROR.value,
            message="Domain record has no id",
            details={"payload": payload},
        )

    domain_name = payload.get("domain")
    if not isinstance(domain_name, str) or not domain_name:
        raise ProtocolError(
            code=SyncErrorCode.PARSE_ERROR.value,
            message="Domain record has no domain name",
            details={"id": str(record_id)},
        )

    sync_status = SyncStatus.from_wire(payload.get("status"))
    certificate = parse_certificate(payload.get("data"))

    if sync_status is SyncStatus.RESOLVED and certificate is None:
        sync_status = SyncStatus.FAILED
    if sync_status is not SyncStatus.RESOLVED:
        certificate = None

    return DomainRecord(
        id=str(record_id),
        domain_name=domain_name,
        sync_status=sync_status,
        certificate_info=certificate,
        registration_expiry=parse_timestamp(payload.get("domain_expiry_date")),
        dns_hosts=_string_list(payload.get("dnsHost")),
        name_servers=_string_list(payload.get("nameServers")),
    )


def _server_message(response: httpx.Response, key: str, default: str) -> str:
    """Pull a human-readable message out of an error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict) and body.get(key):
        return str(body[key])
    return default


class SyncClient:
    """
    Async client for the certificate service.

    Usable as an async context manager; a client is also created lazily on
    first use and released by ``close()``.
    """

    COMPONENT = "SyncClient"

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the sync client.

        Args:
            base_url: Root URL of the certificate service
            timeout: Request timeout in seconds
            headers: Extra headers sent with every request
            transport: Optional httpx transport (tests use httpx.MockTransport)
            logger: Optional logger for round-trip logging
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = dict(headers or {})
        self._transport = transport
        self._logger = logger
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "SyncClient":
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout),
                headers={"Accept": "application/json", **self._headers},
                transport=self._transport,
            )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        error_cls: Type[MonitorError],
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Perform one request, translating transport failures into ``error_cls``.

        Non-success responses are returned to the caller, which knows how
        to interpret the body.
        """
        start_time = time.perf_counter()
        url = f"{self._base_url}{path}"
        try:
            response = await self._get_client().request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            error = error_cls(
                code=SyncErrorCode.TIMEOUT.value,
                message=f"Request timed out after {self._timeout}s",
                details={"method": method, "url": url},
            )
            self._log_failure(error, url, None, e)
            raise error from e
        except httpx.HTTPError as e:
            error = error_cls(
                code=SyncErrorCode.NETWORK_ERROR.value,
                message=f"Connection error: {e}",
                details={"method": method, "url": url},
            )
            self._log_failure(error, url, None, e)
            raise error from e

        self._log(
            LogLevel.DEBUG,
            f"{method} {path} -> {response.status_code}",
            {
                "method": method,
                "url": url,
                "status_code": response.status_code,
                "duration_ms": (time.perf_counter() - start_time) * 1000,
            },
        )
        return response

    def _http_error(
        self,
        error_cls: Type[MonitorError],
        response: httpx.Response,
        message: str,
        code: SyncErrorCode = SyncErrorCode.HTTP_ERROR,
    ) -> MonitorError:
        error = error_cls(
            code=code.value,
            message=message,
            details={
                "url": str(response.request.url),
                "status_code": response.status_code,
            },
        )
        self._log_failure(error, str(response.request.url), response.status_code)
        return error

    def _decode_record(
        self,
        error_cls: Type[MonitorError],
        response: httpx.Response,
        payload: Any,
    ) -> DomainRecord:
        try:
            return parse_record(payload)
        except ProtocolError as e:
            error = error_cls(code=e.code, message=e.message, details=e.details)
            self._log_failure(error, str(response.request.url), response.status_code)
            raise error from e

    def _json(self, error_cls: Type[MonitorError], response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            error = error_cls(
                code=SyncErrorCode.PARSE_ERROR.value,
                message=f"Response is not valid JSON: {e}",
                details={"url": str(response.request.url)},
            )
            self._log_failure(error, str(response.request.url), response.status_code)
            raise error from e

    async def fetch_all(self) -> list[DomainRecord]:
        """
        Fetch every tracked record with its current certificate data.

        Returns:
            Records in the order the service lists them

        Raises:
            NetworkError: On transport failure, non-success status, or a
                payload that is not a list of records
        """
        response = await self._request("GET", BULK_PATH, NetworkError)
        if not response.is_success:
            raise self._http_error(
                NetworkError, response, f"Failed to fetch domains: HTTP {response.status_code}"
            )

        payload = self._json(NetworkError, response)
        if not isinstance(payload, list):
            raise self._http_error(
                NetworkError,
                response,
                "Bulk response is not a list of domain records",
                SyncErrorCode.PARSE_ERROR,
            )

        return [self._decode_record(NetworkError, response, item) for item in payload]

    async def create(self, domain_name: str) -> DomainRecord:
        """
        Start tracking a domain.

        Args:
            domain_name: Hostname to track; surrounding whitespace is removed

        Returns:
            The new record with its service-assigned id and first certificate snapshot

        Raises:
            ValidationError: If the name is empty (no request is made)
            CreateError: If the service rejects the request or is unreachable
        """
        name = (domain_name or "").strip()
        if not name:
            raise ValidationError(
                code=SyncErrorCode.EMPTY_INPUT.value,
                message="Domain input is empty",
                details={"raw_input": domain_name},
            )

        response = await self._request("POST", CREATE_PATH, CreateError, json={"domain": name})
        if not response.is_success:
            raise self._http_error(
                CreateError,
                response,
                _server_message(response, "error", "Creation failed"),
                SyncErrorCode.SERVER_REJECTED,
            )

        payload = self._json(CreateError, response)
        if isinstance(payload, dict) and isinstance(payload.get("domain"), dict):
            payload = payload["domain"]
        return self._decode_record(CreateError, response, payload)

    async def delete_one(self, record_id: str) -> None:
        """
        Stop tracking a record.

        Raises:
            DeleteError: On transport failure or non-success status
        """
        path = DELETE_PATH.format(id=quote(str(record_id), safe=""))
        response = await self._request("DELETE", path, DeleteError)
        if not response.is_success:
            raise self._http_error(
                DeleteError,
                response,
                _server_message(response, "error", "Failed to delete domain"),
            )

    async def refresh_one(self, record_id: str) -> DomainRecord:
        """
        Re-resolve a single record's certificate data.

        Raises:
            RefreshError: On transport failure, non-success status, or a
                payload that is not a domain record
        """
        path = SINGLE_PATH.format(id=quote(str(record_id), safe=""))
        response = await self._request("GET", path, RefreshError)
        if not response.is_success:
            raise self._http_error(
                RefreshError,
                response,
                _server_message(response, "error", "Failed to refresh domain"),
            )
        return self._decode_record(RefreshError, response, self._json(RefreshError, response))

    async def send_test_email(self, kind: TestEmailKind = TestEmailKind.ALL) -> str:
        """
        Ask the service to send a notification test email.

        Returns:
            The confirmation message reported by the service

        Raises:
            NotificationError: On transport failure or non-success status
        """
        response = await self._request("GET", TEST_EMAIL_PATHS[kind], NotificationError)
        if not response.is_success:
            raise self._http_error(
                NotificationError,
                response,
                _server_message(response, "message", "Failed to send test email"),
            )
        return _server_message(response, "message", "Test email sent")

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, self.COMPONENT, message, data)

    def _log_failure(
        self,
        error: MonitorError,
        url: str,
        status_code: Optional[int],
        cause: Optional[Exception] = None,
    ) -> None:
        if self._logger:
            self._logger.log_error(
                self.COMPONENT,
                error.message,
                error=cause or error,
                request_url=url,
                response_status_code=status_code,
            )
