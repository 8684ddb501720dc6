"""
Data models for the expiry monitor.

This module defines the domain record tracked by the store, its certificate
snapshot, and the immutable snapshot the store hands to observers.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import SyncStatus, TransientOp


@dataclass(frozen=True)
class CertificateInfo:
    """Certificate snapshot resolved by the remote service."""

    registrar: Optional[str]
    issued_at: Optional[float]  # epoch seconds
    expires_at: Optional[float]  # epoch seconds


@dataclass(frozen=True)
class DomainRecord:
    """
    A single tracked domain.

    ``id`` and ``domain_name`` never change for the lifetime of a record.
    ``transient_op`` is local-only and is never sent to the service.
    """

    id: str
    domain_name: str
    sync_status: SyncStatus = SyncStatus.PENDING
    certificate_info: Optional[CertificateInfo] = None
    registration_expiry: Optional[float] = None  # epoch seconds (WHOIS)
    dns_hosts: tuple[str, ...] = ()
    name_servers: tuple[str, ...] = ()
    transient_op: TransientOp = TransientOp.NONE

    @property
    def expires_at(self) -> Optional[float]:
        """Certificate expiry, or None while unknown."""
        if self.certificate_info is None:
            return None
        return self.certificate_info.expires_at

    @property
    def is_deleting(self) -> bool:
        return self.transient_op is TransientOp.DELETING

    def to_dict(self) -> dict[str, Any]:
        """Render the record in the service's wire shape."""
        data = None
        if self.certificate_info is not None:
            data = {
                "registrar": self.certificate_info.registrar,
                "issued_date": self.certificate_info.issued_at,
                "expiration_date": self.certificate_info.expires_at,
            }
        return {
            "_id": self.id,
            "domain": self.domain_name,
            "status": self.sync_status.to_wire(),
            "data": data,
            "dnsHost": list(self.dns_hosts),
            "nameServers": list(self.name_servers),
            "domain_expiry_date": self.registration_expiry,
        }


@dataclass(frozen=True)
class StoreSnapshot:
    """Immutable view of the store handed to observers."""

    records: tuple[DomainRecord, ...] = field(default_factory=tuple)
    loading: bool = False
    creating: bool = False
