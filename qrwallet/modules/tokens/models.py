"""Domain models for participant authorization tokens."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(slots=True)
class AuthorizationToken:
    id: str
    account_id: str
    key_id: str
    active: bool
    scan_count: int
    issued_at: datetime
    token: str = field(repr=False)
    expires_at: Optional[datetime] = None
    last_scanned_at: Optional[datetime] = None
    last_scanned_by: Optional[str] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    def scan_metadata(self) -> "ScanMetadata":
        return ScanMetadata(
            scan_count=self.scan_count,
            last_scanned_at=self.last_scanned_at,
            last_scanned_by=self.last_scanned_by,
        )


@dataclass(frozen=True, slots=True)
class ScanMetadata:
    scan_count: int
    last_scanned_at: Optional[datetime]
    last_scanned_by: Optional[str]


# Sentinel used to differentiate between "not provided" and explicit None.
UNSET = object()
