"""Keyed derivation of participant authorization tokens."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping

from qrwallet.core.config import TokenSettings
from qrwallet.core.exceptions import TokenSecretError

MIN_SECRET_LENGTH = 16


@dataclass(frozen=True, slots=True)
class DerivedToken:
    value: str
    key_id: str


class TokenKeyring:
    """Holds the token secrets by key id and derives new tokens with the active one."""

    def __init__(self, keys: Mapping[str, str], active_key_id: str, nonce_bytes: int = 16) -> None:
        self._keys = dict(keys)
        self._active_key_id = active_key_id
        self._nonce_bytes = nonce_bytes

    @classmethod
    def from_settings(cls, settings: TokenSettings) -> "TokenKeyring":
        return cls(settings.keys, settings.active_key_id, settings.nonce_bytes)

    @property
    def active_key_id(self) -> str:
        return self._active_key_id

    def active_secret(self) -> bytes:
        secret = self._keys.get(self._active_key_id)
        if not secret:
            raise TokenSecretError(f"no secret configured for active key {self._active_key_id!r}")
        if len(secret) < MIN_SECRET_LENGTH:
            raise TokenSecretError(
                f"secret for key {self._active_key_id!r} is shorter than {MIN_SECRET_LENGTH} characters"
            )
        return secret.encode("utf-8")

    def derive(self, account_id: str, issued_at: datetime) -> DerivedToken:
        secret = self.active_secret()
        nonce = secrets.token_hex(self._nonce_bytes)
        timestamp = int(issued_at.timestamp() * 1000)
        message = f"{account_id}-{timestamp}-{nonce}".encode("utf-8")
        digest = hmac.new(secret, message, hashlib.sha256).hexdigest()
        return DerivedToken(value=digest, key_id=self._active_key_id)


__all__ = ["DerivedToken", "TokenKeyring", "MIN_SECRET_LENGTH"]
