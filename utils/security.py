"""
security helpers:
- SHA-256 digests for login tokens (only digests are persisted)
- timing-safe comparison of a stored digest against a presented token
- random secrets for new tokens and series
- clock helpers shared by the services (naive UTC datetimes, epoch seconds)
"""
from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import datetime, timezone


def hash_token(token: str) -> str:
    """Return the hex SHA-256 digest of a raw token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def token_matches(token_hash: str, token: str) -> bool:
    """Compare a stored digest with the digest of a presented token.

    Uses hmac.compare_digest so the time taken does not depend on where the
    two digests first differ.
    """
    return hmac.compare_digest(
        (token_hash or "").encode("utf-8"), hash_token(token).encode("utf-8")
    )


def generate_token() -> str:
    """Generate a fresh secret token value (64 hex chars)."""
    return secrets.token_hex(32)


def generate_series() -> str:
    """Generate a new series identifier (32 hex chars)."""
    return secrets.token_hex(16)


def utc_datetime(timestamp: float) -> datetime:
    """Naive UTC datetime for an epoch timestamp, as stored in the DateTime columns."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).replace(tzinfo=None)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
