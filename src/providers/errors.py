"""
errors.py

Typed failure taxonomy for remote platform calls.

Platform clients translate transport and HTTP failures into these exceptions
exactly once, at the client boundary. Everything above the client (retry
executor, pipeline, reconciler) inspects only these types.
"""

from __future__ import annotations

from typing import Optional


class PlatformError(Exception):
    """Base class for any remote platform failure."""


class TransportError(PlatformError):
    """Connection reset, timeout, broken pipe: the request never completed."""


class HttpStatusError(PlatformError):
    """The platform answered with a non-success HTTP status."""

    def __init__(
        self,
        status: int,
        reason: Optional[str] = None,
        message: str = "",
    ) -> None:
        self.status = status
        self.reason = reason
        self.message = message
        detail = f" ({reason})" if reason else ""
        super().__init__(f"HTTP {status}{detail}: {message}".rstrip(": "))


class RateLimited(HttpStatusError):
    """403 carrying a rate-limit reason; safe to retry after backing off."""


class QuotaExceeded(HttpStatusError):
    """403 carrying a daily-quota reason; retrying today is pointless."""
