"""Shared rate limiter, keyed by client IP.

Counters live in process memory, which is enough for the single-worker
deployment this app targets. Disabled when RATE_LIMIT_ENABLED=false or
under TESTING.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit_default],
    enabled=settings.rate_limit_enabled and not settings.testing,
    storage_uri="memory://",
)
