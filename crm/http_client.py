"""Outbound HTTP — one pooled httpx.AsyncClient for the whole process.

Today its only caller is the reCAPTCHA check in services/auth_service.py,
which passes its own timeout per request. Redirects are never followed: the
siteverify endpoint answers directly.

Usage:
    from crm.http_client import http
    resp = await http.post(url, data=payload, timeout=10)
"""

import httpx

from .config import APP_VERSION

http = httpx.AsyncClient(
    timeout=httpx.Timeout(20, connect=5),
    limits=httpx.Limits(max_connections=10, max_keepalive_connections=5, keepalive_expiry=30),
    headers={"User-Agent": f"small-crm/{APP_VERSION}"},
    follow_redirects=False,
)


async def close_clients() -> None:
    """Close the pooled client on shutdown (no-op if it is already closed)."""
    if not http.is_closed:
        await http.aclose()
