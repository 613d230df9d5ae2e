"""
Request utilities for extracting client information.

Provides helpers to extract the client IP address used as the rate limit
identifier, optionally honouring reverse proxy headers.
"""

from typing import Optional

from fastapi import Request

UNKNOWN_CLIENT = "unknown"


def _ip_from_proxy_headers(request: Request) -> Optional[str]:
    """
    Read the original client IP from common proxy headers.

    Order of precedence:
    1. CF-Connecting-IP (Cloudflare)
    2. X-Real-IP (nginx)
    3. X-Forwarded-For (standard proxy header, first IP)
    """
    # Cloudflare
    cf_ip = request.headers.get("CF-Connecting-IP")
    if cf_ip and cf_ip.strip():
        return cf_ip.strip()

    # nginx proxy
    real_ip = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    # Standard proxy header (comma-separated, first is client)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first_ip = forwarded_for.split(",")[0].strip()
        if first_ip:
            return first_ip

    return None


def get_client_ip(request: Request, trust_proxy_headers: bool = False) -> str:
    """
    Extract the client's IP address from the request.

    Proxy headers can be forged by any client, so they are only consulted
    when ``trust_proxy_headers`` is set.

    Args:
        request: FastAPI request object
        trust_proxy_headers: Honour CF-Connecting-IP / X-Real-IP / X-Forwarded-For

    Returns:
        Client IP address, or "unknown" if not available
    """
    if trust_proxy_headers:
        proxied = _ip_from_proxy_headers(request)
        if proxied:
            return proxied

    # Direct connection
    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_CLIENT
