"""Rate limiting configuration using slowapi."""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from gitolink.core.config import get_settings

settings = get_settings()


def get_client_ip(request: Request) -> str | None:
    """Resolve the visitor's IP from proxy headers.

    X-Forwarded-For can hold ``client, proxy1, proxy2``; only the first hop
    is the original client. X-Real-IP is the nginx convention.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return None


def get_rate_limit_key(request: Request) -> str:
    """Key requests by the real client IP, falling back to the socket peer."""
    return get_client_ip(request) or get_remote_address(request)


limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=["1000/hour"],
    storage_uri=settings.rate_limit_storage_uri,
    strategy="fixed-window",
    enabled=settings.rate_limit_enabled,
)

# Rate limit constants for different endpoint types

# Public profile reads and click ingestion are the hot path
RATE_LIMIT_PUBLIC = "600/minute"

# Link creation - prevent spam/abuse
RATE_LIMIT_CREATE_LINK = "60/hour"

# Auth endpoints - prevent brute force
RATE_LIMIT_AUTH = "20/minute"

# General API endpoints
RATE_LIMIT_API = "100/minute"
