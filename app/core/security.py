"""
Request gate for the moderation endpoint.

The gateway only checks that an Authorization header is present. Token
validity is the job of the hosting platform, not of this service.
"""

from typing import Optional
from fastapi import Depends, Header, Request
from app.core.config import Settings, get_settings
from app.core.logger import logger
from app.core.exceptions import AuthenticationException

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

CORS_ALLOWED_HEADERS = [h.strip() for h in CORS_HEADERS["Access-Control-Allow-Headers"].split(",")]


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.

    Args:
        request: FastAPI request object

    Returns:
        Client IP address
    """
    # Check for forwarded headers first (for load balancers/proxies)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"


def is_trusted_local_host(host: Optional[str], settings: Settings) -> bool:
    """True when the Host header names a local development origin."""
    return bool(host) and host in settings.trusted_local_hosts


def require_authorization(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings)
) -> None:
    """
    FastAPI dependency enforcing the presence of an Authorization header.

    Args:
        request: FastAPI request object
        authorization: Raw Authorization header value, if any
        settings: Application settings holding the trusted local hosts

    Raises:
        AuthenticationException: If the header is absent and the host is not trusted
    """
    if authorization and authorization.strip():
        return

    host = request.headers.get("host")
    if is_trusted_local_host(host, settings):
        logger.debug(
            "Skipping authorization for trusted local host",
            extra={"host": host}
        )
        return

    logger.warning(
        "Missing authorization header",
        extra={"client_ip": get_client_ip(request), "host": host}
    )
    raise AuthenticationException()
