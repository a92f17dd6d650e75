"""
Security headers for API responses

The portal frontend only ever reads JSON from this service, so responses may
not be framed, sniffed or cached. The interactive docs load their assets from
jsDelivr, which the CSP allows.
"""

import logging
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from .config import ALLOWED_ORIGINS, ENVIRONMENT

logger = logging.getLogger(__name__)

IS_PRODUCTION = ENVIRONMENT == "production"

DOCS_CDN = "https://cdn.jsdelivr.net"

# Browser features the portal API never needs
DISABLED_FEATURES = ("camera", "microphone", "geolocation", "payment", "usb", "interest-cohort")


def get_csp_policy() -> str:
    """Content-Security-Policy, portal origins may embed API pages"""
    portal_origins = " ".join(o.strip() for o in ALLOWED_ORIGINS if o.strip())
    return "; ".join(
        [
            "default-src 'self'",
            f"frame-ancestors 'self' {portal_origins}".strip(),
            f"script-src 'self' {DOCS_CDN}",
            f"style-src 'self' {DOCS_CDN}",
            "img-src 'self' data:",
            "base-uri 'none'",
            "form-action 'self'",
        ]
    )


def get_permissions_policy() -> str:
    return ", ".join(f"{feature}=()" for feature in DISABLED_FEATURES)


def build_security_headers() -> dict[str, str]:
    headers = {
        "X-Frame-Options": "SAMEORIGIN",
        "X-Content-Type-Options": "nosniff",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Content-Security-Policy": get_csp_policy(),
        "Permissions-Policy": get_permissions_policy(),
        "X-Permitted-Cross-Domain-Policies": "none",
    }
    if IS_PRODUCTION:
        headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return headers


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp the security headers on every response outside exclude_paths"""

    def __init__(self, app, exclude_paths: Optional[list[str]] = None):
        super().__init__(app)
        self.exclude_paths = tuple(exclude_paths or ())
        self.headers = build_security_headers()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        if request.url.path.startswith(self.exclude_paths):
            return response

        response.headers.update(self.headers)
        # Messages, reports and user data are per-user
        if "Cache-Control" not in response.headers:
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
        return response
