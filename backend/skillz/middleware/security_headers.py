"""
Security headers middleware (OWASP secure headers).

Adds to every response:
- X-Content-Type-Options: nosniff
- X-Frame-Options: DENY
- Referrer-Policy
- Permissions-Policy
- Content-Security-Policy (optional)

References:
- OWASP Secure Headers Project: https://owasp.org/www-project-secure-headers/
"""

from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from skillz.core.logging_config import get_logger


logger = get_logger(__name__)

# The API serves JSON only; the interactive docs need the CDN assets.
DEFAULT_CSP_POLICY = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "img-src 'self' data: https:; "
    "connect-src 'self'; "
    "frame-ancestors 'none'; "
    "form-action 'self'; "
    "base-uri 'self'; "
    "object-src 'none'"
)

PERMISSIONS_POLICY = "geolocation=(), microphone=(), camera=(), payment=(), usb=()"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers to all HTTP responses.

    Example:
        app.add_middleware(SecurityHeadersMiddleware)
        app.add_middleware(SecurityHeadersMiddleware, csp_policy="default-src 'none'")
    """

    def __init__(
        self,
        app,
        enable_csp: bool = True,
        csp_policy: Optional[str] = None,
    ):
        super().__init__(app)
        self.enable_csp = enable_csp
        self.csp_policy = csp_policy or DEFAULT_CSP_POLICY

        logger.info(
            "Security headers middleware initialized",
            extra={"enable_csp": enable_csp},
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = PERMISSIONS_POLICY
        if self.enable_csp:
            response.headers["Content-Security-Policy"] = self.csp_policy

        return response
