"""
Error taxonomy for the proxy.

Every failure that reaches a route is one of these, carrying the
HTTP status it should be answered with.
"""

from datetime import datetime, timezone


class ProxyError(Exception):
    """Base exception for proxy errors."""

    default_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
        source: str | None = None,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body
        self.source = source
        self.endpoint = endpoint
        self.timestamp = datetime.now(timezone.utc)

    @property
    def http_status(self) -> int:
        """Status to answer the caller with."""
        return self.status_code or self.default_status


class ValidationError(ProxyError):
    """Raised when caller input is missing or malformed."""

    default_status = 400


class AuthError(ProxyError):
    """Raised when the identity provider rejects the credential exchange."""

    pass


class CatalogError(ProxyError):
    """Raised when the catalog API rejects a query or errors."""

    pass


class UnclassifiedError(ProxyError):
    """Raised for local failures, including network errors."""

    pass
