from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ApiError(Exception):
    code: str
    message: str
    details: object | None = None
    trace_id: str | None = None
    status_code: int = 0
    raw_payload: object | None = None

    def __str__(self) -> str:
        trace = f" trace_id={self.trace_id}" if self.trace_id else ""
        return f"[{self.status_code}] {self.code}: {self.message}{trace}"


class UnauthorizedError(ApiError):
    pass


class ForbiddenError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class ValidationError(ApiError):
    pass


class AuthError(UnauthorizedError):
    """Authentication failed or the bearer credential was rejected."""


class PermissionError(ForbiddenError):
    """Request denied by the server for the current actor."""


class ConflictError(ApiError):
    """409 or conflict-style errors."""


class RateLimitError(ApiError):
    """429 throttling error."""


class ServerError(ApiError):
    """5xx server-side failures."""


class TransportError(ApiError):
    """Network/transport failure before an HTTP response was returned."""


class SessionError(ApiError):
    """The session can no longer be used; the user must sign in again."""


class CredentialError(SessionError):
    """A credential failed signature, issuer, audience or claims checks."""


class RenewalError(SessionError):
    """Renewing the bearer credential failed or timed out."""


class ReauthenticationRequired(SessionError):
    """A request was still rejected after its renewal retry."""
