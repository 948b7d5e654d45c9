from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable

from .auth_store import AuthStore
from .credentials import CredentialVerifier
from .exceptions import ApiError, ReauthenticationRequired, RenewalError

logger = logging.getLogger(__name__)

RefreshCall = Callable[[], Awaitable[str]]
ReauthenticateHook = Callable[[str], None]


class RenewalState(str, Enum):
    IDLE = "idle"
    RENEWING = "renewing"


class RenewalCoordinator:
    """Single-flight renewal of the bearer credential.

    The first request to observe an authorization failure performs the
    renewal; every other request failing while it is in flight waits on a
    future and is released with the same new credential. One coordinator is
    shared by every ``HttpClient`` of an ``ApiSession``.
    """

    def __init__(
        self,
        auth_store: AuthStore,
        verifier: CredentialVerifier,
        refresh: RefreshCall | None = None,
        *,
        timeout_seconds: float = 10.0,
        on_reauthenticate: ReauthenticateHook | None = None,
        env_name: str | None = None,
    ) -> None:
        self.auth_store = auth_store
        self.verifier = verifier
        self.refresh = refresh
        self.timeout_seconds = timeout_seconds
        self.on_reauthenticate = on_reauthenticate
        self.env_name = env_name
        self.state = RenewalState.IDLE
        self.renewal_count = 0
        self.last_failure_reason: str | None = None
        self._waiters: list[asyncio.Future[str]] = []
        self._generation = 0

    @property
    def pending_waiters(self) -> int:
        return len(self._waiters)

    async def renew(self, failed_token: str | None = None) -> str:
        """Return a fresh credential, renewing at most once across concurrent callers.

        ``failed_token`` is the credential the rejected request was sent
        with. If the session has already been replaced since, the current
        credential is returned without another renewal call.
        """
        if self.state is RenewalState.RENEWING:
            waiter: asyncio.Future[str] = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            logger.info("renewal_waiter_queued", extra={"pending": len(self._waiters)})
            return await waiter

        current = self.auth_store.token
        if failed_token is not None and current is not None and current != failed_token:
            return current

        if self.refresh is None:
            raise RenewalError(
                code="RENEWAL_UNAVAILABLE",
                message="No refresh call bound to the renewal coordinator",
                status_code=401,
            )

        self.state = RenewalState.RENEWING
        self.renewal_count += 1
        generation = self._generation
        logger.info("renewal_started", extra={"attempt": self.renewal_count})
        try:
            token = await asyncio.wait_for(self.refresh(), timeout=self.timeout_seconds)
            session = self.verifier.session_from_token(token, env_name=self.env_name)
        except asyncio.CancelledError:
            if generation == self._generation:
                self._fail(
                    RenewalError(code="RENEWAL_CANCELLED", message="Credential renewal was cancelled", status_code=401),
                    "renewal_cancelled",
                )
            raise
        except asyncio.TimeoutError as exc:
            error = RenewalError(
                code="RENEWAL_TIMEOUT",
                message=f"Credential renewal did not complete within {self.timeout_seconds}s",
                status_code=401,
            )
            if generation == self._generation:
                self._fail(error, "renewal_timeout")
            raise error from exc
        except ApiError as exc:
            error = RenewalError(
                code="RENEWAL_FAILED",
                message=exc.message,
                details={"cause": exc.code},
                trace_id=exc.trace_id,
                status_code=exc.status_code or 401,
            )
            if generation == self._generation:
                self._fail(error, "renewal_failed")
            raise error from exc
        except Exception as exc:
            error = RenewalError(
                code="RENEWAL_FAILED",
                message=str(exc) or type(exc).__name__,
                details={"cause": type(exc).__name__},
                status_code=401,
            )
            if generation == self._generation:
                self._fail(error, "renewal_failed")
            raise error from exc

        if generation != self._generation:
            # The session was abandoned while this renewal was in flight.
            raise ReauthenticationRequired(
                code="REAUTHENTICATION_REQUIRED",
                message="Session was ended while renewing the credential",
                status_code=401,
            )
        self._succeed(session)
        return session.token

    def abandon(self, reason: str) -> None:
        """End the session after a request exhausted its renewal retry."""
        self._generation += 1
        logger.warning("renewal_abandoned", extra={"reason": reason, "pending": len(self._waiters)})
        self._fail(
            ReauthenticationRequired(
                code="REAUTHENTICATION_REQUIRED",
                message="Credential was rejected after renewal; sign in again",
                status_code=401,
            ),
            reason,
        )

    def _succeed(self, session) -> None:
        self.auth_store.save(session)
        waiters, self._waiters = self._waiters, []
        self.state = RenewalState.IDLE
        self.last_failure_reason = None
        logger.info("renewal_succeeded", extra={"session_id": session.id, "released": len(waiters)})
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(session.token)

    def _fail(self, error: ApiError, reason: str) -> None:
        waiters, self._waiters = self._waiters, []
        self.state = RenewalState.IDLE
        self.last_failure_reason = reason
        logger.warning("renewal_failed", extra={"reason": reason, "rejected": len(waiters), "code": error.code})
        for waiter in waiters:
            if not waiter.done():
                waiter.set_exception(error)
        self.auth_store.clear()
        if self.on_reauthenticate:
            self.on_reauthenticate(reason)
