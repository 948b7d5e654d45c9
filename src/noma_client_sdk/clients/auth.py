from __future__ import annotations

import logging
import platform
from dataclasses import dataclass
from typing import Any

from ..auth_store import AuthStore
from ..credentials import CredentialVerifier
from ..exceptions import ApiError
from ..models import SessionData, TokenResponse
from .base import BaseClient

logger = logging.getLogger(__name__)


def default_device_label() -> str:
    return f"python-sdk/{platform.system().lower() or 'unknown'}"


def _token_from(data: Any) -> TokenResponse:
    if isinstance(data, dict):
        token = data.get("accessToken") or data.get("access_token")
        if token:
            return TokenResponse(access_token=str(token), trace_id=data.get("traceId") or data.get("trace_id"))
    raise ApiError(
        code="MALFORMED_TOKEN_RESPONSE",
        message="Auth response did not include an access token",
        details=data,
        status_code=0,
    )


@dataclass
class AuthClient(BaseClient):
    verifier: CredentialVerifier | None = None
    auth_store: AuthStore | None = None
    signin_path: str = "/api/core/v1/signin"
    refresh_path: str = "/api/core/v1/refresh"
    product_code: str | None = None
    env_name: str | None = None

    async def sign_in(self, email: str, password: str, device: str | None = None) -> SessionData:
        payload = {
            "email": email,
            "password": password,
            "device": device or default_device_label(),
        }
        if self.product_code:
            payload["productCode"] = self.product_code
        logger.info("sign_in_attempt", extra={"email": email})
        data = await self._request(
            "POST",
            self.signin_path,
            json_body=payload,
            with_auth=False,
            operation="sign_in",
        )
        token = _token_from(data)
        session = self._verifier().session_from_token(token.access_token, env_name=self.env_name)
        if self.auth_store is not None:
            self.auth_store.save(session)
        logger.info("sign_in_success", extra={"session_id": session.id, "user_id": session.user.id})
        return session

    async def refresh_token(self) -> str:
        """Exchange the cookie-borne refresh credential for a new bearer credential."""
        data = await self._request(
            "POST",
            self.refresh_path,
            with_auth=False,
            operation="refresh",
        )
        return _token_from(data).access_token

    def sign_out(self) -> None:
        logger.info("sign_out")
        if self.auth_store is not None:
            self.auth_store.clear()

    def _verifier(self) -> CredentialVerifier:
        if self.verifier is None:
            raise RuntimeError("AuthClient requires a CredentialVerifier to sign in")
        return self.verifier
