from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from .config import ClientConfig
from .exceptions import CredentialError
from .models import SessionData, User


@dataclass(frozen=True)
class CredentialVerifier:
    """Verifies bearer credentials issued by the core auth API and turns them into sessions."""

    public_key: str | None
    algorithm: str
    issuer: str | None = None
    audience: str | None = None

    @classmethod
    def from_config(cls, config: ClientConfig) -> "CredentialVerifier":
        return cls(
            public_key=config.auth_public_key,
            algorithm=config.auth_jwt_algorithm,
            issuer=config.auth_issuer,
            audience=config.auth_audience,
        )

    def claims(self, token: str) -> dict[str, Any]:
        if not self.public_key:
            raise CredentialError(
                code="CREDENTIAL_KEY_MISSING",
                message="No public key configured to verify credentials",
                status_code=401,
            )
        try:
            return jwt.decode(
                token,
                self.public_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": self.audience is not None},
            )
        except JWTError as exc:
            raise CredentialError(
                code="INVALID_CREDENTIAL",
                message=str(exc) or "Credential verification failed",
                details={"type": type(exc).__name__},
                status_code=401,
            ) from exc

    def session_from_token(self, token: str, env_name: str | None = None) -> SessionData:
        claims = self.claims(token)
        session_id = claims.get("sessionId")
        subject = claims.get("sub")
        if not session_id or not subject:
            raise CredentialError(
                code="INCOMPLETE_CREDENTIAL",
                message="Credential is missing sessionId or sub claims",
                details={"claims": sorted(claims)},
                status_code=401,
            )
        try:
            user = User(
                id=str(subject),
                name=claims.get("name"),
                email=claims.get("email"),
                session_id=str(session_id),
            )
            return SessionData(
                id=str(session_id),
                user=user,
                token=token,
                product_id=claims.get("productId"),
                env_name=env_name,
            )
        except PydanticValidationError as exc:
            raise CredentialError(
                code="INVALID_CREDENTIAL_CLAIMS",
                message="Credential claims have unexpected types",
                details={"fields": [".".join(str(part) for part in error["loc"]) for error in exc.errors()]},
                status_code=401,
            ) from exc
