from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from pathlib import Path

import httpx
import pytest
from jose import jwt

from noma_client_sdk.auth_store import AuthStore
from noma_client_sdk.config import ClientConfig
from noma_client_sdk.credentials import CredentialVerifier
from noma_client_sdk.storage import DeviceStorage

TEST_SECRET = "test-secret"
CORE_URL = "https://core.example.test"
NOMA_URL = "https://noma.example.test"


def mint_token(session_id: str = "sess-1", sub: str = "user-1", **claims) -> str:
    payload = {"sessionId": session_id, "sub": sub, "name": "Ana", "email": "ana@example.com", "productId": "prod-1"}
    payload.update(claims)
    return jwt.encode(payload, TEST_SECRET, algorithm="HS256")


@pytest.fixture()
def config() -> ClientConfig:
    return ClientConfig(
        env_name="test",
        core_api_base_url=CORE_URL,
        noma_api_base_url=NOMA_URL,
        renewal_timeout_seconds=1.0,
        auth_public_key=TEST_SECRET,
        auth_jwt_algorithm="HS256",
        product_code="noma",
    )


@pytest.fixture()
def storage(tmp_path: Path) -> DeviceStorage:
    return DeviceStorage(base_dir=tmp_path)


@pytest.fixture()
def auth_store(storage: DeviceStorage) -> AuthStore:
    return AuthStore(storage=storage)


@pytest.fixture()
def verifier(config: ClientConfig) -> CredentialVerifier:
    return CredentialVerifier.from_config(config)


@dataclass
class FakeBackend:
    """Core and Noma API double: protected paths accept only ``valid_token``."""

    valid_token: str
    refresh_token: str | None = None
    refresh_status: int = 200
    refresh_delay: float = 0.05
    always_reject: set[str] = field(default_factory=set)
    refresh_calls: int = 0
    requests: list[httpx.Request] = field(default_factory=list)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/api/core/v1/refresh":
            self.refresh_calls += 1
            await asyncio.sleep(self.refresh_delay)
            if self.refresh_status != 200:
                return httpx.Response(self.refresh_status, json={"message": "refresh rejected"})
            return httpx.Response(200, json={"data": {"accessToken": self.refresh_token or self.valid_token}})
        if path == "/api/core/v1/signin":
            body = json.loads(request.content)
            if body.get("password") != "secret":
                return httpx.Response(401, json={"message": "Invalid credentials", "traceId": "trace-signin"})
            return httpx.Response(200, json={"data": {"accessToken": self.valid_token}})
        if path.startswith("/api/core/v1/product/"):
            return httpx.Response(200, json={"data": {"id": "prod-1", "code": "noma", "name": "Noma"}})
        if path == "/public/ping":
            return httpx.Response(200, json={"ok": True})

        auth = request.headers.get("Authorization")
        if path in self.always_reject or auth != f"Bearer {self.valid_token}":
            return httpx.Response(401, json={"message": "jwt expired"})
        return httpx.Response(200, json={"path": path}, headers={"X-Trace-ID": "trace-ok"})

    def calls_to(self, path: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]
