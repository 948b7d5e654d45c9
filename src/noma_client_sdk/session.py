from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from .auth_store import AuthStore
from .clients.auth import AuthClient
from .clients.noma import NomaClient
from .clients.product import ProductClient
from .config import ClientConfig
from .credentials import CredentialVerifier
from .http_client import HttpClient
from .models import SessionData
from .renewal import ReauthenticateHook, RenewalCoordinator
from .roles import RoleBinding
from .storage import DeviceStorage
from .workspace import Workspace

logger = logging.getLogger(__name__)


@dataclass
class ApiSession:
    """Wires storage, credential store, renewal and HTTP clients for one process.

    Both API hosts share a single ``RenewalCoordinator`` so that a burst of
    rejected requests against either of them triggers one renewal.
    """

    config: ClientConfig
    storage: DeviceStorage | None = None
    auth_store: AuthStore | None = None
    verifier: CredentialVerifier | None = None
    on_reauthenticate: ReauthenticateHook | None = None
    transport: httpx.AsyncBaseTransport | None = None
    coordinator: RenewalCoordinator = field(init=False)
    core_http: HttpClient = field(init=False)
    noma_http: HttpClient = field(init=False)

    def __post_init__(self) -> None:
        self.storage = self.storage or DeviceStorage(app_name=self.config.app_name)
        self.auth_store = self.auth_store or AuthStore(storage=self.storage)
        self.verifier = self.verifier or CredentialVerifier.from_config(self.config)
        self.auth_store.load()

        self.coordinator = RenewalCoordinator(
            self.auth_store,
            self.verifier,
            timeout_seconds=self.config.renewal_timeout_seconds,
            on_reauthenticate=self._reauthenticate,
            env_name=self.config.env_name,
        )
        self.core_http = self._http(self.config.core_api_base_url)
        self.noma_http = self._http(self.config.noma_api_base_url)
        self.coordinator.refresh = self.auth_client().refresh_token

    def _http(self, base_url: str) -> HttpClient:
        return HttpClient(
            config=self.config,
            base_url=base_url,
            auth_store=self.auth_store,
            coordinator=self.coordinator,
            transport=self.transport,
        )

    def _reauthenticate(self, reason: str) -> None:
        logger.warning("reauthentication_required", extra={"reason": reason})
        if self.on_reauthenticate:
            self.on_reauthenticate(reason)

    @property
    def current(self) -> SessionData | None:
        return self.auth_store.session

    def is_authenticated(self) -> bool:
        return self.auth_store.is_authenticated()

    def auth_client(self) -> AuthClient:
        return AuthClient(
            http=self.core_http,
            verifier=self.verifier,
            auth_store=self.auth_store,
            signin_path=self.config.signin_path,
            refresh_path=self.config.refresh_path,
            product_code=self.config.product_code,
            env_name=self.config.env_name,
        )

    def product_client(self) -> ProductClient:
        return ProductClient(http=self.core_http)

    def noma_client(self) -> NomaClient:
        return NomaClient(http=self.noma_http)

    def role_binding(self) -> RoleBinding:
        return RoleBinding(self.storage)

    def workspace(self, tenant_id: str) -> Workspace:
        return Workspace(tenant_id=tenant_id, source=self.noma_client(), binding=self.role_binding())

    async def sign_in(self, email: str, password: str, device: str | None = None) -> SessionData:
        return await self.auth_client().sign_in(email, password, device)

    def sign_out(self) -> None:
        self.auth_client().sign_out()
        self.role_binding().clear()

    async def aclose(self) -> None:
        await self.core_http.aclose()
        await self.noma_http.aclose()

    async def __aenter__(self) -> "ApiSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
