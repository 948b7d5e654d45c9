from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, Sequence

from .access_gate import AccessGate, RouteGateConfig
from .exceptions import ApiError, PermissionError, SessionError
from .models import Role, Subscription, TenantSettings
from .permissions import requires_password_to_switch_role
from .roles import ActorContext, RoleBinding
from .subscription import resolve_subscription

logger = logging.getLogger(__name__)


class WorkspaceDataSource(Protocol):
    async def get_subscription(self, tenant_id: str) -> Subscription | None: ...

    async def get_tenant_settings(self, tenant_id: str) -> TenantSettings | None: ...

    async def get_tenant_roles(self, tenant_id: str) -> list[Role]: ...

    async def upsert_settings(self, tenant_id: str, settings: TenantSettings) -> TenantSettings: ...


@dataclass
class Workspace:
    """Tenant state read at initialization: subscription, settings, roles and the acting role.

    Read failures degrade to the most restrictive state: no subscription
    (blocked), no settings (roles off, owner-only). Session errors are not
    swallowed; they mean the user has to sign in again.
    """

    tenant_id: str
    source: WorkspaceDataSource
    binding: RoleBinding
    subscription: Subscription | None = None
    settings: TenantSettings | None = None
    roles: list[Role] = field(default_factory=list)
    actor: ActorContext = field(default_factory=lambda: ActorContext(is_owner=True, roles_enabled=False))
    is_loading: bool = False
    error: ApiError | None = None

    async def load(self) -> "Workspace":
        self.is_loading = True
        self.error = None
        try:
            self.subscription = await self._fetch_subscription()
            self.settings, self.roles = await self._fetch_settings_and_roles()
            self.actor = self.binding.resolve(self.roles, self.settings)
        finally:
            self.is_loading = False
        logger.info(
            "workspace_loaded",
            extra={
                "tenant_id": self.tenant_id,
                "subscription_status": self.subscription.status.value if self.subscription else None,
                "roles_enabled": self.actor.roles_enabled,
                "role_count": len(self.roles),
                "binding": self.actor.kind.value,
            },
        )
        return self

    async def _fetch_subscription(self) -> Subscription | None:
        try:
            return await self.source.get_subscription(self.tenant_id)
        except SessionError:
            raise
        except ApiError as exc:
            logger.warning("subscription_load_failed", extra={"tenant_id": self.tenant_id, "code": exc.code})
            self.error = exc
            return None

    async def _fetch_settings_and_roles(self) -> tuple[TenantSettings | None, list[Role]]:
        try:
            settings = await self.source.get_tenant_settings(self.tenant_id)
            roles = await self._fetch_roles(settings)
        except SessionError:
            raise
        except ApiError as exc:
            logger.warning("settings_load_failed", extra={"tenant_id": self.tenant_id, "code": exc.code})
            self.error = exc
            return None, []
        return settings, roles

    async def _fetch_roles(self, settings: TenantSettings | None) -> list[Role]:
        if settings is None or not settings.enable_roles:
            return []
        return list(await self.source.get_tenant_roles(self.tenant_id))

    async def update_settings(self, settings: TenantSettings) -> TenantSettings:
        previous = self.settings
        updated = await self.source.upsert_settings(self.tenant_id, settings)
        self.settings = updated
        was_enabled = bool(previous and previous.enable_roles)
        if updated.enable_roles != was_enabled:
            if updated.enable_roles:
                self.roles = await self._fetch_roles(updated)
            else:
                self.roles = []
                self.binding.clear()
        self.actor = self.binding.resolve(self.roles, self.settings)
        return updated

    def select_role(self, role_id: str | None, *, password_verified: bool = False) -> ActorContext:
        """Act as ``role_id`` on this device, or as the owner when ``None``."""
        if requires_password_to_switch_role(self.settings) and not password_verified:
            raise PermissionError(
                code="PASSWORD_REQUIRED",
                message="Switching roles requires the account password",
                status_code=403,
            )
        self.binding.select(role_id, self.roles)
        self.actor = self.binding.resolve(self.roles, self.settings)
        return self.actor

    def available_roles(self) -> Sequence[Role]:
        return tuple(self.roles) if self.actor.roles_enabled else ()

    def access_gate(
        self,
        *,
        now: datetime | None = None,
        is_authenticated: bool = True,
        route_config: RouteGateConfig | None = None,
    ) -> AccessGate:
        return AccessGate(
            subscription=resolve_subscription(self.subscription, now),
            actor=self.actor,
            settings=self.settings,
            is_authenticated=is_authenticated,
            is_loading=self.is_loading,
            route_config=route_config or RouteGateConfig.default(),
        )
