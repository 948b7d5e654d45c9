from __future__ import annotations

from dataclasses import dataclass

from ..models import Role, Subscription, Tenant, TenantSettings
from .base import BaseClient


@dataclass
class NomaClient(BaseClient):
    """Tenant-scoped reads and writes against the Noma API."""

    module: str = "noma"

    async def get_tenant(self, tenant_id: str) -> Tenant:
        data = await self._request("GET", f"/api/v1/tenants/{tenant_id}", operation="get_tenant")
        return Tenant.model_validate(data)

    async def get_subscription(self, tenant_id: str) -> Subscription | None:
        data = await self._request(
            "GET",
            f"/api/v1/tenants/{tenant_id}/subscription",
            operation="get_subscription",
        )
        return Subscription.model_validate(data) if data else None

    async def get_tenant_settings(self, tenant_id: str) -> TenantSettings | None:
        data = await self._request(
            "GET",
            f"/api/v1/tenants/{tenant_id}/settings",
            operation="get_tenant_settings",
        )
        return TenantSettings.model_validate(data) if data else None

    async def get_tenant_roles(self, tenant_id: str) -> list[Role]:
        data = await self._request(
            "GET",
            f"/api/v1/tenants/{tenant_id}/roles",
            operation="get_tenant_roles",
        )
        return [Role.model_validate(item) for item in data or []]

    async def upsert_settings(self, tenant_id: str, settings: TenantSettings) -> TenantSettings:
        data = await self._request(
            "PUT",
            f"/api/v1/tenants/{tenant_id}/settings",
            json_body=settings.model_dump(mode="json", exclude_none=True),
            operation="upsert_settings",
        )
        return TenantSettings.model_validate(data)
