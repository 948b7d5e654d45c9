from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Accepts both the snake_case and camelCase spellings the APIs emit."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class User(ApiModel):
    id: str
    name: str | None = None
    email: str | None = None
    session_id: str | None = None


class SessionData(ApiModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    user: User
    token: str
    product_id: str | None = None
    env_name: str | None = None


class TokenResponse(ApiModel):
    access_token: str
    trace_id: str | None = None


class SubscriptionStatus(str, Enum):
    TRIAL = "trial"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    PAYMENT_FAILED = "payment_failed"
    PAUSED = "paused"


class Subscription(ApiModel):
    id: str | None = None
    status: SubscriptionStatus
    plan: str | None = None
    started_at: datetime | None = None
    expires_at: datetime | None = None
    grace_period_until: datetime | None = None
    cancelled_at: datetime | None = None
    payment_failed_at: datetime | None = None
    is_trial: bool = False
    cancel_at_period_end: bool = False


class Panel(str, Enum):
    DASHBOARD = "dashboard"
    ORDERS = "orders"
    CALENDAR = "calendar"
    PRODUCTION = "production"
    DELIVERY = "delivery"
    REMINDERS = "reminders"
    REPORTS = "reports"
    SETTINGS = "settings"


class OrderPermission(str, Enum):
    CREATE = "create_orders"
    EDIT = "edit_orders"
    DELETE = "delete_orders"


class Role(ApiModel):
    id: str
    tenant_id: str | None = None
    name: str
    can_access_dashboard: bool = False
    can_access_orders: bool = False
    can_access_calendar: bool = False
    can_access_production: bool = False
    can_access_delivery: bool = False
    can_access_reminders: bool = False
    can_access_reports: bool = False
    can_access_settings: bool = False
    can_create_orders: bool = False
    can_edit_orders: bool = False
    can_delete_orders: bool = False

    def can_access(self, panel: Panel | str) -> bool:
        return bool(getattr(self, f"can_access_{Panel(panel).value}"))

    def can(self, permission: OrderPermission | str) -> bool:
        return bool(getattr(self, f"can_{OrderPermission(permission).value}"))

    def accessible_panels(self) -> list[Panel]:
        return [panel for panel in Panel if self.can_access(panel)]


class TenantSettings(ApiModel):
    id: str | None = None
    tenant_id: str | None = None
    enable_roles: bool = False
    lock_reports_with_password: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "lock_reports_with_password", "lock_reports_by_password", "lockReportsByPassword"
        ),
    )
    lock_settings_with_password: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "lock_settings_with_password", "lock_settings_by_password", "lockSettingsByPassword"
        ),
    )
    require_password_to_switch_role: bool = False


class Tenant(ApiModel):
    id: str
    name: str | None = None
    product_id: str | None = None
    owner_id: str | None = None
    user_accepted_terms: bool = False


class Product(ApiModel):
    id: str
    code: str
    name: str
    type: str | None = None
    short_description: Optional[str] = None
    app_icon: Optional[str] = None
