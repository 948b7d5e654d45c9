from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from .models import Panel, Role, TenantSettings
from .storage import ACTIVE_ROLE_KEY, DeviceStorage

logger = logging.getLogger(__name__)

OWNER = "owner"
DEFAULT_LANDING_PATH = "/dashboard"

# Order in which a role's first accessible panel is chosen as its landing page.
LANDING_ORDER: tuple[Panel, ...] = (
    Panel.DASHBOARD,
    Panel.ORDERS,
    Panel.CALENDAR,
    Panel.PRODUCTION,
    Panel.REPORTS,
    Panel.REMINDERS,
    Panel.SETTINGS,
)


class BindingKind(str, Enum):
    OWNER = "owner"
    ROLE = "role"
    UNSELECTED = "unselected"


@dataclass(frozen=True)
class ActorContext:
    is_owner: bool
    roles_enabled: bool
    selected_role: Role | None = None

    @property
    def needs_role_selection(self) -> bool:
        return self.roles_enabled and not self.is_owner and self.selected_role is None

    @property
    def kind(self) -> BindingKind:
        if self.is_owner:
            return BindingKind.OWNER
        if self.selected_role is not None:
            return BindingKind.ROLE
        return BindingKind.UNSELECTED


def panel_path(panel: Panel) -> str:
    return f"/{panel.value}"


def landing_path(role: Role | None) -> str:
    if role is None:
        return DEFAULT_LANDING_PATH
    for panel in LANDING_ORDER:
        if role.can_access(panel):
            return panel_path(panel)
    return DEFAULT_LANDING_PATH


class RoleBinding:
    """Device-scoped pointer to the role the current device acts as.

    The owner is stored explicitly; an empty pointer means no choice has
    been made yet and is never treated as owner while roles are in use.
    """

    def __init__(self, storage: DeviceStorage) -> None:
        self.storage = storage

    def raw(self) -> str | None:
        value = self.storage.get(ACTIVE_ROLE_KEY)
        return str(value) if value else None

    def select(self, role_id: str | None, roles: Sequence[Role] | None = None) -> None:
        """Bind to ``role_id``; ``None`` binds the owner."""
        if role_id is None or role_id == OWNER:
            self.storage.set(ACTIVE_ROLE_KEY, OWNER)
            logger.info("role_binding_selected", extra={"binding": OWNER})
            return
        if roles is not None and not any(role.id == role_id for role in roles):
            raise ValueError(f"Unknown role id for this tenant: {role_id}")
        self.storage.set(ACTIVE_ROLE_KEY, role_id)
        logger.info("role_binding_selected", extra={"binding": role_id})

    def clear(self) -> None:
        self.storage.remove(ACTIVE_ROLE_KEY)

    def resolve(self, roles: Sequence[Role], settings: TenantSettings | None) -> ActorContext:
        roles_enabled = bool(settings and settings.enable_roles)
        if not roles_enabled or not roles:
            return ActorContext(is_owner=True, roles_enabled=roles_enabled)

        pointer = self.raw()
        if pointer is None:
            return ActorContext(is_owner=False, roles_enabled=True)
        if pointer == OWNER:
            return ActorContext(is_owner=True, roles_enabled=True)

        role = next((item for item in roles if item.id == pointer), None)
        if role is None:
            logger.warning("role_binding_reset", extra={"stale_role_id": pointer})
            self.storage.set(ACTIVE_ROLE_KEY, OWNER)
            return ActorContext(is_owner=True, roles_enabled=True)
        return ActorContext(is_owner=False, roles_enabled=True, selected_role=role)
