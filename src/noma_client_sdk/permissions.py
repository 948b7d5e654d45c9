from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .models import OrderPermission, Panel, Role, TenantSettings


class GateDecision(str, Enum):
    LOADING = "loading"
    ALLOW = "allow"
    HIDE = "hide"
    DISABLE = "disable"

    @property
    def allowed(self) -> bool:
        return self is GateDecision.ALLOW


class BlockMode(str, Enum):
    HIDE = "hide"
    DISABLE = "disable"


@dataclass(frozen=True)
class RoleGateInput:
    is_owner: bool
    roles_enabled: bool
    selected_role: Role | None = None
    settings: TenantSettings | None = None
    required_panel: Panel | None = None
    required_permission: OrderPermission | None = None
    required_feature: str | None = None
    block_mode: BlockMode = BlockMode.HIDE
    is_loading: bool = False


def feature_enabled(settings: TenantSettings | None, feature: str) -> bool:
    if settings is None or feature not in TenantSettings.model_fields:
        return False
    return bool(getattr(settings, feature))


def resolve_role_gate(gate: RoleGateInput) -> GateDecision:
    if gate.is_loading:
        return GateDecision.LOADING
    if gate.is_owner:
        return GateDecision.ALLOW

    if gate.required_feature and not feature_enabled(gate.settings, gate.required_feature):
        return GateDecision.HIDE

    role = gate.selected_role
    if gate.roles_enabled and role is None and (gate.required_panel or gate.required_permission):
        # Not the owner and no role chosen yet: nothing role-scoped is granted.
        return GateDecision.HIDE

    if gate.required_panel is not None and gate.roles_enabled and role is not None:
        if not role.can_access(gate.required_panel):
            return GateDecision.HIDE

    if gate.required_permission is not None and gate.roles_enabled and role is not None:
        if not role.can(gate.required_permission):
            return GateDecision.DISABLE if gate.block_mode is BlockMode.DISABLE else GateDecision.HIDE

    return GateDecision.ALLOW


PASSWORD_LOCKED_PANELS: dict[Panel, str] = {
    Panel.REPORTS: "lock_reports_with_password",
    Panel.SETTINGS: "lock_settings_with_password",
}


def panel_for_path(path: str) -> Panel | None:
    """Panel owning ``path``, taken from its first segment (``/orders/7`` -> orders)."""
    head = path.lstrip("/").split("/", 1)[0]
    try:
        return Panel(head)
    except ValueError:
        return None


def requires_password(settings: TenantSettings | None, target: Panel | str | None) -> bool:
    if settings is None or target is None:
        return False
    panel = target if isinstance(target, Panel) else panel_for_path(target)
    flag = PASSWORD_LOCKED_PANELS.get(panel) if panel else None
    return bool(flag and getattr(settings, flag))


def requires_password_to_switch_role(settings: TenantSettings | None) -> bool:
    return bool(settings and settings.require_password_to_switch_role)
