from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from .models import OrderPermission, Panel, TenantSettings
from .permissions import (
    BlockMode,
    GateDecision,
    RoleGateInput,
    panel_for_path,
    requires_password,
    resolve_role_gate,
)
from .roles import ActorContext, landing_path, panel_path
from .routes import match_any
from .subscription import SubscriptionState

logger = logging.getLogger(__name__)

SUBSCRIPTION_FALLBACK_ROUTE = "/subscription-expired"

DEFAULT_SUBSCRIPTION_ROUTES: tuple[str, ...] = (
    "/dashboard",
    "/orders",
    "/orders/new",
    "/orders/:id",
    "/orders/:id/edit",
    "/production",
    "/reports",
    "/calendar",
    "/settings",
    "/reminders",
)


class RouteAction(str, Enum):
    RENDER = "render"
    LOADING = "loading"
    REDIRECT = "redirect"
    HIDE = "hide"
    DISABLE = "disable"


@dataclass(frozen=True)
class RouteGateConfig:
    """Blocked-route patterns or allowed-route patterns, never both."""

    blocked_routes: tuple[str, ...] = ()
    allowed_routes: tuple[str, ...] = ()
    fallback_route: str = SUBSCRIPTION_FALLBACK_ROUTE
    redirect_to: str | None = None
    block_mode: BlockMode = BlockMode.HIDE
    only_active: bool = False

    def __post_init__(self) -> None:
        if self.blocked_routes and self.allowed_routes:
            raise ValueError("RouteGateConfig takes blocked_routes or allowed_routes, not both")

    @classmethod
    def default(cls) -> "RouteGateConfig":
        return cls(blocked_routes=DEFAULT_SUBSCRIPTION_ROUTES, redirect_to=SUBSCRIPTION_FALLBACK_ROUTE)


@dataclass(frozen=True)
class RouteDecision:
    action: RouteAction
    should_block: bool = False
    redirect_to: str | None = None
    reason: str = ""

    @property
    def allowed(self) -> bool:
        return self.action is RouteAction.RENDER


def evaluate_route(
    path: str,
    state: SubscriptionState,
    *,
    is_authenticated: bool,
    config: RouteGateConfig,
    is_loading: bool = False,
) -> RouteDecision:
    if not is_authenticated:
        return RouteDecision(RouteAction.RENDER, reason="public")
    if is_loading:
        return RouteDecision(RouteAction.LOADING, reason="loading")
    if path == config.fallback_route:
        return RouteDecision(RouteAction.RENDER, reason="fallback")

    is_route_allowed = bool(config.allowed_routes) and match_any(config.allowed_routes, path)
    is_route_blocked = bool(config.blocked_routes) and match_any(config.blocked_routes, path)
    invalid_subscription = state.is_blocked or not state.allowed_by_status(config.only_active)

    if config.allowed_routes:
        gated = not is_route_allowed
    elif config.blocked_routes:
        gated = is_route_blocked
    else:
        gated = True

    if not (invalid_subscription and gated):
        return RouteDecision(RouteAction.RENDER)

    if config.redirect_to and config.redirect_to != path:
        return RouteDecision(RouteAction.REDIRECT, should_block=True, redirect_to=config.redirect_to, reason="subscription")
    action = RouteAction.DISABLE if config.block_mode is BlockMode.DISABLE else RouteAction.HIDE
    return RouteDecision(action, should_block=True, reason="subscription")


@dataclass(frozen=True)
class NavItem:
    title: str
    panel: Panel
    visible: bool = True
    locked: bool = False
    requires_password: bool = False

    @property
    def path(self) -> str:
        return panel_path(self.panel)


SIDEBAR: tuple[tuple[str, Panel], ...] = (
    ("Dashboard", Panel.DASHBOARD),
    ("Encomendas", Panel.ORDERS),
    ("Produção", Panel.PRODUCTION),
    ("Relatórios", Panel.REPORTS),
    ("Lembretes", Panel.REMINDERS),
    ("Calendário", Panel.CALENDAR),
    ("Configurações", Panel.SETTINGS),
)


@dataclass
class AccessGate:
    """Answers navigation and control questions for one workspace snapshot."""

    subscription: SubscriptionState
    actor: ActorContext
    settings: TenantSettings | None = None
    is_authenticated: bool = True
    is_loading: bool = False
    route_config: RouteGateConfig = field(default_factory=RouteGateConfig.default)

    def _role_input(self, **required) -> RoleGateInput:
        return RoleGateInput(
            is_owner=self.actor.is_owner,
            roles_enabled=self.actor.roles_enabled,
            selected_role=self.actor.selected_role,
            settings=self.settings,
            is_loading=self.is_loading,
            **required,
        )

    def check_route(self, path: str) -> RouteDecision:
        decision = evaluate_route(
            path,
            self.subscription,
            is_authenticated=self.is_authenticated,
            config=self.route_config,
            is_loading=self.is_loading,
        )
        if decision.should_block:
            logger.info("route_blocked", extra={"path": path, "action": decision.action.value})
        return decision

    def check_panel(self, panel: Panel | str) -> GateDecision:
        try:
            required = Panel(panel)
        except ValueError:
            logger.warning("unknown_panel", extra={"panel": panel})
            return GateDecision.HIDE
        return resolve_role_gate(self._role_input(required_panel=required))

    def check_permission(
        self,
        permission: OrderPermission | str,
        block_mode: BlockMode = BlockMode.HIDE,
    ) -> GateDecision:
        try:
            required = OrderPermission(permission)
        except ValueError:
            logger.warning("unknown_permission", extra={"permission": permission})
            return GateDecision.HIDE
        return resolve_role_gate(self._role_input(required_permission=required, block_mode=block_mode))

    def check_feature(self, feature: str) -> GateDecision:
        return resolve_role_gate(self._role_input(required_feature=feature))

    def landing_path(self) -> str:
        return landing_path(None if self.actor.is_owner else self.actor.selected_role)

    def check_navigation(self, path: str) -> RouteDecision:
        route = self.check_route(path)
        if route.action is not RouteAction.RENDER:
            return route

        panel = panel_for_path(path)
        if panel is None:
            return route
        decision = self.check_panel(panel)
        if decision is GateDecision.LOADING:
            return RouteDecision(RouteAction.LOADING, reason="loading")
        if decision.allowed:
            return route

        target = self.landing_path()
        if target == path or panel_for_path(target) == panel:
            return RouteDecision(RouteAction.HIDE, should_block=True, reason="role")
        logger.info("route_blocked", extra={"path": path, "action": "redirect", "redirect_to": target})
        return RouteDecision(RouteAction.REDIRECT, should_block=True, redirect_to=target, reason="role")

    def nav_items(self, entries: Sequence[tuple[str, Panel]] = SIDEBAR) -> list[NavItem]:
        items = []
        for title, panel in entries:
            path = panel_path(panel)
            route = evaluate_route(
                path,
                self.subscription,
                is_authenticated=self.is_authenticated,
                config=self.route_config,
            )
            items.append(
                NavItem(
                    title=title,
                    panel=panel,
                    visible=self.check_panel(panel).allowed,
                    locked=route.should_block,
                    requires_password=requires_password(self.settings, panel),
                )
            )
        return items
