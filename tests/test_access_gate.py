from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from noma_client_sdk.access_gate import (
    AccessGate,
    RouteAction,
    RouteGateConfig,
    evaluate_route,
)
from noma_client_sdk.models import OrderPermission, Panel, Role, Subscription, SubscriptionStatus, TenantSettings
from noma_client_sdk.permissions import BlockMode, GateDecision
from noma_client_sdk.roles import ActorContext
from noma_client_sdk.subscription import resolve_subscription

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
ACTIVE = resolve_subscription(
    Subscription(status=SubscriptionStatus.ACTIVE, expires_at=NOW + timedelta(days=30)),
    NOW,
)
TRIAL = resolve_subscription(
    Subscription(status=SubscriptionStatus.TRIAL, expires_at=NOW + timedelta(days=1)),
    NOW,
)
CANCELLED = resolve_subscription(
    Subscription(status=SubscriptionStatus.CANCELLED, expires_at=NOW + timedelta(days=2)),
    NOW,
)
OWNER = ActorContext(is_owner=True, roles_enabled=True)


def test_unauthenticated_is_never_blocked() -> None:
    decision = evaluate_route("/orders", CANCELLED, is_authenticated=False, config=RouteGateConfig.default())

    assert decision.action is RouteAction.RENDER


def test_fallback_route_is_never_blocked() -> None:
    decision = evaluate_route(
        "/subscription-expired",
        CANCELLED,
        is_authenticated=True,
        config=RouteGateConfig.default(),
    )

    assert decision.action is RouteAction.RENDER


def test_blocked_subscription_redirects_from_listed_routes() -> None:
    decision = evaluate_route("/orders/42/edit", CANCELLED, is_authenticated=True, config=RouteGateConfig.default())

    assert decision.action is RouteAction.REDIRECT
    assert decision.redirect_to == "/subscription-expired"
    assert decision.should_block


def test_blocked_subscription_leaves_unlisted_routes_alone() -> None:
    decision = evaluate_route("/profile", CANCELLED, is_authenticated=True, config=RouteGateConfig.default())

    assert decision.action is RouteAction.RENDER


def test_allowed_list_blocks_everything_else() -> None:
    config = RouteGateConfig(allowed_routes=("/profile", "/billing/:id"), block_mode=BlockMode.DISABLE)

    assert evaluate_route("/billing/7", CANCELLED, is_authenticated=True, config=config).allowed
    decision = evaluate_route("/orders", CANCELLED, is_authenticated=True, config=config)
    assert decision.action is RouteAction.DISABLE


def test_no_lists_blocks_by_default() -> None:
    decision = evaluate_route("/anything", CANCELLED, is_authenticated=True, config=RouteGateConfig())

    assert decision.action is RouteAction.HIDE


def test_trial_passes_unless_strict() -> None:
    config = RouteGateConfig.default()
    strict = RouteGateConfig(blocked_routes=config.blocked_routes, only_active=True)

    assert evaluate_route("/orders", TRIAL, is_authenticated=True, config=config).allowed
    assert evaluate_route("/orders", TRIAL, is_authenticated=True, config=strict).action is RouteAction.HIDE
    assert evaluate_route("/orders", ACTIVE, is_authenticated=True, config=strict).allowed


def test_loading_workspace_yields_loading() -> None:
    decision = evaluate_route("/orders", ACTIVE, is_authenticated=True, config=RouteGateConfig.default(), is_loading=True)

    assert decision.action is RouteAction.LOADING


def test_both_route_lists_are_rejected() -> None:
    with pytest.raises(ValueError):
        RouteGateConfig(blocked_routes=("/a",), allowed_routes=("/b",))


def test_role_without_reports_is_redirected_but_owner_is_not() -> None:
    clerk = Role(id="role-clerk", name="Clerk", can_access_orders=True)
    settings = TenantSettings(enable_roles=True)
    as_clerk = AccessGate(
        subscription=ACTIVE,
        actor=ActorContext(is_owner=False, roles_enabled=True, selected_role=clerk),
        settings=settings,
    )
    as_owner = AccessGate(subscription=ACTIVE, actor=OWNER, settings=settings)

    decision = as_clerk.check_navigation("/reports")

    assert decision.action is RouteAction.REDIRECT
    assert decision.redirect_to == "/orders"
    assert as_owner.check_navigation("/reports").allowed


def test_navigation_checks_subscription_before_role() -> None:
    gate = AccessGate(subscription=CANCELLED, actor=OWNER, settings=TenantSettings(enable_roles=True))

    decision = gate.check_navigation("/orders")

    assert decision.action is RouteAction.REDIRECT
    assert decision.redirect_to == "/subscription-expired"


def test_unselected_role_is_hidden_from_dashboard() -> None:
    gate = AccessGate(
        subscription=ACTIVE,
        actor=ActorContext(is_owner=False, roles_enabled=True),
        settings=TenantSettings(enable_roles=True),
    )

    decision = gate.check_navigation("/dashboard")

    assert decision.action is RouteAction.HIDE


def test_permission_checks_follow_role_flags() -> None:
    clerk = Role(id="role-clerk", name="Clerk", can_access_orders=True, can_create_orders=True)
    gate = AccessGate(
        subscription=ACTIVE,
        actor=ActorContext(is_owner=False, roles_enabled=True, selected_role=clerk),
        settings=TenantSettings(enable_roles=True),
    )

    assert gate.check_permission(OrderPermission.CREATE) is GateDecision.ALLOW
    assert gate.check_permission("delete_orders", block_mode=BlockMode.DISABLE) is GateDecision.DISABLE
    assert gate.check_panel(Panel.SETTINGS) is GateDecision.HIDE


def test_nav_items_reflect_locks_and_visibility() -> None:
    clerk = Role(id="role-clerk", name="Clerk", can_access_orders=True, can_access_reports=True)
    gate = AccessGate(
        subscription=CANCELLED,
        actor=ActorContext(is_owner=False, roles_enabled=True, selected_role=clerk),
        settings=TenantSettings(enable_roles=True, lock_reports_with_password=True),
    )

    items = {item.path: item for item in gate.nav_items()}

    assert items["/orders"].visible
    assert items["/orders"].locked
    assert not items["/dashboard"].visible
    assert items["/reports"].requires_password
    assert not items["/orders"].requires_password


def test_feature_checks_use_tenant_settings() -> None:
    clerk = Role(id="role-clerk", name="Clerk")
    actor = ActorContext(is_owner=False, roles_enabled=True, selected_role=clerk)
    locked = AccessGate(subscription=ACTIVE, actor=actor, settings=TenantSettings(enable_roles=True))

    assert locked.check_feature("enable_roles") is GateDecision.ALLOW
    assert locked.check_feature("lock_settings_with_password") is GateDecision.HIDE
    assert AccessGate(subscription=ACTIVE, actor=actor).check_feature("enable_roles") is GateDecision.HIDE


def test_unknown_panel_or_permission_is_hidden() -> None:
    gate = AccessGate(subscription=ACTIVE, actor=OWNER, settings=TenantSettings(enable_roles=True))

    assert gate.check_panel("inventory") is GateDecision.HIDE
    assert gate.check_permission("archive_orders", block_mode=BlockMode.DISABLE) is GateDecision.HIDE
    assert gate.check_panel("orders") is GateDecision.ALLOW
