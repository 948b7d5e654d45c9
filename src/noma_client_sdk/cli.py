from __future__ import annotations

import argparse
import asyncio
import json
from datetime import datetime

from .access_gate import RouteGateConfig, evaluate_route
from .config import ConfigError, load_config
from .exceptions import ApiError
from .log import configure_logging
from .models import Subscription, SubscriptionStatus
from .session import ApiSession
from .subscription import resolve_subscription


def _print(payload: object) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def cmd_login(args: argparse.Namespace) -> None:
    async def run() -> None:
        async with ApiSession(load_config(args.env_file)) as session:
            current = await session.sign_in(args.email, args.password, args.device)
            _print({"session_id": current.id, "user": current.user.model_dump()})

    asyncio.run(run())


def cmd_whoami(args: argparse.Namespace) -> None:
    session = ApiSession(load_config(args.env_file))
    current = session.current
    if current is None:
        _print({"authenticated": False})
        return
    _print(
        {
            "authenticated": True,
            "session_id": current.id,
            "user": current.user.model_dump(),
            "product_id": current.product_id,
            "env_name": current.env_name,
        }
    )


def cmd_logout(args: argparse.Namespace) -> None:
    session = ApiSession(load_config(args.env_file))
    session.sign_out()
    _print({"authenticated": False})


def cmd_check_route(args: argparse.Namespace) -> None:
    subscription = None
    if args.status:
        subscription = Subscription(
            status=SubscriptionStatus(args.status),
            expires_at=args.expires_at,
            grace_period_until=args.grace_until,
        )
    state = resolve_subscription(subscription)
    config = RouteGateConfig.default()
    if args.only_active:
        config = RouteGateConfig(
            blocked_routes=config.blocked_routes,
            redirect_to=config.redirect_to,
            only_active=True,
        )
    decision = evaluate_route(
        args.path,
        state,
        is_authenticated=not args.anonymous,
        config=config,
    )
    _print(
        {
            "path": args.path,
            "action": decision.action.value,
            "redirect_to": decision.redirect_to,
            "is_blocked": state.is_blocked,
            "show_warning": state.show_warning,
            "days_until_expiry": state.days_until_expiry,
        }
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="noma-client", description="Noma client SDK CLI")
    parser.add_argument("--env-file", default=None)
    parser.add_argument("--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", required=True)

    login_parser = subparsers.add_parser("login")
    login_parser.add_argument("--email", required=True)
    login_parser.add_argument("--password", required=True)
    login_parser.add_argument("--device", default=None)
    login_parser.set_defaults(func=cmd_login)

    whoami_parser = subparsers.add_parser("whoami")
    whoami_parser.set_defaults(func=cmd_whoami)

    logout_parser = subparsers.add_parser("logout")
    logout_parser.set_defaults(func=cmd_logout)

    route_parser = subparsers.add_parser("check-route")
    route_parser.add_argument("path")
    route_parser.add_argument("--status", choices=[status.value for status in SubscriptionStatus], default=None)
    route_parser.add_argument("--expires-at", type=datetime.fromisoformat, default=None)
    route_parser.add_argument("--grace-until", type=datetime.fromisoformat, default=None)
    route_parser.add_argument("--only-active", action="store_true")
    route_parser.add_argument("--anonymous", action="store_true")
    route_parser.set_defaults(func=cmd_check_route)
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    if args.verbose:
        configure_logging()
    try:
        args.func(args)
    except ApiError as exc:
        _print({"error": exc.code, "message": exc.message, "trace_id": exc.trace_id})
        raise SystemExit(1) from exc
    except ConfigError as exc:
        _print({"error": "CONFIG_ERROR", "message": str(exc), "trace_id": None})
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
