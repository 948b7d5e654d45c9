from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .models import Subscription, SubscriptionStatus

WARNING_WINDOW_DAYS = 3


@dataclass(frozen=True)
class SubscriptionState:
    """Lifecycle flags derived from a subscription snapshot at a point in time."""

    status: SubscriptionStatus | None
    is_trial: bool
    is_active: bool
    is_expired: bool
    is_payment_failed: bool
    is_cancelled: bool
    in_grace_period: bool
    is_blocked: bool
    show_warning: bool
    days_until_expiry: int | None = None

    def allowed_by_status(self, only_active: bool = False) -> bool:
        if only_active:
            return self.is_active
        return self.is_active or self.is_trial

    def grants_access(self, only_active: bool = False) -> bool:
        return not self.is_blocked and self.allowed_by_status(only_active)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def whole_days_between(start: datetime, end: datetime) -> int:
    """Whole days from ``start`` to ``end``, truncated toward zero."""
    return int((_as_utc(end) - _as_utc(start)) / timedelta(days=1))


def resolve_subscription(subscription: Subscription | None, now: datetime | None = None) -> SubscriptionState:
    now = _as_utc(now or datetime.now(timezone.utc))
    if subscription is None:
        return SubscriptionState(
            status=None,
            is_trial=False,
            is_active=False,
            is_expired=False,
            is_payment_failed=False,
            is_cancelled=False,
            in_grace_period=False,
            is_blocked=True,
            show_warning=False,
        )

    status = subscription.status
    expires_at = _as_utc(subscription.expires_at) if subscription.expires_at else None
    grace_until = _as_utc(subscription.grace_period_until) if subscription.grace_period_until else None

    is_trial = status is SubscriptionStatus.TRIAL
    is_active = status is SubscriptionStatus.ACTIVE
    is_cancelled = status is SubscriptionStatus.CANCELLED
    is_payment_failed = status is SubscriptionStatus.PAYMENT_FAILED
    is_expired = expires_at is not None and expires_at < now
    in_grace_period = grace_until is not None and grace_until > now

    is_blocked = (
        (is_payment_failed and not in_grace_period)
        or is_cancelled
        or (is_expired and not in_grace_period)
    )

    days_until_expiry = whole_days_between(now, expires_at) if expires_at else None
    expiring_soon = days_until_expiry is not None and days_until_expiry <= WARNING_WINDOW_DAYS
    # Trials end on their own schedule; a cancelled plan still warns while paid time remains.
    show_warning = is_payment_failed or (
        expiring_soon
        and not is_trial
        and (not is_blocked or (is_cancelled and not is_expired))
    )

    return SubscriptionState(
        status=status,
        is_trial=is_trial,
        is_active=is_active,
        is_expired=is_expired,
        is_payment_failed=is_payment_failed,
        is_cancelled=is_cancelled,
        in_grace_period=in_grace_period,
        is_blocked=is_blocked,
        show_warning=show_warning,
        days_until_expiry=days_until_expiry,
    )
