# track_core/tenants/subscription.py
"""
Subscription gate.

Computes the countdown to a company's next due date and derives what the
company may do. The access decision follows the externally maintained
``status`` field; the countdown only drives the advisory banner.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from django.conf import settings
from django.utils import timezone
from rest_framework import status as http_status
from rest_framework.exceptions import APIException

from track_core.tenants.models import SubscriptionStatus, Tenant

SECONDS_PER_DAY = 86400

WRITABLE_STATUSES = frozenset({SubscriptionStatus.ACTIVE.value, SubscriptionStatus.TRIAL.value})


class SubscriptionBlocked(APIException):
    status_code = http_status.HTTP_402_PAYMENT_REQUIRED
    default_detail = "The company subscription is not active. Orders are read-only until payment is settled."
    default_code = "subscription_blocked"


@dataclass(frozen=True)
class SubscriptionState:
    status: str
    due_date: Optional[datetime]
    days_remaining: Optional[int]
    warning: bool
    can_write: bool
    can_read: bool = True


def due_date_for(tenant: Tenant) -> Optional[datetime]:
    if tenant.status == SubscriptionStatus.TRIAL:
        return tenant.trial_ends_at
    return tenant.next_payment_due


def days_remaining(tenant: Tenant, now: Optional[datetime] = None) -> Optional[int]:
    """
    ceil((due - now) / 1 day). None when the company has no due date.
    """
    due = due_date_for(tenant)
    if due is None:
        return None
    now = now or timezone.now()
    return math.ceil((due - now).total_seconds() / SECONDS_PER_DAY)


def warning_threshold() -> int:
    return int(getattr(settings, "SUBSCRIPTION_WARNING_DAYS", 3))


def evaluate(tenant: Tenant, now: Optional[datetime] = None) -> SubscriptionState:
    remaining = days_remaining(tenant, now=now)
    warning = remaining is not None and 0 <= remaining <= warning_threshold()
    return SubscriptionState(
        status=tenant.status,
        due_date=due_date_for(tenant),
        days_remaining=remaining,
        warning=warning,
        can_write=tenant.status in WRITABLE_STATUSES,
    )


def ensure_writable(tenant: Tenant) -> None:
    if tenant.status not in WRITABLE_STATUSES:
        raise SubscriptionBlocked()
