# track_core/orders/timeline.py
"""
Status state machine.

The production timeline is a list of plain dict events:
    {"status", "timestamp", "description", "completed", ["location"]}

Moving to a status completes every lower-weight event and stamps the target
event. Higher-weight events are left as they are, so a backward move never
un-completes a stage the order already reached. No transition is rejected.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from django.utils import timezone

from track_core.orders.models import OrderStatus

PENDING_TIMESTAMP = "-"

STATUS_WEIGHTS = {
    OrderStatus.ORDER_PLACED: 1,
    OrderStatus.IN_PRODUCTION: 2,
    OrderStatus.COMPLETED: 3,
    OrderStatus.CANCELED: 4,
}

STATUS_DESCRIPTIONS = {
    OrderStatus.ORDER_PLACED: "Order placed successfully.",
    OrderStatus.IN_PRODUCTION: "Order moved into production (cutting/printing/sewing).",
    OrderStatus.COMPLETED: "Order completed and ready for delivery or pickup.",
    OrderStatus.CANCELED: "Order canceled.",
}

PENDING_DESCRIPTIONS = {
    OrderStatus.IN_PRODUCTION: "Waiting for production to start.",
    OrderStatus.COMPLETED: "Waiting for completion.",
}

PRODUCTION_STAGES = (OrderStatus.ORDER_PLACED, OrderStatus.IN_PRODUCTION, OrderStatus.COMPLETED)


def status_weight(status: Optional[str]) -> int:
    """0 for statuses outside the production timeline (QUOTE, unknown)."""
    return STATUS_WEIGHTS.get(status, 0)


def format_timestamp(moment: Optional[datetime] = None) -> str:
    # business-local time, e.g. "07 Mar, 14:05"
    return timezone.localtime(moment or timezone.now()).strftime("%d %b, %H:%M")


def make_event(
    status: str,
    *,
    description: str,
    timestamp: str = PENDING_TIMESTAMP,
    completed: bool = False,
    location: Optional[str] = None,
) -> dict:
    event = {
        "status": str(status),
        "timestamp": timestamp,
        "description": description,
        "completed": completed,
    }
    if location:
        event["location"] = location
    return event


def seed_production_timeline(first_description: str, moment: Optional[datetime] = None) -> list[dict]:
    placed, in_production, completed = PRODUCTION_STAGES
    return [
        make_event(placed, description=first_description, timestamp=format_timestamp(moment), completed=True),
        make_event(in_production, description=PENDING_DESCRIPTIONS[in_production]),
        make_event(completed, description=PENDING_DESCRIPTIONS[completed]),
    ]


def apply_status_change(
    timeline: list[dict],
    target: str,
    location: Optional[str] = None,
    moment: Optional[datetime] = None,
) -> list[dict]:
    """
    Returns the timeline after moving the order to `target`. The input list is not mutated.
    """
    target_weight = status_weight(target)
    if target_weight == 0:
        raise ValueError(f"{target!r} is not a production status.")

    stamp = format_timestamp(moment)
    out: list[dict] = []
    found = False

    for event in timeline or []:
        event = dict(event)
        if event.get("status") == target:
            found = True
            event["completed"] = True
            event["timestamp"] = stamp
            event["description"] = STATUS_DESCRIPTIONS[target]
            if location:
                event["location"] = location
        elif status_weight(event.get("status")) < target_weight:
            event["completed"] = True
        out.append(event)

    if not found:
        out.append(
            make_event(
                target,
                description=STATUS_DESCRIPTIONS[target],
                timestamp=stamp,
                completed=True,
                location=location,
            )
        )
    return out
