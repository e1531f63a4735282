# track_core/orders/services.py
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import ValidationError

from track_core.common.api.exceptions import ConflictError, storage_errors
from track_core.orders import ledger
from track_core.orders.exceptions import (
    InsufficientRemainingBalance,
    NotAQuote,
    PaymentIndexOutOfBounds,
    QuoteStatusLocked,
)
from track_core.orders.models import Order, OrderItem, OrderStatus
from track_core.orders.selectors import get_order
from track_core.orders.timeline import apply_status_change, seed_production_timeline, status_weight

logger = logging.getLogger(__name__)

NUMBER_MIN = 10000
NUMBER_MAX = 99999
NUMBER_ATTEMPTS = 20

ZERO = Decimal("0.00")


@dataclass
class ItemInput:
    name: str
    quantity: int
    unit_price: Decimal
    size: str = ""

    @property
    def line_total(self) -> Decimal:
        return ledger.to_cents(self.unit_price) * int(self.quantity)


@dataclass
class OrderInput:
    """
    Plain-data intake for create/update. Also the shape of a duplicated draft.
    """
    customer_name: str
    customer_phone: str
    order_date: Optional[date]
    items: list = field(default_factory=list)
    shipping_address: str = ""
    down_payment: Decimal = ZERO
    payment_method: str = ""
    estimated_delivery: Optional[date] = None
    quote_validity: Optional[date] = None
    pressing_date: Optional[date] = None
    printing_date: Optional[date] = None
    seamstress: str = ""
    notes: str = ""
    photos: list = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return ledger.to_cents(sum((i.line_total for i in self.items), ZERO))


def currency_symbol() -> str:
    return getattr(settings, "TRACK_CURRENCY_SYMBOL", ledger.DEFAULT_SYMBOL)


def _validate_items(items: list) -> dict:
    errors = {}
    if not items:
        errors["items"] = "At least one item is required."
        return errors

    item_errors = {}
    for idx, item in enumerate(items):
        try:
            price = ledger.to_cents(item.unit_price)
        except ValueError:
            price = None

        if not (item.name or "").strip():
            item_errors[idx] = "Item name is required."
        elif int(item.quantity) <= 0:
            item_errors[idx] = "Quantity must be greater than zero."
        elif price is None:
            item_errors[idx] = "Unit price must be a valid number."
        elif price < 0:
            item_errors[idx] = "Unit price cannot be negative."
    if item_errors:
        errors["items"] = item_errors
    return errors


def _validate_intake(data: OrderInput) -> Decimal:
    """
    Validates a create/update payload before any write. Returns the computed total.
    """
    errors = {}
    if not (data.customer_name or "").strip():
        errors["customer_name"] = "This field is required."
    if not (data.customer_phone or "").strip():
        errors["customer_phone"] = "This field is required."
    if data.order_date is None:
        errors["order_date"] = "This field is required."
    errors.update(_validate_items(data.items))
    if errors:
        raise ValidationError(errors)

    return data.total


def _decode(ledger_str: str, *, order_ref: str) -> ledger.LedgerSummary:
    summary = ledger.decode(ledger_str)
    if summary.unparsed:
        logger.warning(
            "ledger has unparsed entries order=%s unparsed=%s ledger=%r",
            order_ref,
            summary.unparsed,
            ledger_str,
        )
    return summary


def _initial_description(ledger_str: str) -> str:
    if not ledger_str:
        return "Order created."
    return f"Order created. Down payment received: {ledger_str}."


def _next_number(tenant_id: UUID) -> str:
    for _ in range(NUMBER_ATTEMPTS):
        candidate = str(random.randint(NUMBER_MIN, NUMBER_MAX))
        if not Order.objects.filter(tenant_id=tenant_id, number=candidate).exists():
            return candidate
    raise ConflictError("Could not allocate an order number. Try again.")


def _replace_items(order: Order, items: list) -> None:
    order.items.all().delete()
    OrderItem.objects.bulk_create(
        [
            OrderItem(
                tenant_id=order.tenant_id,
                order=order,
                position=pos,
                name=item.name.strip(),
                size=(item.size or "").strip(),
                quantity=int(item.quantity),
                unit_price=ledger.to_cents(item.unit_price),
            )
            for pos, item in enumerate(items)
        ]
    )


class OrderService:
    """
    Write-model operations for orders and quotes.
    - every call is scoped to the caller's tenant
    - validation happens before the first write; each call is one transaction
    - payment_method (ledger) is the record of payments; down_payment is re-derived from it
    """

    @staticmethod
    def _create(*, tenant_id: UUID, data: OrderInput, as_quote: bool) -> Order:
        total = _validate_intake(data)

        try:
            down_payment = ledger.to_cents(data.down_payment or ZERO)
        except ValueError:
            raise ValidationError({"down_payment": "A valid number is required."})
        if down_payment < 0:
            raise ValidationError({"down_payment": "Down payment cannot be negative."})
        if down_payment > total:
            raise ValidationError({"down_payment": "Down payment cannot exceed the order total."})

        ledger_str = ""
        if down_payment > 0:
            try:
                ledger_str = ledger.append("", data.payment_method, down_payment, currency_symbol())
            except ValueError as exc:
                raise ValidationError({"payment_method": str(exc)})

        if as_quote:
            current_status = OrderStatus.QUOTE
            timeline = []
        else:
            current_status = OrderStatus.ORDER_PLACED
            timeline = seed_production_timeline(_initial_description(ledger_str))

        order = Order.objects.create(
            tenant_id=tenant_id,
            number=_next_number(tenant_id),
            customer_name=data.customer_name.strip(),
            customer_phone=data.customer_phone.strip(),
            shipping_address=(data.shipping_address or "").strip(),
            total=total,
            down_payment=down_payment,
            payment_method=ledger_str,
            current_status=current_status,
            timeline=timeline,
            order_date=data.order_date,
            estimated_delivery=data.estimated_delivery,
            quote_validity=data.quote_validity,
            pressing_date=data.pressing_date,
            printing_date=data.printing_date,
            seamstress=data.seamstress or "",
            notes=data.notes or "",
            photos=list(data.photos or []),
        )
        _replace_items(order, data.items)

        logger.info(
            "%s created tenant=%s number=%s total=%s paid=%s",
            "quote" if as_quote else "order",
            tenant_id,
            order.number,
            total,
            down_payment,
        )
        return order

    @staticmethod
    @storage_errors
    @transaction.atomic
    def create_order(*, tenant_id: UUID, data: OrderInput) -> Order:
        return OrderService._create(tenant_id=tenant_id, data=data, as_quote=False)

    @staticmethod
    @storage_errors
    @transaction.atomic
    def create_quote(*, tenant_id: UUID, data: OrderInput) -> Order:
        return OrderService._create(tenant_id=tenant_id, data=data, as_quote=True)

    @staticmethod
    @storage_errors
    @transaction.atomic
    def update_order(*, tenant_id: UUID, number: str, data: OrderInput) -> Order:
        """
        Full replace of customer, items, dates, photos and production metadata.
        The timeline and the payment ledger are only changed by their own operations.
        """
        total = _validate_intake(data)
        order = get_order(tenant_id=tenant_id, number=number, for_update=True)

        if order.down_payment > total:
            raise ValidationError({"items": "The order total cannot be lower than the amount already paid."})

        order.customer_name = data.customer_name.strip()
        order.customer_phone = data.customer_phone.strip()
        order.shipping_address = (data.shipping_address or "").strip()
        order.total = total
        order.order_date = data.order_date
        order.estimated_delivery = data.estimated_delivery
        order.quote_validity = data.quote_validity
        order.pressing_date = data.pressing_date
        order.printing_date = data.printing_date
        order.seamstress = data.seamstress or ""
        order.notes = data.notes or ""
        order.photos = list(data.photos or [])
        order.save()
        _replace_items(order, data.items)

        logger.info("order updated tenant=%s number=%s total=%s", tenant_id, order.number, total)
        return order

    @staticmethod
    def duplicate_order(order: Order) -> OrderInput:
        """
        Unsaved draft copying customer and items. Nothing is persisted and
        the source is not touched; the caller creates the copy explicitly.
        """
        return OrderInput(
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            shipping_address=order.shipping_address,
            order_date=None,
            items=[
                ItemInput(name=i.name, size=i.size, quantity=i.quantity, unit_price=i.unit_price)
                for i in order.items.all()
            ],
            down_payment=ZERO,
            payment_method="",
            quote_validity=order.quote_validity if order.is_quote else None,
            seamstress=order.seamstress,
            notes=order.notes,
            photos=list(order.photos or []),
        )

    @staticmethod
    @storage_errors
    @transaction.atomic
    def record_payment(*, tenant_id: UUID, number: str, amount, method_label: str) -> Order:
        try:
            amount = ledger.to_cents(amount)
        except ValueError:
            raise ValidationError({"amount": "A valid number is required."})
        if amount <= 0:
            raise ValidationError({"amount": "Payment amount must be greater than zero."})

        order = get_order(tenant_id=tenant_id, number=number, for_update=True)

        if amount > order.total - order.down_payment + ledger.CENT:
            raise InsufficientRemainingBalance()

        try:
            new_ledger = ledger.append(order.payment_method, method_label, amount, currency_symbol())
        except ValueError as exc:
            raise ValidationError({"method": str(exc)})

        summary = _decode(new_ledger, order_ref=order.number)
        if summary.total > order.total:
            raise InsufficientRemainingBalance()

        order.payment_method = new_ledger
        order.down_payment = summary.total
        order.save(update_fields=["payment_method", "down_payment", "updated_at"])

        logger.info(
            "payment recorded tenant=%s number=%s amount=%s paid=%s total=%s",
            tenant_id,
            order.number,
            amount,
            order.down_payment,
            order.total,
        )
        return order

    @staticmethod
    @storage_errors
    @transaction.atomic
    def remove_payment(*, tenant_id: UUID, number: str, index: int) -> Order:
        order = get_order(tenant_id=tenant_id, number=number, for_update=True)

        try:
            new_ledger = ledger.remove_entry(order.payment_method, index)
        except ledger.IndexOutOfBounds as exc:
            raise PaymentIndexOutOfBounds(str(exc))

        summary = _decode(new_ledger, order_ref=order.number)
        order.payment_method = new_ledger
        order.down_payment = summary.total
        order.save(update_fields=["payment_method", "down_payment", "updated_at"])

        logger.info(
            "payment removed tenant=%s number=%s index=%s paid=%s",
            tenant_id,
            order.number,
            index,
            order.down_payment,
        )
        return order

    @staticmethod
    @storage_errors
    @transaction.atomic
    def convert_quote_to_order(*, tenant_id: UUID, number: str) -> Order:
        order = get_order(tenant_id=tenant_id, number=number, for_update=True)
        if not order.is_quote:
            raise NotAQuote()

        order.current_status = OrderStatus.ORDER_PLACED
        order.timeline = seed_production_timeline(_initial_description(order.payment_method))
        order.save(update_fields=["current_status", "timeline", "updated_at"])

        logger.info("quote converted tenant=%s number=%s", tenant_id, order.number)
        return order

    @staticmethod
    @storage_errors
    @transaction.atomic
    def change_status(
        *,
        tenant_id: UUID,
        number: str,
        new_status: str,
        location: Optional[str] = None,
    ) -> Order:
        if status_weight(new_status) == 0:
            raise ValidationError({"status": f"Invalid status {new_status!r} for an order."})

        order = get_order(tenant_id=tenant_id, number=number, for_update=True)
        if order.is_quote:
            raise QuoteStatusLocked()

        order.timeline = apply_status_change(order.timeline, new_status, location=(location or "").strip() or None)
        order.current_status = new_status
        order.save(update_fields=["timeline", "current_status", "updated_at"])

        logger.info("order status changed tenant=%s number=%s status=%s", tenant_id, order.number, new_status)
        return order

    @staticmethod
    @storage_errors
    @transaction.atomic
    def delete_order(*, tenant_id: UUID, number: str) -> None:
        order = get_order(tenant_id=tenant_id, number=number, for_update=True)
        order.delete()
        logger.info("order deleted tenant=%s number=%s", tenant_id, number)
