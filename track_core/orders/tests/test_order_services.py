# track_core/orders/tests/test_order_services.py
import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest
from django.db import DatabaseError
from rest_framework.exceptions import ValidationError

from track_core.common.api.exceptions import StorageError
from track_core.orders import ledger
from track_core.orders.exceptions import (
    InsufficientRemainingBalance,
    NotAQuote,
    OrderNotFound,
    PaymentIndexOutOfBounds,
    QuoteStatusLocked,
)
from track_core.orders.filters import OrderFilter
from track_core.orders.models import Order, OrderStatus
from track_core.orders.selectors import get_order, get_public_order, order_qs
from track_core.orders.services import ItemInput, OrderService

pytestmark = pytest.mark.django_db


def _assert_ledger_consistent(order):
    order.refresh_from_db()
    assert abs(ledger.decode(order.payment_method).total - order.down_payment) <= ledger.CENT
    assert order.down_payment <= order.total


def test_create_order_seeds_timeline_and_ledger(tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)

    assert order.total == Decimal("50.00")
    assert order.down_payment == Decimal("20.00")
    assert order.payment_method == "Pix (R$ 20,00)"
    assert order.current_status == OrderStatus.ORDER_PLACED
    assert len(order.number) == 5 and order.number.isdigit()

    first = order.timeline[0]
    assert first["status"] == "ORDER_PLACED"
    assert first["completed"] is True
    assert "Pix (R$ 20,00)" in first["description"]
    assert [e["completed"] for e in order.timeline[1:]] == [False, False]

    assert [(i.name, i.quantity) for i in order.items.all()] == [("Shirt", 2)]


def test_create_order_without_down_payment_has_empty_ledger(tenant, order_input):
    order = OrderService.create_order(
        tenant_id=tenant.id,
        data=replace(order_input, down_payment=Decimal("0"), payment_method=""),
    )
    assert order.payment_method == ""
    assert order.down_payment == Decimal("0.00")
    assert order.timeline[0]["description"] == "Order created."


def test_create_quote_has_no_timeline(tenant, order_input):
    quote = OrderService.create_quote(tenant_id=tenant.id, data=order_input)

    assert quote.current_status == OrderStatus.QUOTE
    assert quote.timeline == []
    assert quote.payment_method == "Pix (R$ 20,00)"


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"customer_name": "  "}, "customer_name"),
        ({"customer_phone": ""}, "customer_phone"),
        ({"order_date": None}, "order_date"),
        ({"items": []}, "items"),
        ({"down_payment": Decimal("50.01")}, "down_payment"),
        ({"payment_method": ""}, "payment_method"),
    ],
)
def test_create_order_validation_rejects_before_any_write(tenant, order_input, overrides, field):
    with pytest.raises(ValidationError) as exc:
        OrderService.create_order(tenant_id=tenant.id, data=replace(order_input, **overrides))

    assert field in exc.value.detail
    assert Order.objects.count() == 0


def test_create_order_rejects_zero_quantity(tenant, order_input):
    bad = replace(order_input, items=[ItemInput(name="Shirt", quantity=0, unit_price=Decimal("10"))])
    with pytest.raises(ValidationError):
        OrderService.create_order(tenant_id=tenant.id, data=bad)


def test_total_matches_stored_lines_for_sub_cent_prices(tenant, order_input):
    data = replace(
        order_input,
        items=[ItemInput(name="Sticker", quantity=3, unit_price=Decimal("0.333"))],
        down_payment=Decimal("0"),
    )
    order = OrderService.create_order(tenant_id=tenant.id, data=data)

    lines = list(order.items.all())
    assert lines[0].unit_price == Decimal("0.33")
    assert order.total == Decimal("0.99")
    assert order.total == sum((i.quantity * i.unit_price for i in lines), Decimal("0"))


@pytest.mark.parametrize("price", [Decimal("NaN"), Decimal("Infinity"), Decimal("1e30")])
def test_create_order_rejects_non_finite_unit_price(tenant, order_input, price):
    bad = replace(order_input, items=[ItemInput(name="Shirt", quantity=1, unit_price=price)])
    with pytest.raises(ValidationError) as exc:
        OrderService.create_order(tenant_id=tenant.id, data=bad)

    assert "items" in exc.value.detail
    assert Order.objects.count() == 0


@pytest.mark.parametrize("down_payment", [Decimal("NaN"), Decimal("Infinity"), Decimal("1e30")])
def test_create_order_rejects_non_finite_down_payment(tenant, order_input, down_payment):
    with pytest.raises(ValidationError) as exc:
        OrderService.create_order(tenant_id=tenant.id, data=replace(order_input, down_payment=down_payment))

    assert "down_payment" in exc.value.detail
    assert Order.objects.count() == 0


def test_payment_scenario_record_then_remove(tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)

    order = OrderService.record_payment(
        tenant_id=tenant.id, number=order.number, amount=Decimal("30.00"), method_label="Cash"
    )
    assert order.down_payment == Decimal("50.00")
    assert order.payment_method == "Pix (R$ 20,00) + Cash (R$ 30,00)"
    _assert_ledger_consistent(order)

    order = OrderService.remove_payment(tenant_id=tenant.id, number=order.number, index=0)
    assert order.payment_method == "Cash (R$ 30,00)"
    assert order.down_payment == Decimal("30.00")
    _assert_ledger_consistent(order)


def test_record_payment_over_remaining_leaves_order_unchanged(tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)

    with pytest.raises(InsufficientRemainingBalance):
        OrderService.record_payment(
            tenant_id=tenant.id, number=order.number, amount=Decimal("30.02"), method_label="Cash"
        )

    order.refresh_from_db()
    assert order.down_payment == Decimal("20.00")
    assert order.payment_method == "Pix (R$ 20,00)"


def test_record_payment_within_tolerance_still_never_exceeds_total(tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)

    # passes the one-cent tolerance but would push the paid sum past the total
    with pytest.raises(InsufficientRemainingBalance):
        OrderService.record_payment(
            tenant_id=tenant.id, number=order.number, amount=Decimal("30.01"), method_label="Cash"
        )
    _assert_ledger_consistent(order)


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
def test_record_payment_requires_positive_amount(tenant, order_input, amount):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)
    with pytest.raises(ValidationError):
        OrderService.record_payment(tenant_id=tenant.id, number=order.number, amount=amount, method_label="Cash")


@pytest.mark.parametrize("amount", ["NaN", "Infinity", "1e30", "ten"])
def test_record_payment_rejects_unusable_amount(tenant, order_input, amount):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)
    with pytest.raises(ValidationError) as exc:
        OrderService.record_payment(tenant_id=tenant.id, number=order.number, amount=amount, method_label="Cash")

    assert "amount" in exc.value.detail
    order.refresh_from_db()
    assert order.payment_method == "Pix (R$ 20,00)"


def test_record_payment_rejects_separator_in_label(tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)
    with pytest.raises(ValidationError):
        OrderService.record_payment(
            tenant_id=tenant.id, number=order.number, amount=Decimal("5"), method_label="Pix + Cash"
        )


def test_payment_sequence_keeps_ledger_and_cache_in_sync(tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)
    number = order.number

    for amount, label in [("0.10", "Pix"), ("0.20", "Cash"), ("9.99", "Card"), ("1.01", "Pix")]:
        OrderService.record_payment(tenant_id=tenant.id, number=number, amount=Decimal(amount), method_label=label)
        _assert_ledger_consistent(order)

    for index in (3, 0, 1):
        OrderService.remove_payment(tenant_id=tenant.id, number=number, index=index)
        _assert_ledger_consistent(order)


def test_remove_payment_bad_index(tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)

    with pytest.raises(PaymentIndexOutOfBounds):
        OrderService.remove_payment(tenant_id=tenant.id, number=order.number, index=5)

    order.refresh_from_db()
    assert order.payment_method == "Pix (R$ 20,00)"


def test_unparsed_ledger_segment_is_logged(tenant, order_input, caplog):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)
    Order.objects.filter(id=order.id).update(payment_method="Pix (R$ 20,00) + Voucher")

    with caplog.at_level(logging.WARNING, logger="track_core.orders.services"):
        order = OrderService.record_payment(
            tenant_id=tenant.id, number=order.number, amount=Decimal("5"), method_label="Cash"
        )

    assert order.down_payment == Decimal("25.00")
    assert order.payment_method == "Pix (R$ 20,00) + Voucher + Cash (R$ 5,00)"
    assert "unparsed" in caplog.text


def test_convert_quote_to_order(tenant, order_input):
    quote = OrderService.create_quote(tenant_id=tenant.id, data=order_input)

    order = OrderService.convert_quote_to_order(tenant_id=tenant.id, number=quote.number)

    assert order.current_status == OrderStatus.ORDER_PLACED
    assert [e["status"] for e in order.timeline] == ["ORDER_PLACED", "IN_PRODUCTION", "COMPLETED"]
    assert order.timeline[0]["completed"] is True


def test_convert_non_quote_fails_and_leaves_order_unchanged(tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)
    order.refresh_from_db()
    before = {f.name: getattr(order, f.name) for f in Order._meta.concrete_fields}

    with pytest.raises(NotAQuote):
        OrderService.convert_quote_to_order(tenant_id=tenant.id, number=order.number)

    order.refresh_from_db()
    after = {f.name: getattr(order, f.name) for f in Order._meta.concrete_fields}
    assert after == before


def test_change_status_backward_keeps_further_stage_completed(tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)

    OrderService.change_status(tenant_id=tenant.id, number=order.number, new_status=OrderStatus.IN_PRODUCTION)
    order = OrderService.change_status(tenant_id=tenant.id, number=order.number, new_status=OrderStatus.ORDER_PLACED)

    assert order.current_status == OrderStatus.ORDER_PLACED
    events = {e["status"]: e for e in order.timeline}
    assert events["IN_PRODUCTION"]["completed"] is True


def test_change_status_on_quote_is_locked(tenant, order_input):
    quote = OrderService.create_quote(tenant_id=tenant.id, data=order_input)
    with pytest.raises(QuoteStatusLocked):
        OrderService.change_status(tenant_id=tenant.id, number=quote.number, new_status=OrderStatus.IN_PRODUCTION)


def test_change_status_to_quote_is_invalid(tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)
    with pytest.raises(ValidationError):
        OrderService.change_status(tenant_id=tenant.id, number=order.number, new_status=OrderStatus.QUOTE)


def test_cancel_appends_canceled_event(tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)

    order = OrderService.change_status(
        tenant_id=tenant.id, number=order.number, new_status=OrderStatus.CANCELED, location="Customer request"
    )

    assert order.current_status == OrderStatus.CANCELED
    assert order.timeline[-1]["status"] == "CANCELED"
    assert order.timeline[-1]["location"] == "Customer request"


def test_update_order_replaces_fields_but_not_ledger_or_timeline(tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)
    timeline_before = order.timeline

    data = replace(
        order_input,
        customer_name="Maria S.",
        items=[
            ItemInput(name="Hoodie", size="G", quantity=1, unit_price=Decimal("80.00")),
            ItemInput(name="Cap", quantity=3, unit_price=Decimal("10.00")),
        ],
        down_payment=Decimal("0"),
        payment_method="ignored",
    )
    order = OrderService.update_order(tenant_id=tenant.id, number=order.number, data=data)

    order.refresh_from_db()
    assert order.customer_name == "Maria S."
    assert order.total == Decimal("110.00")
    assert order.down_payment == Decimal("20.00")
    assert order.payment_method == "Pix (R$ 20,00)"
    assert order.timeline == timeline_before
    assert [i.name for i in order.items.all()] == ["Hoodie", "Cap"]


def test_update_order_cannot_drop_total_below_paid(tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)
    cheap = replace(order_input, items=[ItemInput(name="Sticker", quantity=1, unit_price=Decimal("5.00"))])

    with pytest.raises(ValidationError):
        OrderService.update_order(tenant_id=tenant.id, number=order.number, data=cheap)

    order.refresh_from_db()
    assert order.total == Decimal("50.00")


def test_duplicate_order_is_unsaved_draft(tenant, order_input):
    quote = OrderService.create_quote(
        tenant_id=tenant.id, data=replace(order_input, quote_validity=date(2024, 4, 1), estimated_delivery=date(2024, 3, 20))
    )

    draft = OrderService.duplicate_order(quote)

    assert Order.objects.count() == 1
    assert draft.customer_name == quote.customer_name
    assert [(i.name, i.quantity, i.unit_price) for i in draft.items] == [("Shirt", 2, Decimal("25.00"))]
    assert draft.down_payment == Decimal("0")
    assert draft.payment_method == ""
    assert draft.order_date is None
    assert draft.estimated_delivery is None
    assert draft.quote_validity == date(2024, 4, 1)


def test_duplicate_of_order_drops_quote_validity(tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=replace(order_input, quote_validity=date(2024, 4, 1)))
    assert OrderService.duplicate_order(order).quote_validity is None


def test_cross_tenant_access_is_not_found(tenant, other_tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)

    with pytest.raises(OrderNotFound):
        get_order(tenant_id=other_tenant.id, number=order.number)
    with pytest.raises(OrderNotFound):
        OrderService.record_payment(
            tenant_id=other_tenant.id, number=order.number, amount=Decimal("1"), method_label="Pix"
        )
    with pytest.raises(OrderNotFound):
        OrderService.delete_order(tenant_id=other_tenant.id, number=order.number)

    assert Order.objects.filter(id=order.id).exists()


def test_delete_order(tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)
    OrderService.delete_order(tenant_id=tenant.id, number=order.number)
    assert not Order.objects.filter(tenant_id=tenant.id).exists()


def test_order_filter_by_status_and_search(tenant, order_input):
    a = OrderService.create_order(tenant_id=tenant.id, data=order_input)
    b = OrderService.create_quote(tenant_id=tenant.id, data=replace(order_input, customer_name="Joao Lima"))

    def numbers(params):
        fs = OrderFilter(params, queryset=order_qs(tenant_id=tenant.id))
        assert fs.is_valid(), fs.errors
        return {o.number for o in fs.qs}

    assert numbers({"status": OrderStatus.QUOTE}) == {b.number}
    assert numbers({"search": "joao"}) == {b.number}
    assert numbers({}) == {a.number, b.number}


def test_public_lookup_hides_quotes(tenant, order_input):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)
    quote = OrderService.create_quote(tenant_id=tenant.id, data=order_input)

    assert get_public_order(tenant_code=tenant.code, number=order.number).id == order.id
    with pytest.raises(OrderNotFound):
        get_public_order(tenant_code=tenant.code, number=quote.number)
    with pytest.raises(OrderNotFound):
        get_public_order(tenant_code="nope", number=order.number)


def test_database_failure_surfaces_as_storage_error(tenant, order_input, monkeypatch):
    order = OrderService.create_order(tenant_id=tenant.id, data=order_input)

    def broken_save(self, *args, **kwargs):
        raise DatabaseError("disk full")

    monkeypatch.setattr(Order, "save", broken_save)

    with pytest.raises(StorageError):
        OrderService.record_payment(
            tenant_id=tenant.id, number=order.number, amount=Decimal("5"), method_label="Cash"
        )

    monkeypatch.undo()
    order.refresh_from_db()
    assert order.payment_method == "Pix (R$ 20,00)"
    assert order.down_payment == Decimal("20.00")
