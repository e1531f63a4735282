# track_core/orders/api/serializers.py
from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from track_core.orders import ledger
from track_core.orders.models import Order, OrderItem
from track_core.orders.services import ItemInput, OrderInput
from track_core.orders.timeline import STATUS_WEIGHTS


class OrderItemSerializer(serializers.ModelSerializer):
    line_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ["name", "size", "quantity", "unit_price", "line_total"]
        read_only_fields = fields


class TimelineEventSerializer(serializers.Serializer):
    status = serializers.CharField()
    timestamp = serializers.CharField()
    description = serializers.CharField()
    location = serializers.CharField(required=False)
    completed = serializers.BooleanField()


class PaymentEntrySerializer(serializers.Serializer):
    index = serializers.IntegerField()
    method = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)


def _payment_entries(order: Order) -> list[dict]:
    return [
        {"index": idx, "method": entry.label, "amount": entry.amount}
        for idx, entry in enumerate(ledger.entries(order.payment_method))
    ]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    timeline = TimelineEventSerializer(many=True, read_only=True)
    remaining = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    payments = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "number",
            "customer_name",
            "customer_phone",
            "shipping_address",
            "items",
            "total",
            "down_payment",
            "remaining",
            "payment_method",
            "payments",
            "current_status",
            "timeline",
            "order_date",
            "estimated_delivery",
            "quote_validity",
            "pressing_date",
            "printing_date",
            "seamstress",
            "notes",
            "photos",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_payments(self, obj) -> list[dict]:
        return PaymentEntrySerializer(_payment_entries(obj), many=True).data


class PublicOrderSerializer(serializers.ModelSerializer):
    """
    What a customer sees on the tracking page.
    """
    items = OrderItemSerializer(many=True, read_only=True)
    timeline = TimelineEventSerializer(many=True, read_only=True)
    remaining = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Order
        fields = [
            "number",
            "customer_name",
            "items",
            "total",
            "down_payment",
            "remaining",
            "payment_method",
            "current_status",
            "timeline",
            "order_date",
            "estimated_delivery",
        ]
        read_only_fields = fields


class ItemWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    size = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))


class OrderWriteSerializer(serializers.Serializer):
    """
    Intake payload for create / update, also used to render duplicated drafts.
    """
    customer_name = serializers.CharField(max_length=255)
    customer_phone = serializers.CharField(max_length=64)
    shipping_address = serializers.CharField(required=False, allow_blank=True, default="")
    order_date = serializers.DateField(allow_null=True)
    items = ItemWriteSerializer(many=True)

    down_payment = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0"),
        required=False,
        default=Decimal("0.00"),
    )
    payment_method = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")

    estimated_delivery = serializers.DateField(required=False, allow_null=True, default=None)
    quote_validity = serializers.DateField(required=False, allow_null=True, default=None)
    pressing_date = serializers.DateField(required=False, allow_null=True, default=None)
    printing_date = serializers.DateField(required=False, allow_null=True, default=None)
    seamstress = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    photos = serializers.ListField(child=serializers.URLField(), required=False, default=list)

    def to_input(self) -> OrderInput:
        data = dict(self.validated_data)
        items = [ItemInput(**item) for item in data.pop("items")]
        return OrderInput(items=items, **data)


class PaymentCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    method = serializers.CharField(max_length=64)


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[(s.value, s.label) for s in STATUS_WEIGHTS])
    location = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class SizeSummarySerializer(serializers.Serializer):
    sizes = serializers.DictField(child=serializers.IntegerField())
    total_items = serializers.IntegerField()
