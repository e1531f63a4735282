# track_core/orders/models.py
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from track_core.common.models import TenantScopedModel


class OrderStatus(models.TextChoices):
    QUOTE = "QUOTE", "Quote"
    ORDER_PLACED = "ORDER_PLACED", "Order placed"
    IN_PRODUCTION = "IN_PRODUCTION", "In production"
    COMPLETED = "COMPLETED", "Completed"
    CANCELED = "CANCELED", "Canceled"


class Order(TenantScopedModel):
    """
    An order or a quote (same entity, discriminated by current_status).

    payment_method holds the serialized payment ledger; down_payment is the
    cached sum it decodes to. timeline holds the status events as plain JSON.
    """
    # short public identifier customers type on the tracking page
    number = models.CharField(max_length=16)

    customer_name = models.CharField(max_length=255)
    customer_phone = models.CharField(max_length=64)
    shipping_address = models.TextField(blank=True)

    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    down_payment = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    payment_method = models.TextField(blank=True)

    current_status = models.CharField(
        max_length=16,
        choices=OrderStatus.choices,
        default=OrderStatus.ORDER_PLACED,
        db_index=True,
    )
    timeline = models.JSONField(default=list, blank=True)

    order_date = models.DateField()
    estimated_delivery = models.DateField(null=True, blank=True)
    quote_validity = models.DateField(null=True, blank=True)

    # production sheet metadata, no lifecycle effect
    pressing_date = models.DateField(null=True, blank=True)
    printing_date = models.DateField(null=True, blank=True)
    seamstress = models.CharField(max_length=255, blank=True)

    notes = models.TextField(blank=True)
    photos = models.JSONField(default=list, blank=True)  # image URLs

    class Meta:
        db_table = "orders_order"
        constraints = [
            models.UniqueConstraint(fields=["tenant_id", "number"], name="uq_order_tenant_number"),
        ]
        indexes = [
            models.Index(fields=["tenant_id", "current_status"]),
            models.Index(fields=["tenant_id", "created_at"]),
        ]
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"#{self.number} {self.customer_name}"

    @property
    def is_quote(self) -> bool:
        return self.current_status == OrderStatus.QUOTE

    @property
    def remaining(self) -> Decimal:
        return self.total - self.down_payment


class OrderItem(TenantScopedModel):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    position = models.PositiveIntegerField(default=0)

    name = models.CharField(max_length=255)
    size = models.CharField(max_length=32, blank=True)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = "orders_order_item"
        ordering = ["position"]
        indexes = [
            models.Index(fields=["tenant_id", "order"]),
        ]

    def __str__(self) -> str:
        return f"{self.quantity}x {self.name} {self.size}".strip()

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity
