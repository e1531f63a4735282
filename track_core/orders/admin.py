# track_core/orders/admin.py
from __future__ import annotations

from django.contrib import admin

from track_core.orders.models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("position", "name", "size", "quantity", "unit_price")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "number",
        "tenant_id",
        "customer_name",
        "customer_phone",
        "current_status",
        "total",
        "down_payment",
        "order_date",
        "created_at",
    )
    list_filter = ("current_status",)
    search_fields = ("number", "customer_name", "customer_phone")
    ordering = ("-created_at",)
    # ledger and timeline change only through OrderService
    readonly_fields = ("id", "payment_method", "down_payment", "timeline", "created_at", "updated_at")
    inlines = [OrderItemInline]
