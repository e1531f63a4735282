# track_core/orders/filters.py
from __future__ import annotations

import django_filters

from track_core.orders.models import Order, OrderStatus
from track_core.orders.selectors import search_orders


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(field_name="current_status", choices=OrderStatus.choices)
    search = django_filters.CharFilter(method="filter_search")
    order_date_from = django_filters.DateFilter(field_name="order_date", lookup_expr="gte")
    order_date_to = django_filters.DateFilter(field_name="order_date", lookup_expr="lte")

    class Meta:
        model = Order
        fields = ["status", "search", "order_date_from", "order_date_to"]

    def filter_search(self, queryset, name, value):
        return search_orders(queryset, value)
