# track_core/orders/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import Q, QuerySet

from track_core.orders.exceptions import OrderNotFound
from track_core.orders.models import Order, OrderStatus
from track_core.tenants.selectors import get_tenant_by_code_or_none


def order_qs(*, tenant_id: UUID) -> QuerySet[Order]:
    return Order.objects.filter(tenant_id=tenant_id).prefetch_related("items")


def get_order(*, tenant_id: UUID, number: str, for_update: bool = False) -> Order:
    """
    Order by its short number inside one company. Orders of other companies
    are reported exactly like missing ones.
    """
    qs = Order.objects.filter(tenant_id=tenant_id, number=str(number))
    if for_update:
        qs = qs.select_for_update()
    order = qs.first()
    if order is None:
        raise OrderNotFound()
    return order


def search_orders(qs: QuerySet[Order], term: str) -> QuerySet[Order]:
    term = (term or "").strip()
    if not term:
        return qs
    return qs.filter(
        Q(number__icontains=term)
        | Q(customer_name__icontains=term)
        | Q(customer_phone__icontains=term)
    )


def get_public_order(*, tenant_code: str, number: str) -> Order:
    """
    Customer tracking lookup: company code + order number.
    Quotes are not exposed on the tracking page.
    """
    tenant = get_tenant_by_code_or_none(code=tenant_code)
    if tenant is None:
        raise OrderNotFound()

    order = order_qs(tenant_id=tenant.id).filter(number=str(number)).exclude(current_status=OrderStatus.QUOTE).first()
    if order is None:
        raise OrderNotFound()
    return order
