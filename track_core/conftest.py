# track_core/conftest.py
from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from track_core.iam.models import AccessLevel
from track_core.iam.services import EmployeeService
from track_core.orders.services import ItemInput, OrderInput
from track_core.tenants.models import SubscriptionStatus, Tenant


def user_for(employee):
    return get_user_model().objects.get(id=employee.user_id)


def client_for(employee):
    c = APIClient()
    c.force_authenticate(user=user_for(employee))
    return c


def order_payload(**overrides):
    """
    JSON body accepted by POST /orders/ (one line of 2 x 25.00).
    """
    payload = {
        "customer_name": "Maria Souza",
        "customer_phone": "+55 11 99999-0000",
        "order_date": "2024-03-07",
        "items": [{"name": "Shirt", "size": "m", "quantity": 2, "unit_price": "25.00"}],
        "down_payment": "20.00",
        "payment_method": "Pix",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def tenant(db):
    return Tenant.objects.create(
        code="acme-prints",
        name="Acme Prints",
        plan="Basic",
        status=SubscriptionStatus.ACTIVE,
        next_payment_due=timezone.now() + timedelta(days=30),
    )


@pytest.fixture
def other_tenant(db):
    return Tenant.objects.create(
        code="other-shop",
        name="Other Shop",
        status=SubscriptionStatus.ACTIVE,
        next_payment_due=timezone.now() + timedelta(days=30),
    )


@pytest.fixture
def admin_employee(tenant):
    return EmployeeService.create(
        tenant_id=tenant.id,
        name="Ana Admin",
        login="ana",
        password="secret-pass-1",
        access_level=AccessLevel.ADMIN,
    )


@pytest.fixture
def staff_employee(tenant):
    return EmployeeService.create(
        tenant_id=tenant.id,
        name="Bruno Staff",
        login="bruno",
        password="secret-pass-2",
        access_level=AccessLevel.USER,
    )


@pytest.fixture
def other_admin_employee(other_tenant):
    return EmployeeService.create(
        tenant_id=other_tenant.id,
        name="Otto Other",
        login="otto",
        password="secret-pass-3",
        access_level=AccessLevel.ADMIN,
    )


@pytest.fixture
def saas_admin_employee(db):
    return EmployeeService.create(
        tenant_id=None,
        name="Platform Owner",
        login="platform",
        password="secret-pass-4",
        access_level=AccessLevel.SAAS_ADMIN,
    )


@pytest.fixture
def api_client(admin_employee):
    return client_for(admin_employee)


@pytest.fixture
def staff_client(staff_employee):
    return client_for(staff_employee)


@pytest.fixture
def other_client(other_admin_employee):
    return client_for(other_admin_employee)


@pytest.fixture
def saas_client(saas_admin_employee):
    return client_for(saas_admin_employee)


@pytest.fixture
def anon_client():
    return APIClient()


@pytest.fixture
def order_input():
    return OrderInput(
        customer_name="Maria Souza",
        customer_phone="+55 11 99999-0000",
        order_date=date(2024, 3, 7),
        items=[ItemInput(name="Shirt", size="m", quantity=2, unit_price=Decimal("25.00"))],
        down_payment=Decimal("20.00"),
        payment_method="Pix",
    )
