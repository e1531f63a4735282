# track_core/tenants/tests/test_tenants_api.py
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from track_core.iam.models import AccessLevel, Employee
from track_core.tenants.models import SubscriptionStatus, Tenant
from track_core.tenants.services import TenantService

pytestmark = pytest.mark.django_db

BASE = "/api/v1/tenants/"


def _register_payload(**overrides):
    payload = {
        "name": "Silk Screen Co",
        "code": "silk-screen",
        "plan": "Pro",
        "admin_name": "Carla",
        "contact": "+55 21 98888-0000",
        "login": "carla",
        "password": "carla-pass-123",
    }
    payload.update(overrides)
    return payload


def test_register_starts_trial_with_first_admin(saas_client, settings):
    settings.SUBSCRIPTION_TRIAL_DAYS = 7

    before = timezone.now()
    resp = saas_client.post(BASE, _register_payload(), format="json")

    assert resp.status_code == 201, resp.data
    assert resp.data["tenant"]["status"] == "trial"
    assert resp.data["admin"]["access_level"] == "admin"

    tenant = Tenant.objects.get(code="silk-screen")
    assert tenant.trial_ends_at >= before + timedelta(days=7)
    assert Employee.objects.get(tenant_id=tenant.id).access_level == AccessLevel.ADMIN


def test_register_rejects_duplicate_code(tenant):
    with pytest.raises(ValidationError):
        TenantService.register(
            name="Copy", code=tenant.code, admin_name="X", login="copy-admin", password="pw-123456"
        )


def test_register_rejects_taken_login(admin_employee):
    with pytest.raises(ValidationError):
        TenantService.register(name="New", code="new-shop", admin_name="X", login="ana", password="pw-123456")
    assert not Tenant.objects.filter(code="new-shop").exists()


def test_set_status_and_list(saas_client, tenant):
    due = (timezone.now() + timedelta(days=30)).replace(microsecond=0)

    resp = saas_client.post(
        f"{BASE}{tenant.id}/set-status/",
        {"status": "pending_payment", "next_payment_due": due.isoformat()},
        format="json",
    )
    assert resp.status_code == 200
    assert resp.data["status"] == "pending_payment"

    tenant.refresh_from_db()
    assert tenant.status == SubscriptionStatus.PENDING_PAYMENT
    assert tenant.next_payment_due == due

    resp = saas_client.get(BASE, {"status": "pending_payment"})
    assert [t["code"] for t in resp.data["results"]] == [tenant.code]


def test_set_status_rejects_unknown_status(saas_client, tenant):
    resp = saas_client.post(f"{BASE}{tenant.id}/set-status/", {"status": "suspended"}, format="json")
    assert resp.status_code == 400


def test_company_admin_cannot_manage_tenants(api_client, tenant):
    assert api_client.get(BASE).status_code == 403
    assert api_client.post(f"{BASE}{tenant.id}/set-status/", {"status": "active"}, format="json").status_code == 403


def test_saas_admin_has_no_company_orders(saas_client):
    assert saas_client.get("/api/v1/orders/").status_code == 403
