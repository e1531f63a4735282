# track_core/tenants/services.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from track_core.common.api.exceptions import storage_errors
from track_core.iam.models import AccessLevel, Employee
from track_core.iam.services import EmployeeService
from track_core.tenants.models import SubscriptionStatus, Tenant

logger = logging.getLogger(__name__)


def trial_days() -> int:
    return int(getattr(settings, "SUBSCRIPTION_TRIAL_DAYS", 7))


class TenantService:
    """
    All Tenant mutations live here (write-model boundary).
    Subscription fields are maintained by the platform, never by the company itself.
    """

    @staticmethod
    @storage_errors
    @transaction.atomic
    def register(
        *,
        name: str,
        code: str,
        admin_name: str,
        login: str,
        password: str,
        contact: str = "",
        plan: str = "",
        metadata: Optional[dict] = None,
    ) -> tuple[Tenant, Employee]:
        """
        Onboards a company: the tenant starts in trial and gets its first admin employee.
        """
        code = (code or "").strip()
        name = (name or "").strip()

        if not code:
            raise ValidationError({"code": "This field is required."})
        if not name:
            raise ValidationError({"name": "This field is required."})
        if Tenant.objects.filter(code=code).exists():
            raise ValidationError({"code": "A company with this code already exists."})

        tenant = Tenant.objects.create(
            name=name,
            code=code,
            plan=(plan or "").strip(),
            status=SubscriptionStatus.TRIAL,
            trial_ends_at=timezone.now() + timedelta(days=trial_days()),
            metadata=metadata or {},
        )
        admin = EmployeeService.create(
            tenant_id=tenant.id,
            name=admin_name,
            login=login,
            password=password,
            contact=contact,
            role="Administrator",
            access_level=AccessLevel.ADMIN,
            admitted_date=timezone.localdate(),
        )
        logger.info("tenant registered tenant=%s code=%s trial_ends_at=%s", tenant.id, code, tenant.trial_ends_at)
        return tenant, admin

    @staticmethod
    @storage_errors
    @transaction.atomic
    def set_status(
        *,
        tenant_id: UUID,
        status: str,
        next_payment_due: Optional[datetime] = None,
    ) -> Tenant:
        if status not in SubscriptionStatus.values:
            raise ValidationError({"status": f"Invalid status. Allowed: {list(SubscriptionStatus.values)}"})

        t = Tenant.objects.select_for_update().get(id=tenant_id)

        fields = []
        if t.status != status:
            t.status = status
            fields.append("status")
        if next_payment_due is not None and t.next_payment_due != next_payment_due:
            t.next_payment_due = next_payment_due
            fields.append("next_payment_due")

        # idempotent no-op
        if not fields:
            return t

        t.save(update_fields=[*fields, "updated_at"])
        logger.info("tenant subscription changed tenant=%s status=%s due=%s", t.id, t.status, t.next_payment_due)
        return t
