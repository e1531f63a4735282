# track_core/iam/selectors.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.db.models import QuerySet

from track_core.iam.models import Employee


def employees_for_tenant(*, tenant_id: UUID) -> QuerySet[Employee]:
    return Employee.objects.filter(tenant_id=tenant_id).order_by("name")


def get_employee(*, tenant_id: UUID, employee_id: UUID) -> Employee:
    return Employee.objects.get(tenant_id=tenant_id, id=employee_id)


def active_employee_for_user(*, user_id: int) -> Optional[Employee]:
    return Employee.objects.filter(user_id=user_id, is_active=True).first()
