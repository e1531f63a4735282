# track_core/iam/services.py
from __future__ import annotations

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework.exceptions import ValidationError

from track_core.common.api.exceptions import storage_errors
from track_core.common.scope import RequestScope
from track_core.iam.models import AccessLevel, Employee
from track_core.iam.selectors import active_employee_for_user

logger = logging.getLogger(__name__)


def scope_for_user(user) -> Optional[RequestScope]:
    """
    Derives the request scope from the employee linked to an auth user.
    None when the user has no active employee record.
    """
    user_id = getattr(user, "id", None)
    if user_id is None:
        return None

    emp = active_employee_for_user(user_id=user_id)
    if emp is None:
        return None

    return RequestScope(
        tenant_id=emp.tenant_id,
        employee_id=emp.id,
        access_level=emp.access_level,
    )


class EmployeeService:
    """
    Employee mutations. Each employee owns exactly one auth user (login + password).
    """

    @staticmethod
    @storage_errors
    @transaction.atomic
    def create(
        *,
        tenant_id: Optional[UUID],
        name: str,
        login: str,
        password: str,
        access_level: str = AccessLevel.USER,
        role: str = "",
        contact: str = "",
        admitted_date: Optional[date] = None,
    ) -> Employee:
        name = (name or "").strip()
        login = (login or "").strip()

        if not name:
            raise ValidationError({"name": "This field is required."})
        if not login:
            raise ValidationError({"login": "This field is required."})
        if not password:
            raise ValidationError({"password": "This field is required."})

        if access_level not in AccessLevel.values:
            raise ValidationError({"access_level": f"Invalid access level. Allowed: {list(AccessLevel.values)}"})

        is_platform = access_level == AccessLevel.SAAS_ADMIN
        if is_platform and tenant_id is not None:
            raise ValidationError({"access_level": "Platform admins cannot belong to a company."})
        if not is_platform and tenant_id is None:
            raise ValidationError({"tenant_id": "Company employees require a company."})

        User = get_user_model()
        if User.objects.filter(username=login).exists():
            raise ValidationError({"login": "This login is already taken."})

        user = User.objects.create_user(username=login, password=password, is_active=True)

        emp = Employee.objects.create(
            tenant_id=tenant_id,
            user_id=user.id,
            name=name,
            role=(role or "").strip(),
            contact=(contact or "").strip(),
            access_level=access_level,
            admitted_date=admitted_date,
        )
        logger.info("employee created tenant=%s employee=%s level=%s", tenant_id, emp.id, access_level)
        return emp

    @staticmethod
    @storage_errors
    @transaction.atomic
    def delete(*, tenant_id: UUID, employee_id: UUID) -> None:
        emp = Employee.objects.select_for_update().get(tenant_id=tenant_id, id=employee_id)

        get_user_model().objects.filter(id=emp.user_id).delete()
        emp.delete()
        logger.info("employee deleted tenant=%s employee=%s", tenant_id, employee_id)
