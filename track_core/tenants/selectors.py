# track_core/tenants/selectors.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.db.models import QuerySet

from track_core.tenants.models import Tenant


def tenant_qs() -> QuerySet[Tenant]:
    return Tenant.objects.all()


def get_tenant_or_none(*, tenant_id: UUID) -> Optional[Tenant]:
    return Tenant.objects.filter(id=tenant_id).first()


def get_tenant_by_code_or_none(*, code: str) -> Optional[Tenant]:
    return Tenant.objects.filter(code=code).first()
