# track_core/common/scope.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from rest_framework.exceptions import NotAuthenticated, PermissionDenied

NO_EMPLOYEE_MSG = "This account is not linked to an active employee."
NO_TENANT_MSG = "This endpoint requires an account that belongs to a company."


@dataclass(frozen=True)
class RequestScope:
    """
    Request-scoped identity issued by authentication.
    tenant_id is None only for platform (saas_admin) accounts.
    """
    tenant_id: Optional[UUID]
    employee_id: UUID
    access_level: str


def resolve_scope(request) -> Optional[RequestScope]:
    """
    Returns the scope attached by authentication, resolving it from request.user
    when authentication was bypassed (e.g. force_authenticate in tests).
    Returns None for anonymous users or users without an active employee.
    """
    scope = getattr(request, "scope", None)
    if isinstance(scope, RequestScope):
        return scope

    user = getattr(request, "user", None)
    if not user or not getattr(user, "is_authenticated", False):
        return None

    from track_core.iam.services import scope_for_user

    scope = scope_for_user(user)
    if scope is not None:
        request.scope = scope
        request.tenant_id = scope.tenant_id
    return scope


def require_scope(request, *, tenant_required: bool = True) -> RequestScope:
    user = getattr(request, "user", None)
    if not user or not getattr(user, "is_authenticated", False):
        raise NotAuthenticated()

    scope = resolve_scope(request)
    if scope is None:
        raise PermissionDenied(NO_EMPLOYEE_MSG)
    if tenant_required and scope.tenant_id is None:
        raise PermissionDenied(NO_TENANT_MSG)
    return scope
