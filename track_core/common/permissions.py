# track_core/common/permissions.py

from __future__ import annotations

from rest_framework.permissions import BasePermission, SAFE_METHODS

from track_core.common.scope import resolve_scope

# Employee access levels (Employee.access_level values)
ACCESS_ADMIN = "admin"
ACCESS_USER = "user"
ACCESS_SAAS_ADMIN = "saas_admin"

STAFF = {ACCESS_ADMIN, ACCESS_USER}


class BaseAccessPermission(BasePermission):
    """
    Base permission class for access-level based control.

    Key behavior:
    - Requires an authenticated user with an active employee scope.
    - Tenant ADMIN bypass on tenant-scoped endpoints.
    - Uses allowed_levels_per_action for strict RBAC.
    - If action is unknown and request is SAFE, fall back to list/retrieve
      instead of denying.
    """
    message = "You do not have permission to perform this action."

    # Endpoints that operate inside one company
    tenant_required = True

    # Override in subclasses: dict of action -> set of allowed access levels
    allowed_levels_per_action = {
        "list": STAFF,
        "retrieve": STAFF,
        "create": {ACCESS_ADMIN},
        "update": {ACCESS_ADMIN},
        "partial_update": {ACCESS_ADMIN},
        "destroy": {ACCESS_ADMIN},
    }

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs or "id" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        scope = resolve_scope(request)
        if scope is None:
            return False
        if self.tenant_required and scope.tenant_id is None:
            return False

        if self.tenant_required and scope.access_level == ACCESS_ADMIN:
            return True

        action = self._infer_action(request, view)
        allowed = self.allowed_levels_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            is_detail = "pk" in kwargs or "id" in kwargs
            read_action = "retrieve" if is_detail else "list"
            allowed = self.allowed_levels_per_action.get(read_action)

        if allowed is not None:
            return scope.access_level in allowed

        # Unknown action => deny by default
        return False

    def has_object_permission(self, request, view, obj) -> bool:
        return self.has_permission(request, view)


class OrderPermission(BaseAccessPermission):
    """Orders and quotes. Removing payments and deleting orders is admin-only."""
    allowed_levels_per_action = {
        "list": STAFF,
        "retrieve": STAFF,
        "create": STAFF,
        "create_quote": STAFF,
        "update": STAFF,
        "duplicate": STAFF,
        "record_payment": STAFF,
        "convert": STAFF,
        "change_status": STAFF,
        "size_summary": STAFF,
        "remove_payment": {ACCESS_ADMIN},
        "destroy": {ACCESS_ADMIN},
    }


class EmployeePermission(BaseAccessPermission):
    """Employees of the caller's company; managed by its admins only."""
    allowed_levels_per_action = {
        "list": STAFF,
        "retrieve": STAFF,
        "create": {ACCESS_ADMIN},
        "destroy": {ACCESS_ADMIN},
    }


class TenantPermission(BaseAccessPermission):
    """Platform-level company management."""
    tenant_required = False
    allowed_levels_per_action = {
        "list": {ACCESS_SAAS_ADMIN},
        "retrieve": {ACCESS_SAAS_ADMIN},
        "create": {ACCESS_SAAS_ADMIN},
        "set_status": {ACCESS_SAAS_ADMIN},
    }


class SubscriptionWriteGate(BasePermission):
    """
    Blocks every unsafe request of a company whose subscription does not permit
    writes (pending_payment / inactive). Reads stay available.
    """

    def has_permission(self, request, view) -> bool:
        if request.method in SAFE_METHODS:
            return True

        scope = resolve_scope(request)
        if scope is None or scope.tenant_id is None:
            # Scope problems are reported by the access permission.
            return True

        from track_core.tenants.selectors import get_tenant_or_none
        from track_core.tenants.subscription import ensure_writable

        tenant = get_tenant_or_none(tenant_id=scope.tenant_id)
        if tenant is None:
            return False

        ensure_writable(tenant)
        return True
