# track_core/tenants/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from track_core.common.api.pagination import paginate
from track_core.common.permissions import TenantPermission
from track_core.iam.api.serializers import EmployeeSerializer
from track_core.tenants.api.serializers import (
    TenantRegisterResponseSerializer,
    TenantRegisterSerializer,
    TenantSerializer,
    TenantStatusUpdateSerializer,
)
from track_core.tenants.models import Tenant
from track_core.tenants.selectors import tenant_qs
from track_core.tenants.services import TenantService


@extend_schema_view(
    list=extend_schema(tags=["Tenants"], operation_id="v1_tenants_list", responses={200: TenantSerializer(many=True)}),
    retrieve=extend_schema(tags=["Tenants"], operation_id="v1_tenants_retrieve", responses={200: TenantSerializer}),
    create=extend_schema(
        tags=["Tenants"],
        operation_id="v1_tenants_create",
        request=TenantRegisterSerializer,
        responses={201: TenantRegisterResponseSerializer},
    ),
    set_status=extend_schema(
        tags=["Tenants"],
        operation_id="v1_tenants_set_status",
        request=TenantStatusUpdateSerializer,
        responses={200: TenantSerializer},
    ),
)
class TenantViewSet(viewsets.ViewSet):
    """
    Platform-level company management (saas_admin only).
    Routing is centralized in track_core/api/urls.py.
    """

    permission_classes = [TenantPermission]
    lookup_value_regex = "[0-9a-fA-F-]{36}"

    serializer_class = TenantSerializer
    queryset = Tenant.objects.none()

    def list(self, request):
        qs = tenant_qs().order_by("-created_at")
        status_q = request.query_params.get("status")
        if status_q:
            qs = qs.filter(status=status_q)
        return paginate(request, qs, TenantSerializer)

    def retrieve(self, request, pk=None):
        obj = tenant_qs().get(id=UUID(str(pk)))
        return Response(TenantSerializer(obj).data, status=status.HTTP_200_OK)

    def create(self, request):
        ser = TenantRegisterSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        tenant, admin = TenantService.register(**ser.validated_data)
        return Response(
            {"tenant": TenantSerializer(tenant).data, "admin": EmployeeSerializer(admin).data},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"], url_path="set-status")
    def set_status(self, request, pk=None):
        ser = TenantStatusUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        t = TenantService.set_status(
            tenant_id=UUID(str(pk)),
            status=ser.validated_data["status"],
            next_payment_due=ser.validated_data.get("next_payment_due"),
        )
        return Response(TenantSerializer(t).data, status=status.HTTP_200_OK)
