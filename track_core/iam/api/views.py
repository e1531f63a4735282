# track_core/iam/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.response import Response

from track_core.common.api.pagination import paginate
from track_core.common.permissions import EmployeePermission, SubscriptionWriteGate
from track_core.common.scope import require_scope
from track_core.iam.api.serializers import EmployeeCreateSerializer, EmployeeSerializer
from track_core.iam.models import Employee
from track_core.iam.selectors import employees_for_tenant, get_employee
from track_core.iam.services import EmployeeService


@extend_schema_view(
    list=extend_schema(tags=["Employees"], responses={200: EmployeeSerializer(many=True)}),
    retrieve=extend_schema(tags=["Employees"], responses={200: EmployeeSerializer}),
    create=extend_schema(tags=["Employees"], request=EmployeeCreateSerializer, responses={201: EmployeeSerializer}),
    destroy=extend_schema(tags=["Employees"], responses={204: None}),
)
class EmployeeViewSet(viewsets.ViewSet):
    """
    Staff of the caller's company. Listing is open to staff; hiring and
    removal are reserved to company admins.
    """
    permission_classes = [EmployeePermission, SubscriptionWriteGate]
    lookup_value_regex = "[0-9a-fA-F-]{36}"

    serializer_class = EmployeeSerializer
    queryset = Employee.objects.none()

    def list(self, request):
        scope = require_scope(request)
        return paginate(request, employees_for_tenant(tenant_id=scope.tenant_id), EmployeeSerializer)

    def retrieve(self, request, pk=None):
        scope = require_scope(request)
        emp = get_employee(tenant_id=scope.tenant_id, employee_id=UUID(str(pk)))
        return Response(EmployeeSerializer(emp).data, status=status.HTTP_200_OK)

    def create(self, request):
        scope = require_scope(request)

        ser = EmployeeCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        emp = EmployeeService.create(tenant_id=scope.tenant_id, **ser.validated_data)
        return Response(EmployeeSerializer(emp).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        scope = require_scope(request)
        EmployeeService.delete(tenant_id=scope.tenant_id, employee_id=UUID(str(pk)))
        return Response(status=status.HTTP_204_NO_CONTENT)
