# track_core/iam/api/me.py

from __future__ import annotations

from dataclasses import asdict

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from track_core.common.scope import require_scope
from track_core.iam.api.serializers import (
    EmployeeSerializer,
    MeResponseSerializer,
    MeTenantSerializer,
    SubscriptionStateSerializer,
)
from track_core.iam.models import Employee
from track_core.tenants.selectors import get_tenant_or_none
from track_core.tenants.subscription import evaluate


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MeResponseSerializer}, tags=["IAM"])
    def get(self, request):
        """
        Session bootstrap: the signed-in employee, their company and the
        subscription state the UI uses for the due-date banner / block screen.
        """
        scope = require_scope(request, tenant_required=False)
        employee = Employee.objects.get(id=scope.employee_id)

        tenant = None
        subscription = None
        if scope.tenant_id is not None:
            t = get_tenant_or_none(tenant_id=scope.tenant_id)
            if t is not None:
                tenant = {"id": t.id, "name": t.name, "code": t.code, "plan": t.plan}
                subscription = SubscriptionStateSerializer(asdict(evaluate(t))).data

        return Response(
            {
                "employee": EmployeeSerializer(employee).data,
                "tenant": MeTenantSerializer(tenant).data if tenant else None,
                "subscription": subscription,
            },
            status=status.HTTP_200_OK,
        )
