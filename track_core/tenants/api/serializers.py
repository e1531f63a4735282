# track_core/tenants/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from track_core.iam.api.serializers import EmployeeSerializer
from track_core.tenants.models import SubscriptionStatus, Tenant


class TenantSerializer(serializers.ModelSerializer):
    class Meta:
        model = Tenant
        fields = [
            "id",
            "name",
            "code",
            "plan",
            "status",
            "trial_ends_at",
            "next_payment_due",
            "metadata",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TenantRegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    code = serializers.SlugField(max_length=64)
    plan = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    metadata = serializers.JSONField(required=False, default=dict)

    # first admin employee
    admin_name = serializers.CharField(max_length=255)
    contact = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    login = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True, style={"input_type": "password"})


class TenantRegisterResponseSerializer(serializers.Serializer):
    tenant = TenantSerializer()
    admin = EmployeeSerializer()


class TenantStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=SubscriptionStatus.choices)
    next_payment_due = serializers.DateTimeField(required=False, allow_null=True)
