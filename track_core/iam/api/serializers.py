# track_core/iam/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from track_core.iam.models import AccessLevel, Employee


class LoginRequestSerializer(serializers.Serializer):
    login = serializers.CharField()
    password = serializers.CharField(style={"input_type": "password"})


class DetailResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class EmployeeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Employee
        fields = [
            "id",
            "tenant_id",
            "name",
            "role",
            "contact",
            "access_level",
            "admitted_date",
            "is_active",
            "created_at",
        ]
        read_only_fields = fields


class EmployeeCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    role = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    contact = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    admitted_date = serializers.DateField(required=False, allow_null=True)
    login = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True, style={"input_type": "password"})
    # company admins create company staff only
    access_level = serializers.ChoiceField(
        choices=[AccessLevel.ADMIN, AccessLevel.USER],
        required=False,
        default=AccessLevel.USER,
    )


class SubscriptionStateSerializer(serializers.Serializer):
    status = serializers.CharField()
    due_date = serializers.DateTimeField(allow_null=True)
    days_remaining = serializers.IntegerField(allow_null=True)
    warning = serializers.BooleanField()
    can_write = serializers.BooleanField()
    can_read = serializers.BooleanField()


class MeTenantSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    code = serializers.CharField()
    plan = serializers.CharField(allow_blank=True)


class MeResponseSerializer(serializers.Serializer):
    employee = EmployeeSerializer()
    tenant = MeTenantSerializer(allow_null=True)
    subscription = SubscriptionStateSerializer(allow_null=True)
