# track_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from track_core.iam.models import Employee


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant_id", "role", "access_level", "is_active", "admitted_date", "created_at")
    list_filter = ("access_level", "is_active")
    search_fields = ("name", "role", "contact")
    ordering = ("-created_at",)
    readonly_fields = ("id", "created_at", "updated_at")
