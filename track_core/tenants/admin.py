# track_core/tenants/admin.py
from django.contrib import admin

from track_core.tenants.models import Tenant


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "plan", "status", "trial_ends_at", "next_payment_due", "created_at")
    list_filter = ("status", "plan", "created_at")
    search_fields = ("name", "code")
    ordering = ("-created_at",)
    readonly_fields = ("id", "created_at", "updated_at")

    fieldsets = (
        (None, {"fields": ("id", "name", "code", "plan")}),
        ("Subscription", {"fields": ("status", "trial_ends_at", "next_payment_due")}),
        ("Metadata", {"fields": ("metadata",)}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )
