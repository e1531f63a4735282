# track_core/iam/models.py
import uuid
from django.db import models

from track_core.common.models import TimeStampedModel


class AccessLevel(models.TextChoices):
    ADMIN = "admin", "Admin"
    USER = "user", "User"
    SAAS_ADMIN = "saas_admin", "Platform admin"


class Employee(TimeStampedModel):
    """
    Company staff member anchored to a Django auth user.
    The employee record is the session identity: it carries the tenant and
    the access level every request is authorized against.

    tenant_id is NULL only for platform (saas_admin) accounts.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant_id = models.UUIDField(null=True, blank=True, db_index=True)

    # auth_user.id (no FK, auth tables live outside the tenant graph)
    user_id = models.BigIntegerField(unique=True)

    name = models.CharField(max_length=255)
    role = models.CharField(max_length=128, blank=True)  # job title, e.g. "Seamstress"
    contact = models.CharField(max_length=64, blank=True)
    access_level = models.CharField(
        max_length=16,
        choices=AccessLevel.choices,
        default=AccessLevel.USER,
    )
    admitted_date = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "iam_employee"
        indexes = [
            models.Index(fields=["tenant_id", "is_active"]),
            models.Index(fields=["tenant_id", "name"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.access_level})"
