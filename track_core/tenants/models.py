# track_core/tenants/models.py
import uuid
from django.db import models


class SubscriptionStatus(models.TextChoices):
    TRIAL = "trial", "Trial"
    ACTIVE = "active", "Active"
    PENDING_PAYMENT = "pending_payment", "Pending payment"
    INACTIVE = "inactive", "Inactive"


class Tenant(models.Model):
    """
    A company account. Root of all scoping in the system and the
    subscription record read by the subscription gate.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    code = models.SlugField(max_length=64, unique=True)  # public tracking links use it
    plan = models.CharField(max_length=64, blank=True)

    status = models.CharField(
        max_length=20,
        choices=SubscriptionStatus.choices,
        default=SubscriptionStatus.TRIAL,
        db_index=True,
    )
    trial_ends_at = models.DateTimeField(null=True, blank=True)
    next_payment_due = models.DateTimeField(null=True, blank=True)

    # business details printed on order sheets (CNPJ, city, ...)
    metadata = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "tenants_tenant"
        indexes = [
            models.Index(fields=["status"]),
            models.Index(fields=["created_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"
