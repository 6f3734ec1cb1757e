# bo_core/audit/models.py
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone


class AuditAction(models.TextChoices):
    CREATE = "CREATE", "Create"
    UPDATE = "UPDATE", "Update"
    DELETE = "DELETE", "Delete"
    LOGIN = "LOGIN", "Login"
    LOGOUT = "LOGOUT", "Logout"


class AuditResource(models.TextChoices):
    CATEGORY = "category", "Category"
    ITEM = "item", "Item"
    ORDER = "order", "Order"
    USER = "user", "User"
    ROLE = "role", "Role"
    AUTH = "auth", "Auth"


class AuditEntry(models.Model):
    """
    Immutable audit record.

    No foreign keys: entries outlive the rows (and actors) they describe and
    are looked up by (resource, resource_id). Only retention cleanup deletes.
    """
    actor_id = models.CharField(max_length=64, db_index=True)
    action = models.CharField(max_length=16, choices=AuditAction.choices)
    resource = models.CharField(max_length=32, choices=AuditResource.choices)
    resource_id = models.CharField(max_length=64)

    # [{"field": ..., "from": ..., "to": ...}, ...] in allowlist order
    changes = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    metadata = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)

    occurred_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = "audit_audit_entry"
        ordering = ["-occurred_at", "-id"]
        indexes = [
            models.Index(fields=["resource", "resource_id"]),
            models.Index(fields=["resource", "occurred_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.action} {self.resource}/{self.resource_id} by {self.actor_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Audit entries are append-only.")
        super().save(*args, **kwargs)
