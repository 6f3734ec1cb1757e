# bo_core/audit/admin.py
from django.contrib import admin

from bo_core.audit.models import AuditEntry


@admin.register(AuditEntry)
class AuditEntryAdmin(admin.ModelAdmin):
    list_display = ("occurred_at", "action", "resource", "resource_id", "actor_id")
    list_filter = ("action", "resource")
    search_fields = ("resource_id", "actor_id")
    readonly_fields = ("actor_id", "action", "resource", "resource_id", "changes", "metadata", "occurred_at")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
