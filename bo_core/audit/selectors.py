# bo_core/audit/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from bo_core.audit.models import AuditEntry


def audit_entries_qs() -> QuerySet[AuditEntry]:
    return AuditEntry.objects.order_by("-occurred_at", "-id")


def entries_for_resource(*, resource: str, resource_id: str) -> QuerySet[AuditEntry]:
    return audit_entries_qs().filter(resource=resource, resource_id=str(resource_id))
