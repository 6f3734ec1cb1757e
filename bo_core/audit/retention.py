# bo_core/audit/retention.py
"""
Retention windows for audit entries, per resource kind (days).
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict

from django.db import transaction
from django.db.models import Count, Min
from django.utils import timezone

from bo_core.audit.models import AuditEntry

logger = logging.getLogger(__name__)

RETENTION_DAYS: Dict[str, int] = {
    "order": 2555,
    "user": 730,
    "role": 730,
    "category": 365,
    "item": 365,
    "auth": 90,
}


def cutoff_for(resource: str, *, now: datetime | None = None) -> datetime:
    now = now or timezone.now()
    return now - timedelta(days=RETENTION_DAYS[resource])


def _expired_qs(resource: str, *, now: datetime):
    # strictly older than the cutoff; an entry exactly at the cutoff is kept
    return AuditEntry.objects.filter(resource=resource, occurred_at__lt=cutoff_for(resource, now=now))


def preview(*, now: datetime | None = None) -> Dict[str, Dict[str, Any]]:
    """What `cleanup()` would delete right now, without deleting."""
    now = now or timezone.now()
    return {
        resource: {
            "retention_days": days,
            "cutoff": cutoff_for(resource, now=now),
            "count": _expired_qs(resource, now=now).count(),
        }
        for resource, days in RETENTION_DAYS.items()
    }


@transaction.atomic
def cleanup(*, now: datetime | None = None) -> Dict[str, int]:
    """Delete expired entries. Returns deleted counts per resource kind."""
    now = now or timezone.now()
    deleted: Dict[str, int] = {}
    for resource in RETENTION_DAYS:
        count, _ = _expired_qs(resource, now=now).delete()
        deleted[resource] = count

    logger.info(
        "audit retention cleanup removed %d entries (%s)",
        sum(deleted.values()),
        ", ".join(f"{k}={v}" for k, v in deleted.items()),
    )
    return deleted


def statistics() -> Dict[str, Any]:
    totals = AuditEntry.objects.aggregate(total=Count("id"), oldest=Min("occurred_at"))
    by_resource = {
        row["resource"]: row["count"]
        for row in AuditEntry.objects.order_by().values("resource").annotate(count=Count("id"))
    }
    return {
        "total": totals["total"],
        "oldest": totals["oldest"],
        "by_resource": by_resource,
    }
