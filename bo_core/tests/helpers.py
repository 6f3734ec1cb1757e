# bo_core/tests/helpers.py
from bo_core.audit.models import AuditEntry


def audit_entries(resource, resource_id=None, action=None):
    qs = AuditEntry.objects.filter(resource=resource).order_by("id")
    if resource_id is not None:
        qs = qs.filter(resource_id=str(resource_id))
    if action is not None:
        qs = qs.filter(action=action)
    return list(qs)


def error_code(response):
    return response.json()["error"]["code"]


def invalidated(response):
    return response["X-Invalidate"].split(",")
