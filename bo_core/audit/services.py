# bo_core/audit/services.py
"""
Audit trail writer.

`AuditRecorder.record()` never raises and never blocks the mutation that
called it: the entry is handed to an executor once the surrounding
transaction commits, and any failure along the way is logged and dropped.
"""
from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from django.conf import settings
from django.db import connection, transaction

from bo_core.audit.models import AuditEntry

logger = logging.getLogger(__name__)


# Fields whose before/after values are captured on UPDATE, per resource
TRACKED_FIELDS: Dict[str, tuple[str, ...]] = {
    "category": ("name",),
    "item": ("name", "price", "category_id"),
    "order": ("status", "total"),
    "user": ("name", "email", "role_id"),
    "role": ("name", "description"),
}


def _differs(before: Any, after: Any) -> bool:
    # 1 vs "1" vs True are all different values here
    return type(before) is not type(after) or before != after


def compute_changes(
    old: Mapping[str, Any],
    new: Mapping[str, Any],
    fields: Iterable[str],
) -> List[Dict[str, Any]]:
    """
    One {"field", "from", "to"} per allowlisted field whose value changed,
    in allowlist order. Fields missing from a snapshot count as None.
    """
    changes: List[Dict[str, Any]] = []
    for field in fields:
        before = old.get(field)
        after = new.get(field)
        if _differs(before, after):
            changes.append({"field": field, "from": before, "to": after})
    return changes


def snapshot(instance: Any, fields: Iterable[str]) -> Dict[str, Any]:
    return {field: getattr(instance, field) for field in fields}


@dataclass(frozen=True)
class AuditRecord:
    actor_id: str
    action: str
    resource: str
    resource_id: str
    changes: Optional[List[Dict[str, Any]]]
    metadata: Optional[Dict[str, Any]]


class InlineExecutor(Executor):
    """Runs work in the submitting thread. Used by tests and one-off scripts."""

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


class AuditRecorder:
    def __init__(self, *, executor: Executor, close_connection: bool = False) -> None:
        self._executor = executor
        # pool threads hold their own DB connection; close it after each write
        self._close_connection = close_connection

    @classmethod
    def from_settings(cls) -> "AuditRecorder":
        mode = getattr(settings, "AUDIT_DISPATCH", "thread")
        if mode == "inline":
            return cls(executor=InlineExecutor())
        if mode != "thread":
            raise ValueError(f"Unknown AUDIT_DISPATCH mode: {mode}")
        pool = ThreadPoolExecutor(
            max_workers=getattr(settings, "AUDIT_MAX_WORKERS", 2),
            thread_name_prefix="audit",
        )
        return cls(executor=pool, close_connection=True)

    def record(
        self,
        *,
        actor_id: Any,
        action: str,
        resource: str,
        resource_id: Any,
        changes: Optional[List[Dict[str, Any]]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Fire-and-forget. Runs after the current transaction commits (at once
        when there is none) and is dropped if it rolls back.
        """
        entry = AuditRecord(
            actor_id=str(actor_id),
            action=action,
            resource=resource,
            resource_id=str(resource_id),
            changes=changes or None,
            metadata=metadata or None,
        )
        try:
            transaction.on_commit(lambda: self._dispatch(entry))
        except Exception:
            logger.exception("Could not schedule audit entry %s %s/%s", action, resource, resource_id)

    def _dispatch(self, entry: AuditRecord) -> None:
        try:
            self._executor.submit(self._write, entry)
        except Exception:
            logger.exception(
                "Could not dispatch audit entry %s %s/%s", entry.action, entry.resource, entry.resource_id
            )

    def _write(self, entry: AuditRecord) -> None:
        try:
            AuditEntry.objects.create(
                actor_id=entry.actor_id,
                action=entry.action,
                resource=entry.resource,
                resource_id=entry.resource_id,
                changes=entry.changes,
                metadata=entry.metadata,
            )
        except Exception:
            logger.exception(
                "Failed to write audit entry %s %s/%s by %s",
                entry.action,
                entry.resource,
                entry.resource_id,
                entry.actor_id,
            )
        finally:
            if self._close_connection:
                connection.close()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


def get_audit_recorder() -> AuditRecorder:
    from django.apps import apps

    return apps.get_app_config("audit").recorder
