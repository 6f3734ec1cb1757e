# bo_core/common/models.py
from __future__ import annotations

import uuid

from django.db import models

from bo_core.common.concurrency import now_ms


def new_public_id() -> str:
    return uuid.uuid4().hex


class LiveQuerySet(models.QuerySet):
    def alive(self):
        return self.filter(deleted_at__isnull=True)


class VersionedModel(models.Model):
    """
    Base for every mutable entity.

    `updated_at` (epoch milliseconds) doubles as the optimistic concurrency
    token: clients read it, echo it back on update/delete, and writes only
    land when it still matches. `deleted_at` marks a soft delete.

    Rows are changed through `bo_core.common.concurrency`, never with
    `save()` on a stale instance.
    """
    public_id = models.CharField(max_length=32, unique=True, default=new_public_id, editable=False)

    created_at = models.BigIntegerField(default=now_ms, editable=False, db_index=True)
    updated_at = models.BigIntegerField(default=now_ms)
    deleted_at = models.BigIntegerField(null=True, blank=True, db_index=True)

    objects = LiveQuerySet.as_manager()

    class Meta:
        abstract = True

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
