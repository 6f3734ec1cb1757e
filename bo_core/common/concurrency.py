# bo_core/common/concurrency.py
"""
Conditional writes against versioned rows.

Every update is a single UPDATE whose WHERE clause pins the id, the version
the caller read, and "not soft-deleted". When nothing matches, a second
lookup by id decides between NotFound and VersionConflict.
"""
from __future__ import annotations

import time
from typing import Any, Mapping

from django.db import models
from django.db.models import F, Value
from django.db.models.functions import Greatest
from rest_framework.exceptions import NotFound, ValidationError

from bo_core.common.api.exceptions import VersionConflict


def now_ms() -> int:
    return int(time.time() * 1000)


def next_version(expected: int | None = None) -> int:
    """
    New token for a successful write. Strictly greater than the one being
    replaced, even when both writes land in the same millisecond.
    """
    current = now_ms()
    if expected is None:
        return current
    return max(current, int(expected) + 1)


def _raise_missing_or_conflict(model: type[models.Model], lookup: Mapping[str, Any], label: str) -> None:
    if model._default_manager.filter(**lookup, deleted_at__isnull=True).exists():
        raise VersionConflict()
    raise NotFound(f"{label} not found.")


def conditional_update(
    model: type[models.Model],
    *,
    lookup: Mapping[str, Any],
    expected_version: int,
    patch: Mapping[str, Any],
    label: str | None = None,
):
    """
    Apply `patch` only if the row still carries `expected_version`.

    Returns the freshly loaded instance with its new `updated_at`.
    Raises NotFound (missing or soft-deleted), VersionConflict (someone
    else wrote first) or ValidationError (nothing to write).
    """
    label = label or model._meta.verbose_name.capitalize()
    if not patch:
        raise ValidationError({"detail": "No fields to update."})
    if "updated_at" in patch or "deleted_at" in patch:
        raise ValidationError({"detail": "Version columns cannot be patched directly."})

    new_version = next_version(expected_version)
    matched = model._default_manager.filter(
        **lookup,
        updated_at=expected_version,
        deleted_at__isnull=True,
    ).update(**patch, updated_at=new_version)

    if matched == 0:
        _raise_missing_or_conflict(model, lookup, label)

    return model._default_manager.get(**lookup)


def conditional_soft_delete(
    model: type[models.Model],
    *,
    lookup: Mapping[str, Any],
    expected_version: int | None = None,
    label: str | None = None,
) -> int:
    """
    Soft delete a row that is not already deleted (and, when given, still at
    `expected_version`). Returns the deletion timestamp.
    """
    label = label or model._meta.verbose_name.capitalize()
    qs = model._default_manager.filter(**lookup, deleted_at__isnull=True)
    if expected_version is not None:
        qs = qs.filter(updated_at=expected_version)

    deleted_at = now_ms()
    # the stamp never moves backwards, even after a same-millisecond write
    matched = qs.update(
        deleted_at=deleted_at,
        updated_at=Greatest(
            F("updated_at") + 1,
            Value(deleted_at),
            output_field=models.BigIntegerField(),
        ),
    )

    if matched == 0:
        _raise_missing_or_conflict(model, lookup, label)

    return deleted_at
