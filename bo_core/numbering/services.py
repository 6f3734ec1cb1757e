# bo_core/numbering/services.py
from __future__ import annotations

import logging
from datetime import date

from django.db import connection, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from bo_core.numbering.models import NumberFormat, SequenceCounter
from bo_core.numbering.patterns import (
    InvalidPattern,
    default_pattern,
    period_key,
    preview,
    render,
    validate_pattern,
)

logger = logging.getLogger(__name__)


class NumberFormatService:
    @staticmethod
    def get_pattern(entity_kind: str) -> str:
        """Stored pattern or the built-in default. Never writes."""
        stored = NumberFormat.objects.filter(entity_kind=entity_kind).values_list("pattern", flat=True).first()
        return stored or default_pattern(entity_kind)

    @staticmethod
    @transaction.atomic
    def set_pattern(*, entity_kind: str, pattern: str, actor_id=None) -> NumberFormat:
        pattern = (pattern or "").strip()
        try:
            validate_pattern(pattern)
        except InvalidPattern as exc:
            raise ValidationError({"pattern": str(exc)})

        fmt, _ = NumberFormat.objects.update_or_create(
            entity_kind=entity_kind,
            defaults={"pattern": pattern, "updated_by_id": actor_id},
        )
        logger.info("number format for %s set to %s", entity_kind, pattern)
        return fmt

    @staticmethod
    def preview(pattern: str, *, day: date | None = None) -> str:
        try:
            return preview(pattern, day=day or timezone.localdate())
        except InvalidPattern as exc:
            raise ValidationError({"pattern": str(exc)})


class SequenceAllocator:
    """
    Mints formatted numbers, e.g. ORD240010315.

    The counter row is created if missing and then advanced with one
    UPDATE ... RETURNING, so concurrent callers on the same period each get
    a distinct value and none is skipped.
    """

    @staticmethod
    def next(entity_kind: str, *, day: date | None = None) -> str:
        pattern = NumberFormatService.get_pattern(entity_kind)
        try:
            validate_pattern(pattern)
        except InvalidPattern as exc:
            raise ValidationError({"pattern": f"Stored format for {entity_kind} is invalid: {exc}"})

        day = day or timezone.localdate()
        value = SequenceAllocator.increment(entity_kind, period_key(pattern, day))
        return render(pattern, day, value)

    @staticmethod
    def increment(entity_kind: str, period: str) -> int:
        SequenceCounter.objects.bulk_create(
            [SequenceCounter(entity_kind=entity_kind, period_key=period, value=0)],
            ignore_conflicts=True,
        )

        table = connection.ops.quote_name(SequenceCounter._meta.db_table)
        with connection.cursor() as cursor:
            cursor.execute(
                f"UPDATE {table} SET value = value + 1 "
                "WHERE entity_kind = %s AND period_key = %s RETURNING value",
                [entity_kind, period],
            )
            row = cursor.fetchone()

        if row is None:
            raise RuntimeError(f"Sequence counter {entity_kind}/{period} vanished during allocation")
        return int(row[0])
