# bo_core/numbering/models.py
from django.db import models


class NumberFormat(models.Model):
    """
    Configured pattern per entity kind, e.g. order -> "ORD[YY][3DIGIT][MM][DD]".
    Kinds without a row fall back to the built-in defaults.
    """
    entity_kind = models.CharField(max_length=32, unique=True)
    pattern = models.CharField(max_length=64)

    updated_at = models.DateTimeField(auto_now=True)
    updated_by_id = models.BigIntegerField(null=True, blank=True)

    class Meta:
        db_table = "numbering_number_format"

    def __str__(self) -> str:
        return f"{self.entity_kind}: {self.pattern}"


class SequenceCounter(models.Model):
    """
    Last value handed out for (entity_kind, period_key). Only ever moves
    forward, one step per allocation, via a single UPDATE ... RETURNING.
    """
    entity_kind = models.CharField(max_length=32)
    period_key = models.CharField(max_length=8)
    value = models.BigIntegerField(default=0)

    class Meta:
        db_table = "numbering_sequence_counter"
        constraints = [
            models.UniqueConstraint(fields=["entity_kind", "period_key"], name="uq_sequence_kind_period"),
        ]

    def __str__(self) -> str:
        return f"{self.entity_kind}/{self.period_key}={self.value}"
