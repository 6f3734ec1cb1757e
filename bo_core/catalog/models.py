# bo_core/catalog/models.py
from decimal import Decimal

from django.db import models

from bo_core.common.models import VersionedModel


class Category(VersionedModel):
    name = models.CharField(max_length=255)

    class Meta:
        db_table = "catalog_category"
        verbose_name_plural = "categories"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Item(VersionedModel):
    name = models.CharField(max_length=255)
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name="items")
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        db_table = "catalog_item"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["category", "deleted_at"]),
        ]

    def __str__(self) -> str:
        return self.name
