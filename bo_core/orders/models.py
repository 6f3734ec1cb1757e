# bo_core/orders/models.py
from decimal import Decimal

from django.db import models

from bo_core.catalog.models import Item
from bo_core.common.models import VersionedModel


class OrderStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class Order(VersionedModel):
    order_number = models.CharField(max_length=64, unique=True)
    status = models.CharField(max_length=16, choices=OrderStatus.choices, default=OrderStatus.DRAFT, db_index=True)
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    created_by_id = models.BigIntegerField(null=True, blank=True)
    updated_by_id = models.BigIntegerField(null=True, blank=True)

    class Meta:
        db_table = "orders_order"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.order_number


class OrderLine(models.Model):
    """
    One item on an order. `unit_price` is the item price when the line was
    written; later price changes do not touch it.
    """
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="lines")
    item = models.ForeignKey(Item, on_delete=models.PROTECT, related_name="order_lines")

    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    line_total = models.DecimalField(max_digits=14, decimal_places=2)

    deleted_at = models.BigIntegerField(null=True, blank=True)

    class Meta:
        db_table = "orders_order_line"
        indexes = [
            models.Index(fields=["order", "deleted_at"]),
            models.Index(fields=["item", "deleted_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.order_id}: {self.quantity} x {self.item_id}"
