# bo_core/orders/services.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping

from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from bo_core.audit.models import AuditAction, AuditResource
from bo_core.audit.services import TRACKED_FIELDS, compute_changes, get_audit_recorder, snapshot
from bo_core.catalog.models import Item
from bo_core.common.concurrency import conditional_soft_delete, conditional_update, now_ms
from bo_core.numbering.services import SequenceAllocator
from bo_core.orders.models import Order, OrderLine, OrderStatus

ORDER_FIELDS = TRACKED_FIELDS["order"]
CENT = Decimal("0.01")
MAX_QUANTITY = 100_000


@dataclass(frozen=True)
class PricedLine:
    item_id: int
    quantity: int
    unit_price: Decimal
    line_total: Decimal


def _fits(value: Decimal, model, field_name: str) -> bool:
    field = model._meta.get_field(field_name)
    return abs(value) < Decimal(10) ** (field.max_digits - field.decimal_places)


def _price_lines(lines: Iterable[Mapping]) -> tuple[list[PricedLine], Decimal]:
    """
    Resolve item public ids to live items and snapshot their prices.
    Returns the priced lines and the order total.
    """
    lines = list(lines)
    if not lines:
        raise ValidationError({"lines": "At least one item required."})

    for line in lines:
        quantity = int(line.get("quantity") or 0)
        if quantity <= 0:
            raise ValidationError({"lines": "Quantity must be positive."})
        if quantity > MAX_QUANTITY:
            raise ValidationError({"lines": f"Quantity cannot exceed {MAX_QUANTITY}."})

    wanted = {str(line["item"]) for line in lines}
    # locked so a concurrent item delete either sees these lines or runs first
    locked = Item.objects.alive().select_for_update().filter(public_id__in=wanted).order_by("id")
    items = {i.public_id: i for i in locked}
    if len(items) != len(wanted):
        raise ValidationError({"lines": "One or more items not found."})

    priced: list[PricedLine] = []
    total = Decimal("0.00")
    for line in lines:
        item = items[str(line["item"])]
        quantity = int(line["quantity"])
        line_total = (item.price * quantity).quantize(CENT)
        if not _fits(line_total, OrderLine, "line_total"):
            raise ValidationError({"lines": f"Line total for {item.name} is too large."})
        priced.append(PricedLine(item.id, quantity, item.price, line_total))
        total += line_total

    total = total.quantize(CENT)
    if not _fits(total, Order, "total"):
        raise ValidationError({"lines": "Order total is too large."})
    return priced, total


def _insert_lines(order: Order, priced: list[PricedLine]) -> None:
    OrderLine.objects.bulk_create(
        [
            OrderLine(
                order=order,
                item_id=p.item_id,
                quantity=p.quantity,
                unit_price=p.unit_price,
                line_total=p.line_total,
            )
            for p in priced
        ]
    )


class OrderService:
    @staticmethod
    @transaction.atomic
    def create_order(*, actor_id, lines: Iterable[Mapping], day: date | None = None) -> Order:
        priced, total = _price_lines(lines)

        order = Order.objects.create(
            order_number=SequenceAllocator.next("order", day=day),
            status=OrderStatus.DRAFT,
            total=total,
            created_by_id=actor_id,
            updated_by_id=actor_id,
        )
        _insert_lines(order, priced)

        get_audit_recorder().record(
            actor_id=actor_id,
            action=AuditAction.CREATE,
            resource=AuditResource.ORDER,
            resource_id=order.public_id,
            metadata={
                "order_number": order.order_number,
                "status": order.status,
                "total": order.total,
                "line_count": len(priced),
            },
        )
        return order

    @staticmethod
    @transaction.atomic
    def update_order(
        *,
        actor_id,
        public_id: str,
        expected_version: int,
        status: str | None = None,
        lines: Iterable[Mapping] | None = None,
    ) -> Order:
        current = Order.objects.alive().filter(public_id=public_id).first()
        if current is None:
            raise NotFound("Order not found.")
        if status is None and lines is None:
            raise ValidationError({"detail": "No fields to update."})
        if status is not None and status not in OrderStatus.values:
            raise ValidationError({"status": f"Unknown status: {status}"})

        before = snapshot(current, ORDER_FIELDS)

        patch: dict = {"updated_by_id": actor_id}
        if status is not None:
            patch["status"] = status

        priced = None
        if lines is not None:
            priced, patch["total"] = _price_lines(lines)

        updated = conditional_update(
            Order,
            lookup={"public_id": public_id},
            expected_version=expected_version,
            patch=patch,
            label="Order",
        )

        if priced is not None:
            OrderLine.objects.filter(order=updated, deleted_at__isnull=True).update(deleted_at=now_ms())
            _insert_lines(updated, priced)

        get_audit_recorder().record(
            actor_id=actor_id,
            action=AuditAction.UPDATE,
            resource=AuditResource.ORDER,
            resource_id=public_id,
            changes=compute_changes(before, snapshot(updated, ORDER_FIELDS), ORDER_FIELDS),
            metadata={
                "order_number": updated.order_number,
                "status": updated.status,
                "total": updated.total,
                "lines_changed": priced is not None,
            },
        )
        return updated

    @staticmethod
    @transaction.atomic
    def delete_order(*, actor_id, public_id: str, expected_version: int | None = None) -> None:
        order = Order.objects.alive().filter(public_id=public_id).first()
        if order is None:
            raise NotFound("Order not found.")

        deleted_at = conditional_soft_delete(
            Order,
            lookup={"public_id": public_id},
            expected_version=expected_version,
            label="Order",
        )
        OrderLine.objects.filter(order=order, deleted_at__isnull=True).update(deleted_at=deleted_at)

        get_audit_recorder().record(
            actor_id=actor_id,
            action=AuditAction.DELETE,
            resource=AuditResource.ORDER,
            resource_id=public_id,
            metadata={"order_number": order.order_number, "status": order.status, "total": order.total},
        )
