# bo_core/orders/selectors.py
from __future__ import annotations

from django.db.models import Prefetch, QuerySet
from rest_framework.exceptions import NotFound

from bo_core.orders.models import Order, OrderLine


def _live_lines() -> Prefetch:
    return Prefetch(
        "lines",
        queryset=OrderLine.objects.filter(deleted_at__isnull=True).select_related("item").order_by("id"),
    )


def orders_filtered(*, status: str | None = None, search: str | None = None) -> QuerySet[Order]:
    qs = Order.objects.alive().prefetch_related(_live_lines()).order_by("-created_at", "-id")
    if status:
        qs = qs.filter(status=status)
    if search:
        qs = qs.filter(order_number__icontains=search)
    return qs


def get_order(public_id: str) -> Order:
    order = Order.objects.alive().prefetch_related(_live_lines()).filter(public_id=public_id).first()
    if order is None:
        raise NotFound("Order not found.")
    return order
