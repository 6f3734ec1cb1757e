# bo_core/catalog/dependencies.py
"""
What still references a catalog row. Deleting is refused while any live
(not soft-deleted) dependent exists.
"""
from __future__ import annotations

from bo_core.catalog.models import Item
from bo_core.common.api.exceptions import DependencyConflict


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def category_dependents(category_id: int) -> int:
    return Item.objects.alive().filter(category_id=category_id).count()


def item_dependents(item_id: int) -> int:
    from bo_core.orders.models import OrderLine

    return (
        OrderLine.objects.filter(item_id=item_id, deleted_at__isnull=True, order__deleted_at__isnull=True)
        .values("order_id")
        .distinct()
        .count()
    )


def ensure_category_deletable(category_id: int) -> None:
    count = category_dependents(category_id)
    if count:
        what = _plural(count, "item still references", "items still reference")
        raise DependencyConflict(f"Cannot delete: {count} {what} this category.")


def ensure_item_deletable(item_id: int) -> None:
    count = item_dependents(item_id)
    if count:
        what = _plural(count, "order still references", "orders still reference")
        raise DependencyConflict(f"Cannot delete: {count} {what} this item.")
