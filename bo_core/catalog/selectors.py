# bo_core/catalog/selectors.py
from __future__ import annotations

from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from bo_core.catalog.models import Category, Item


def categories_filtered(*, search: str | None = None) -> QuerySet[Category]:
    qs = Category.objects.alive().order_by("name")
    if search:
        qs = qs.filter(name__icontains=search)
    return qs


def get_category(public_id: str) -> Category:
    category = Category.objects.alive().filter(public_id=public_id).first()
    if category is None:
        raise NotFound("Category not found.")
    return category


def items_filtered(*, search: str | None = None, category_public_id: str | None = None) -> QuerySet[Item]:
    qs = Item.objects.alive().select_related("category").order_by("name")
    if search:
        qs = qs.filter(name__icontains=search)
    if category_public_id:
        qs = qs.filter(category__public_id=category_public_id)
    return qs


def get_item(public_id: str) -> Item:
    item = Item.objects.alive().select_related("category").filter(public_id=public_id).first()
    if item is None:
        raise NotFound("Item not found.")
    return item
