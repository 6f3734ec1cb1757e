# bo_core/catalog/services.py
from __future__ import annotations

from decimal import Decimal

from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from bo_core.audit.models import AuditAction, AuditResource
from bo_core.audit.services import TRACKED_FIELDS, compute_changes, get_audit_recorder, snapshot
from bo_core.catalog.dependencies import ensure_category_deletable, ensure_item_deletable
from bo_core.catalog.models import Category, Item
from bo_core.common.concurrency import conditional_soft_delete, conditional_update

CATEGORY_FIELDS = TRACKED_FIELDS["category"]
ITEM_FIELDS = TRACKED_FIELDS["item"]


def _clean_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError({"name": "Name is required."})
    return name


def _clean_price(price) -> Decimal:
    price = Decimal(str(price)).quantize(Decimal("0.01"))
    if price < 0:
        raise ValidationError({"price": "Price must be >= 0."})
    return price


def _locked_category(public_id: str) -> Category:
    category = Category.objects.alive().select_for_update().filter(public_id=public_id).first()
    if category is None:
        raise NotFound("Category not found.")
    return category


class CategoryService:
    @staticmethod
    @transaction.atomic
    def create_category(*, actor_id, name: str) -> Category:
        category = Category.objects.create(name=_clean_name(name))

        get_audit_recorder().record(
            actor_id=actor_id,
            action=AuditAction.CREATE,
            resource=AuditResource.CATEGORY,
            resource_id=category.public_id,
            metadata={"name": category.name},
        )
        return category

    @staticmethod
    @transaction.atomic
    def update_category(*, actor_id, public_id: str, expected_version: int, name: str) -> Category:
        current = Category.objects.alive().filter(public_id=public_id).first()
        before = snapshot(current, CATEGORY_FIELDS) if current else {}

        updated = conditional_update(
            Category,
            lookup={"public_id": public_id},
            expected_version=expected_version,
            patch={"name": _clean_name(name)},
            label="Category",
        )

        get_audit_recorder().record(
            actor_id=actor_id,
            action=AuditAction.UPDATE,
            resource=AuditResource.CATEGORY,
            resource_id=public_id,
            changes=compute_changes(before, snapshot(updated, CATEGORY_FIELDS), CATEGORY_FIELDS),
        )
        return updated

    @staticmethod
    @transaction.atomic
    def delete_category(*, actor_id, public_id: str, expected_version: int | None = None) -> None:
        category = _locked_category(public_id)
        ensure_category_deletable(category.id)

        conditional_soft_delete(
            Category,
            lookup={"public_id": public_id},
            expected_version=expected_version,
            label="Category",
        )

        get_audit_recorder().record(
            actor_id=actor_id,
            action=AuditAction.DELETE,
            resource=AuditResource.CATEGORY,
            resource_id=public_id,
            metadata={"name": category.name},
        )


class ItemService:
    @staticmethod
    @transaction.atomic
    def create_item(*, actor_id, name: str, category_public_id: str, price=Decimal("0.00")) -> Item:
        try:
            category = _locked_category(category_public_id)
        except NotFound:
            raise ValidationError({"category": "Category not found."})

        item = Item.objects.create(name=_clean_name(name), category=category, price=_clean_price(price))

        get_audit_recorder().record(
            actor_id=actor_id,
            action=AuditAction.CREATE,
            resource=AuditResource.ITEM,
            resource_id=item.public_id,
            metadata={"name": item.name, "price": item.price, "category_id": category.id},
        )
        return item

    @staticmethod
    @transaction.atomic
    def update_item(
        *,
        actor_id,
        public_id: str,
        expected_version: int,
        name: str | None = None,
        price=None,
        category_public_id: str | None = None,
    ) -> Item:
        patch: dict = {}
        if name is not None:
            patch["name"] = _clean_name(name)
        if price is not None:
            patch["price"] = _clean_price(price)
        if category_public_id is not None:
            try:
                patch["category_id"] = _locked_category(category_public_id).id
            except NotFound:
                raise ValidationError({"category": "Category not found."})

        current = Item.objects.alive().filter(public_id=public_id).first()
        before = snapshot(current, ITEM_FIELDS) if current else {}

        updated = conditional_update(
            Item,
            lookup={"public_id": public_id},
            expected_version=expected_version,
            patch=patch,
            label="Item",
        )

        get_audit_recorder().record(
            actor_id=actor_id,
            action=AuditAction.UPDATE,
            resource=AuditResource.ITEM,
            resource_id=public_id,
            changes=compute_changes(before, snapshot(updated, ITEM_FIELDS), ITEM_FIELDS),
        )
        return updated

    @staticmethod
    @transaction.atomic
    def delete_item(*, actor_id, public_id: str, expected_version: int | None = None) -> None:
        item = Item.objects.alive().select_for_update().filter(public_id=public_id).first()
        if item is None:
            raise NotFound("Item not found.")
        ensure_item_deletable(item.id)

        conditional_soft_delete(
            Item,
            lookup={"public_id": public_id},
            expected_version=expected_version,
            label="Item",
        )

        get_audit_recorder().record(
            actor_id=actor_id,
            action=AuditAction.DELETE,
            resource=AuditResource.ITEM,
            resource_id=public_id,
            metadata={"name": item.name},
        )
