from datetime import date
from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from bo_core.catalog.models import Item
from bo_core.catalog.services import ItemService
from bo_core.common.api.exceptions import DependencyConflict, VersionConflict
from bo_core.common.models import LiveQuerySet
from bo_core.numbering.models import SequenceCounter
from bo_core.numbering.services import NumberFormatService
from bo_core.orders.models import Order, OrderLine, OrderStatus
from bo_core.orders.services import MAX_QUANTITY, OrderService
from bo_core.tests.helpers import audit_entries

pytestmark = pytest.mark.django_db

MARCH_15 = date(2024, 3, 15)


def _create(user, item, quantity=2, day=MARCH_15):
    return OrderService.create_order(
        actor_id=user.id, lines=[{"item": item.public_id, "quantity": quantity}], day=day
    )


def test_orders_get_sequential_numbers(user, item):
    assert _create(user, item).order_number == "ORD240010315"
    assert _create(user, item).order_number == "ORD240020315"
    assert _create(user, item, day=date(2025, 1, 1)).order_number == "ORD250010101"


def test_numbers_follow_the_configured_format(user, item):
    NumberFormatService.set_pattern(entity_kind="order", pattern="ORD[YY][3DIGIT]")

    assert _create(user, item).order_number == "ORD24001"
    assert _create(user, item, day=date(2024, 3, 16)).order_number == "ORD24002"


def test_create_prices_lines_and_audits(user, item, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        order = _create(user, item, quantity=3)

    assert order.status == OrderStatus.DRAFT
    assert order.total == Decimal("37.50")
    [line] = OrderLine.objects.filter(order=order)
    assert line.unit_price == Decimal("12.50")
    assert line.line_total == Decimal("37.50")

    [entry] = audit_entries("order", order.public_id, action="CREATE")
    assert entry.metadata == {
        "order_number": "ORD240010315",
        "status": "draft",
        "total": "37.50",
        "line_count": 1,
    }


@pytest.mark.parametrize(
    "lines, message",
    [
        ([], "At least one item required."),
        ([{"item": "nope", "quantity": 1}], "One or more items not found."),
    ],
)
def test_invalid_lines(user, lines, message):
    with pytest.raises(ValidationError) as exc:
        OrderService.create_order(actor_id=user.id, lines=lines, day=MARCH_15)

    assert str(exc.value.detail["lines"]) == message
    assert not Order.objects.exists()


def test_zero_quantity_is_rejected(user, item):
    with pytest.raises(ValidationError):
        OrderService.create_order(actor_id=user.id, lines=[{"item": item.public_id, "quantity": 0}])


def test_later_price_change_does_not_touch_lines(user, item):
    order = _create(user, item)
    ItemService.update_item(actor_id=user.id, public_id=item.public_id, expected_version=item.updated_at, price="20.00")

    line = OrderLine.objects.get(order=order)
    assert line.unit_price == Decimal("12.50")


def test_update_status_records_diff(user, item, django_capture_on_commit_callbacks):
    order = _create(user, item)

    with django_capture_on_commit_callbacks(execute=True):
        updated = OrderService.update_order(
            actor_id=user.id,
            public_id=order.public_id,
            expected_version=order.updated_at,
            status=OrderStatus.CONFIRMED,
        )

    assert updated.updated_at > order.updated_at
    [entry] = audit_entries("order", order.public_id, action="UPDATE")
    assert entry.changes == [{"field": "status", "from": "draft", "to": "confirmed"}]
    assert entry.metadata["lines_changed"] is False


def test_replacing_lines_recomputes_total(user, item, django_capture_on_commit_callbacks):
    order = _create(user, item, quantity=2)

    with django_capture_on_commit_callbacks(execute=True):
        OrderService.update_order(
            actor_id=user.id,
            public_id=order.public_id,
            expected_version=order.updated_at,
            lines=[{"item": item.public_id, "quantity": 1}],
        )

    live = OrderLine.objects.filter(order=order, deleted_at__isnull=True)
    assert [line.quantity for line in live] == [1]
    assert OrderLine.objects.filter(order=order).count() == 2

    [entry] = audit_entries("order", order.public_id, action="UPDATE")
    assert entry.changes == [{"field": "total", "from": "25.00", "to": "12.50"}]
    assert entry.metadata["lines_changed"] is True


def test_stale_update_is_a_conflict(user, item):
    order = _create(user, item)
    OrderService.update_order(
        actor_id=user.id, public_id=order.public_id, expected_version=order.updated_at, status="pending"
    )

    with pytest.raises(VersionConflict):
        OrderService.update_order(
            actor_id=user.id, public_id=order.public_id, expected_version=order.updated_at, status="cancelled"
        )

    order.refresh_from_db()
    assert order.status == "pending"


def test_unknown_status_is_rejected(user, item):
    order = _create(user, item)
    with pytest.raises(ValidationError):
        OrderService.update_order(
            actor_id=user.id, public_id=order.public_id, expected_version=order.updated_at, status="shipped"
        )


def test_delete_soft_deletes_order_and_lines(user, item, django_capture_on_commit_callbacks):
    order = _create(user, item)

    with django_capture_on_commit_callbacks(execute=True):
        OrderService.delete_order(actor_id=user.id, public_id=order.public_id)

    order.refresh_from_db()
    assert order.deleted_at is not None
    assert not OrderLine.objects.filter(order=order, deleted_at__isnull=True).exists()
    assert len(audit_entries("order", order.public_id, action="DELETE")) == 1


def test_items_on_live_orders_cannot_be_deleted(user, item):
    _create(user, item)
    _create(user, item)

    with pytest.raises(DependencyConflict) as exc:
        ItemService.delete_item(actor_id=user.id, public_id=item.public_id)
    assert str(exc.value.detail) == "Cannot delete: 2 orders still reference this item."


def test_items_on_deleted_orders_can_be_deleted(user, item):
    order = _create(user, item)
    OrderService.delete_order(actor_id=user.id, public_id=order.public_id)

    ItemService.delete_item(actor_id=user.id, public_id=item.public_id)

    item.refresh_from_db()
    assert item.deleted_at is not None


def test_quantity_above_limit_is_rejected_before_any_write(user, item):
    with pytest.raises(ValidationError) as exc:
        _create(user, item, quantity=MAX_QUANTITY + 1)

    assert "cannot exceed" in str(exc.value.detail["lines"])
    assert not Order.objects.exists()
    assert not SequenceCounter.objects.exists()


def test_line_total_beyond_column_precision_is_rejected(user, category):
    pricey = Item.objects.create(name="Yacht", category=category, price=Decimal("50000000.00"))

    with pytest.raises(ValidationError) as exc:
        _create(user, pricey, quantity=MAX_QUANTITY)

    assert str(exc.value.detail["lines"]) == "Line total for Yacht is too large."
    assert not Order.objects.exists()
    assert not SequenceCounter.objects.exists()


def test_order_total_beyond_column_precision_is_rejected(user, category):
    first = Item.objects.create(name="Barge", category=category, price=Decimal("6000000.00"))
    second = Item.objects.create(name="Tug", category=category, price=Decimal("6000000.00"))

    with pytest.raises(ValidationError) as exc:
        OrderService.create_order(
            actor_id=user.id,
            lines=[
                {"item": first.public_id, "quantity": MAX_QUANTITY},
                {"item": second.public_id, "quantity": MAX_QUANTITY},
            ],
            day=MARCH_15,
        )

    assert str(exc.value.detail["lines"]) == "Order total is too large."
    assert not Order.objects.exists()


@pytest.mark.parametrize("edit", ["create", "replace_lines"])
def test_order_lines_lock_their_items(user, item, monkeypatch, edit):
    order = _create(user, item) if edit == "replace_lines" else None
    locked_models = []
    original = LiveQuerySet.select_for_update

    def _tracking(self, *args, **kwargs):
        locked_models.append(self.model)
        return original(self, *args, **kwargs)

    monkeypatch.setattr(LiveQuerySet, "select_for_update", _tracking)

    if edit == "create":
        _create(user, item)
    else:
        OrderService.update_order(
            actor_id=user.id,
            public_id=order.public_id,
            expected_version=order.updated_at,
            lines=[{"item": item.public_id, "quantity": 1}],
        )

    assert Item in locked_models
