import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest
from django.db import connection
from rest_framework.exceptions import ValidationError

from bo_core.numbering.models import NumberFormat, SequenceCounter
from bo_core.numbering.services import NumberFormatService, SequenceAllocator

MARCH_15 = date(2024, 3, 15)
NEXT_DAY = date(2024, 3, 16)
NEW_YEAR = date(2025, 1, 1)


@pytest.mark.django_db
def test_default_order_format_sequence():
    assert SequenceAllocator.next("order", day=MARCH_15) == "ORD240010315"
    assert SequenceAllocator.next("order", day=MARCH_15) == "ORD240020315"
    assert SequenceAllocator.next("order", day=NEW_YEAR) == "ORD250010101"


@pytest.mark.django_db
def test_yearly_order_format_sequence():
    NumberFormatService.set_pattern(entity_kind="order", pattern="ORD[YY][3DIGIT]")

    assert SequenceAllocator.next("order", day=MARCH_15) == "ORD24001"
    assert SequenceAllocator.next("order", day=NEXT_DAY) == "ORD24002"
    assert SequenceAllocator.next("order", day=NEW_YEAR) == "ORD25001"


@pytest.mark.django_db
def test_period_rollover_keeps_independent_counters():
    SequenceAllocator.next("order", day=MARCH_15)
    SequenceAllocator.next("order", day=MARCH_15)
    assert SequenceAllocator.next("order", day=NEXT_DAY) == "ORD240010316"

    counters = dict(SequenceCounter.objects.filter(entity_kind="order").values_list("period_key", "value"))
    assert counters == {"240315": 2, "240316": 1}


@pytest.mark.django_db
def test_kinds_do_not_share_counters():
    assert SequenceAllocator.next("invoice", day=MARCH_15) == "0300012415"
    assert SequenceAllocator.next("quote", day=MARCH_15) == "0300012415"
    assert SequenceAllocator.next("invoice", day=MARCH_15) == "0300022415"


@pytest.mark.django_db
def test_reading_a_format_never_writes():
    assert NumberFormatService.get_pattern("order") == "ORD[YY][3DIGIT][MM][DD]"
    assert not NumberFormat.objects.exists()


@pytest.mark.django_db
def test_invalid_stored_format_fails_before_allocating():
    NumberFormat.objects.create(entity_kind="order", pattern="ORD[YY]")

    with pytest.raises(ValidationError):
        SequenceAllocator.next("order", day=MARCH_15)
    assert not SequenceCounter.objects.exists()


@pytest.mark.django_db
def test_set_pattern_rejects_invalid_patterns():
    with pytest.raises(ValidationError) as exc:
        NumberFormatService.set_pattern(entity_kind="order", pattern="[3DIGIT][4DIGIT]")

    assert "only contain one sequence placeholder" in str(exc.value.detail["pattern"])
    assert not NumberFormat.objects.exists()


@pytest.mark.django_db(transaction=True)
def test_concurrent_allocations_are_distinct_and_gap_free():
    workers = 8
    per_worker = 5
    barrier = threading.Barrier(workers)

    def allocate(_):
        try:
            barrier.wait(timeout=10)
            return [SequenceAllocator.increment("order", "240315") for _ in range(per_worker)]
        finally:
            connection.close()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = [v for batch in pool.map(allocate, range(workers)) for v in batch]

    total = workers * per_worker
    assert sorted(results) == list(range(1, total + 1))
    assert SequenceCounter.objects.get(entity_kind="order", period_key="240315").value == total
