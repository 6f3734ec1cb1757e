import pytest
from rest_framework.response import Response

from bo_core.common.events import CACHE_INVALIDATED, subscribe, unsubscribe
from bo_core.common.invalidation import INVALIDATE_HEADER, invalidate, mark_stale, stale_views


@pytest.mark.parametrize(
    "kind, expected",
    [
        ("category", ("category", "item", "order", "audit")),
        ("item", ("item", "order", "audit")),
        ("order", ("order", "audit")),
        ("user", ("user", "audit")),
        ("role", ("role", "user", "audit")),
    ],
)
def test_stale_views(kind, expected):
    assert stale_views(kind) == expected


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError):
        stale_views("invoice")


def test_invalidate_publishes_event():
    seen = []

    @subscribe(CACHE_INVALIDATED)
    def _handler(payload):
        seen.append(payload)

    try:
        invalidate("item")
    finally:
        unsubscribe(CACHE_INVALIDATED, _handler)

    assert seen == [{"entity": "item", "views": ["item", "order", "audit"]}]


def test_mark_stale_sets_header():
    res = mark_stale(Response(status=204), "category")
    assert res[INVALIDATE_HEADER] == "category,item,order,audit"


def test_failing_handler_does_not_break_invalidation(caplog):
    seen = []

    @subscribe(CACHE_INVALIDATED)
    def _broken(payload):
        raise RuntimeError("boom")

    @subscribe(CACHE_INVALIDATED)
    def _ok(payload):
        seen.append(payload["entity"])

    try:
        with caplog.at_level("ERROR", logger="bo_core.common.events"):
            assert invalidate("order") == ("order", "audit")
    finally:
        unsubscribe(CACHE_INVALIDATED, _broken)
        unsubscribe(CACHE_INVALIDATED, _ok)

    assert seen == ["order"]
    assert any("failed for cache.invalidated" in r.getMessage() for r in caplog.records)
