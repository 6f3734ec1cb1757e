from datetime import datetime, timedelta, timezone as dt_timezone

import pytest
from django.core.management import call_command

from bo_core.audit import retention
from bo_core.audit.models import AuditEntry

pytestmark = pytest.mark.django_db

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=dt_timezone.utc)


def _entry(resource, age_days, **extra):
    return AuditEntry.objects.create(
        actor_id="1",
        action="UPDATE",
        resource=resource,
        resource_id="r1",
        occurred_at=NOW - timedelta(days=age_days, **extra),
    )


@pytest.fixture
def entries():
    return {
        "old_auth": _entry("auth", 91),
        "fresh_auth": _entry("auth", 89),
        "old_item": _entry("item", 366),
        "fresh_order": _entry("order", 2000),
        "old_order": _entry("order", 2556),
        "edge_category": _entry("category", 365),
    }


def test_preview_counts_without_deleting(entries):
    plan = retention.preview(now=NOW)

    assert plan["auth"]["count"] == 1
    assert plan["item"]["count"] == 1
    assert plan["order"]["count"] == 1
    assert plan["category"]["count"] == 0
    assert plan["order"]["retention_days"] == 2555
    assert AuditEntry.objects.count() == 6


def test_cleanup_deletes_only_expired_entries(entries):
    deleted = retention.cleanup(now=NOW)

    assert deleted == {"order": 1, "user": 0, "role": 0, "category": 0, "item": 1, "auth": 1}
    remaining = set(AuditEntry.objects.values_list("id", flat=True))
    assert remaining == {entries["fresh_auth"].id, entries["fresh_order"].id, entries["edge_category"].id}


def test_entry_exactly_at_cutoff_is_kept():
    _entry("auth", 90)
    assert retention.cleanup(now=NOW)["auth"] == 0

    _entry("auth", 90, seconds=1)
    assert retention.cleanup(now=NOW)["auth"] == 1


def test_statistics(entries):
    stats = retention.statistics()

    assert stats["total"] == 6
    assert stats["oldest"] == entries["old_order"].occurred_at
    assert stats["by_resource"] == {"auth": 2, "item": 1, "order": 2, "category": 1}


def test_statistics_on_empty_log():
    assert retention.statistics() == {"total": 0, "oldest": None, "by_resource": {}}


def test_purge_command_dry_run_then_real(capsys):
    _entry("auth", 400)

    call_command("purge_audit_log", "--dry-run")
    out = capsys.readouterr().out
    assert "DRY RUN: entries that would be deleted: 1" in out
    assert AuditEntry.objects.count() == 1

    call_command("purge_audit_log")
    out = capsys.readouterr().out
    assert "Entries deleted: 1" in out
    assert AuditEntry.objects.count() == 0
