# bo_core/audit/management/commands/purge_audit_log.py
from __future__ import annotations

from django.core.management.base import BaseCommand

from bo_core.audit import retention


class Command(BaseCommand):
    help = "Delete audit entries older than their resource's retention window."

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Print counts only; do not delete.")

    def handle(self, *args, **opts):
        if opts["dry_run"]:
            plan = retention.preview()
            for resource, row in plan.items():
                self.stdout.write(
                    f"{resource}: {row['count']} older than {row['retention_days']} days"
                )
            self.stdout.write(f"DRY RUN: entries that would be deleted: {sum(r['count'] for r in plan.values())}")
            return

        deleted = retention.cleanup()
        for resource, count in deleted.items():
            self.stdout.write(f"{resource}: {count}")
        self.stdout.write(self.style.SUCCESS(f"Entries deleted: {sum(deleted.values())}"))
