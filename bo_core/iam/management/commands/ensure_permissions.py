# bo_core/iam/management/commands/ensure_permissions.py

from django.core.management.base import BaseCommand
from django.db import transaction

from bo_core.iam.constants import ALL_PERMISSIONS, SUPER_PERMISSION
from bo_core.iam.models import Permission, Role, RolePermission
from bo_core.iam.permission_cache import get_permission_cache

ADMIN_ROLE = "Administrator"


class Command(BaseCommand):
    help = "Ensure every permission and the Administrator role exist (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--no-admin-role",
            action="store_true",
            help="Only create permissions; skip the Administrator role.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        created = 0
        for name in ALL_PERMISSIONS:
            _, was_created = Permission.objects.get_or_create(name=name)
            created += 1 if was_created else 0

        if not options["no_admin_role"]:
            role, _ = Role.objects.get_or_create(
                name=ADMIN_ROLE,
                defaults={"description": "Full access"},
            )
            RolePermission.objects.get_or_create(
                role=role,
                permission=Permission.objects.get(name=SUPER_PERMISSION),
            )
            transaction.on_commit(get_permission_cache().invalidate_all)

        self.stdout.write(self.style.SUCCESS(f"Permissions ensured. Newly created: {created}"))
