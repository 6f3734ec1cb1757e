# bo_core/iam/services/roles.py
from __future__ import annotations

from typing import Iterable

from django.db import IntegrityError, transaction
from rest_framework.exceptions import NotFound, ValidationError

from bo_core.audit.models import AuditAction, AuditResource
from bo_core.audit.services import TRACKED_FIELDS, compute_changes, get_audit_recorder, snapshot
from bo_core.common.api.exceptions import DependencyConflict
from bo_core.iam.models import Permission, Role, RolePermission, UserProfile
from bo_core.iam.permission_cache import get_permission_cache

ROLE_FIELDS = TRACKED_FIELDS["role"]


def _invalidate_permissions_on_commit() -> None:
    cache = get_permission_cache()
    # once now, once more after commit
    cache.invalidate_all()
    transaction.on_commit(cache.invalidate_all)


def _resolve_permissions(names: Iterable[str]) -> list[Permission]:
    wanted = sorted(set(names))
    found = {p.name: p for p in Permission.objects.filter(name__in=wanted)}
    unknown = [n for n in wanted if n not in found]
    if unknown:
        raise ValidationError({"permissions": [f"Unknown permission: {n}" for n in unknown]})
    return [found[n] for n in wanted]


class RoleService:
    @staticmethod
    def _locked(role_id) -> Role:
        role = Role.objects.select_for_update().filter(id=role_id).first()
        if role is None:
            raise NotFound("Role not found.")
        return role

    @staticmethod
    @transaction.atomic
    def create_role(*, actor_id, name: str, description: str = "", permissions: Iterable[str] = ()) -> Role:
        name = (name or "").strip()
        if not name:
            raise ValidationError({"name": "Name is required."})
        grants = _resolve_permissions(permissions)

        try:
            with transaction.atomic():
                role = Role.objects.create(name=name, description=description or "")
        except IntegrityError:
            raise ValidationError({"name": "A role with this name already exists."})

        RolePermission.objects.bulk_create([RolePermission(role=role, permission=p) for p in grants])

        get_audit_recorder().record(
            actor_id=actor_id,
            action=AuditAction.CREATE,
            resource=AuditResource.ROLE,
            resource_id=role.id,
            metadata={"name": role.name, "permissions": [p.name for p in grants]},
        )
        _invalidate_permissions_on_commit()
        return role

    @staticmethod
    @transaction.atomic
    def update_role(*, actor_id, role_id, name: str | None = None, description: str | None = None) -> Role:
        role = RoleService._locked(role_id)
        before = snapshot(role, ROLE_FIELDS)

        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError({"name": "Name cannot be blank."})
            if Role.objects.filter(name=name).exclude(id=role.id).exists():
                raise ValidationError({"name": "A role with this name already exists."})
            role.name = name
        if description is not None:
            role.description = description

        changes = compute_changes(before, snapshot(role, ROLE_FIELDS), ROLE_FIELDS)
        if not changes:
            return role

        role.save(update_fields=["name", "description", "updated_at"])
        get_audit_recorder().record(
            actor_id=actor_id,
            action=AuditAction.UPDATE,
            resource=AuditResource.ROLE,
            resource_id=role.id,
            changes=changes,
        )
        _invalidate_permissions_on_commit()
        return role

    @staticmethod
    @transaction.atomic
    def set_permissions(*, actor_id, role_id, permissions: Iterable[str]) -> Role:
        role = RoleService._locked(role_id)
        grants = _resolve_permissions(permissions)

        before = sorted(role.permissions.values_list("name", flat=True))
        after = [p.name for p in grants]

        RolePermission.objects.filter(role=role).delete()
        RolePermission.objects.bulk_create([RolePermission(role=role, permission=p) for p in grants])

        changes = compute_changes({"permissions": before}, {"permissions": after}, ("permissions",))
        get_audit_recorder().record(
            actor_id=actor_id,
            action=AuditAction.UPDATE,
            resource=AuditResource.ROLE,
            resource_id=role.id,
            changes=changes,
            metadata={
                "added": sorted(set(after) - set(before)),
                "removed": sorted(set(before) - set(after)),
            },
        )
        _invalidate_permissions_on_commit()
        return role

    @staticmethod
    @transaction.atomic
    def delete_role(*, actor_id, role_id) -> None:
        role = RoleService._locked(role_id)

        holders = UserProfile.objects.alive().filter(role=role).count()
        if holders:
            noun, verb = ("user", "holds") if holders == 1 else ("users", "hold")
            raise DependencyConflict(f"Cannot delete: {holders} {noun} still {verb} this role.")

        # soft-deleted profiles keep their row; detach them so the FK allows the delete
        UserProfile.objects.filter(role=role).update(role=None)

        name = role.name
        role.delete()

        get_audit_recorder().record(
            actor_id=actor_id,
            action=AuditAction.DELETE,
            resource=AuditResource.ROLE,
            resource_id=role_id,
            metadata={"name": name},
        )
        _invalidate_permissions_on_commit()
