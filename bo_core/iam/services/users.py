# bo_core/iam/services/users.py
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework.exceptions import ValidationError

from bo_core.audit.models import AuditAction, AuditResource
from bo_core.audit.services import TRACKED_FIELDS, compute_changes, get_audit_recorder, snapshot
from bo_core.common.concurrency import conditional_soft_delete, conditional_update
from bo_core.iam.models import Role, UserProfile
from bo_core.iam.permission_cache import get_permission_cache
from bo_core.iam.selectors import get_profile

USER_FIELDS = TRACKED_FIELDS["user"]


def _ensure_role(role_id) -> None:
    if role_id is not None and not Role.objects.filter(id=role_id).exists():
        raise ValidationError({"role": "Role not found."})


class UserService:
    @staticmethod
    @transaction.atomic
    def create_user(
        *,
        actor_id,
        username: str,
        password: str,
        name: str,
        email: str = "",
        role_id: int | None = None,
    ) -> UserProfile:
        User = get_user_model()
        if User.objects.filter(**{User.USERNAME_FIELD: username}).exists():
            raise ValidationError({"username": "A user with this username already exists."})
        _ensure_role(role_id)

        user = User.objects.create_user(username=username, email=email or "", password=password)
        profile = UserProfile.objects.create(user=user, name=name, role_id=role_id)

        get_audit_recorder().record(
            actor_id=actor_id,
            action=AuditAction.CREATE,
            resource=AuditResource.USER,
            resource_id=profile.public_id,
            metadata={"name": name, "email": user.email, "role_id": role_id},
        )
        return profile

    @staticmethod
    @transaction.atomic
    def update_user(*, actor_id, public_id: str, expected_version: int, **fields) -> UserProfile:
        """
        Optimistic update of name / email / role_id. Only keys present in
        `fields` are written.
        """
        unknown = set(fields) - set(USER_FIELDS)
        if unknown:
            raise ValidationError({"detail": f"Unsupported fields: {', '.join(sorted(unknown))}"})
        if not fields:
            raise ValidationError({"detail": "No fields to update."})

        profile = get_profile(public_id)
        before = snapshot(profile, USER_FIELDS)

        if "role_id" in fields:
            _ensure_role(fields["role_id"])

        patch = {k: fields[k] for k in ("name", "role_id") if k in fields}
        if not patch:
            # email lives on the auth user; the profile row still carries the version
            patch = {"name": profile.name}

        updated = conditional_update(
            UserProfile,
            lookup={"public_id": public_id},
            expected_version=expected_version,
            patch=patch,
            label="User",
        )

        if "email" in fields:
            get_user_model().objects.filter(id=updated.user_id).update(email=fields["email"] or "")
            updated.user.refresh_from_db(fields=["email"])

        changes = compute_changes(before, snapshot(updated, USER_FIELDS), USER_FIELDS)
        get_audit_recorder().record(
            actor_id=actor_id,
            action=AuditAction.UPDATE,
            resource=AuditResource.USER,
            resource_id=public_id,
            changes=changes,
        )

        if before["role_id"] != updated.role_id:
            transaction.on_commit(get_permission_cache().invalidate_all)
        return updated

    @staticmethod
    @transaction.atomic
    def delete_user(*, actor_id, public_id: str, expected_version: int | None = None) -> None:
        profile = get_profile(public_id)
        conditional_soft_delete(
            UserProfile,
            lookup={"public_id": public_id},
            expected_version=expected_version,
            label="User",
        )
        get_user_model().objects.filter(id=profile.user_id).update(is_active=False)

        get_audit_recorder().record(
            actor_id=actor_id,
            action=AuditAction.DELETE,
            resource=AuditResource.USER,
            resource_id=public_id,
            metadata={"name": profile.name, "email": profile.email},
        )
        transaction.on_commit(get_permission_cache().invalidate_all)
