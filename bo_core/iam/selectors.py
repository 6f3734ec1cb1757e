# bo_core/iam/selectors.py
from __future__ import annotations

from django.db.models import Q, QuerySet
from rest_framework.exceptions import NotFound

from bo_core.iam.models import Permission, Role, RolePermission, UserProfile


def load_permissions(actor_id) -> frozenset[str]:
    """
    Permission names granted to the actor through their role.
    No profile, no role, or a deleted profile -> empty set.
    """
    role_id = (
        UserProfile.objects.alive()
        .filter(user_id=actor_id)
        .values_list("role_id", flat=True)
        .first()
    )
    if role_id is None:
        return frozenset()
    return frozenset(
        RolePermission.objects.filter(role_id=role_id).values_list("permission__name", flat=True)
    )


def roles_qs() -> QuerySet[Role]:
    return Role.objects.prefetch_related("permissions").order_by("name")


def get_role(role_id) -> Role:
    role = roles_qs().filter(id=role_id).first()
    if role is None:
        raise NotFound("Role not found.")
    return role


def permissions_qs() -> QuerySet[Permission]:
    return Permission.objects.order_by("name")


def profiles_filtered(*, search: str | None = None, role_id: int | None = None) -> QuerySet[UserProfile]:
    qs = UserProfile.objects.alive().select_related("user", "role").order_by("name")
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(user__email__icontains=search))
    if role_id is not None:
        qs = qs.filter(role_id=role_id)
    return qs


def get_profile(public_id: str) -> UserProfile:
    profile = UserProfile.objects.alive().select_related("user", "role").filter(public_id=public_id).first()
    if profile is None:
        raise NotFound("User not found.")
    return profile


def actor_names(actor_ids) -> dict[str, str]:
    """Display names keyed by actor id (as stored on audit entries)."""
    ids = [int(a) for a in {str(a) for a in actor_ids} if str(a).isdigit()]
    if not ids:
        return {}
    rows = UserProfile.objects.filter(user_id__in=ids).values_list("user_id", "name")
    names = {str(user_id): name for user_id, name in rows}

    from django.contrib.auth import get_user_model

    missing = [i for i in ids if str(i) not in names]
    if missing:
        User = get_user_model()
        for user_id, username in User.objects.filter(id__in=missing).values_list("id", User.USERNAME_FIELD):
            names[str(user_id)] = username
    return names
