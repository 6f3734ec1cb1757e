# bo_core/common/permissions.py

from __future__ import annotations

from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission

from bo_core.iam.constants import SUPER_PERMISSION, permission_name
from bo_core.iam.permission_cache import get_permission_cache

ACTION_VERBS = {
    "list": "read",
    "retrieve": "read",
    "create": "create",
    "update": "update",
    "partial_update": "update",
    "destroy": "delete",
}


def user_has_permission(user, *names: str) -> bool:
    """
    Superusers pass. Everyone else is checked against the cached set for
    their role; `system:admin` in that set passes every check.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return False
    if getattr(user, "is_superuser", False):
        return True
    return get_permission_cache().has_permission(user.id, *names)


def require_permission(request, *names: str) -> None:
    if not user_has_permission(request.user, *names):
        raise PermissionDenied("You do not have permission to perform this action.")


class BaseResourcePermission(BasePermission):
    """
    Maps a viewset action to `{resource}:{verb}` and checks it against the
    permission cache.

    - Unknown actions are denied unless listed in `extra_actions`.
    - A failing permission store propagates (fail closed).
    """
    message = "You do not have permission to perform this action."

    resource: str = ""
    # custom @action name -> verb, e.g. {"set_permissions": "update"}
    extra_actions: dict[str, str] = {}

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs or "public_id" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def required_permission(self, request, view) -> str | None:
        action = self._infer_action(request, view)
        verb = self.extra_actions.get(action) or ACTION_VERBS.get(action)
        if verb is None:
            return None
        return permission_name(self.resource, verb)

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        required = self.required_permission(request, view)
        if required is None:
            return bool(getattr(user, "is_superuser", False))
        return user_has_permission(user, required)


class CategoryPermission(BaseResourcePermission):
    resource = "category"


class ItemPermission(BaseResourcePermission):
    resource = "item"


class OrderPermission(BaseResourcePermission):
    resource = "order"


class UserPermission(BaseResourcePermission):
    resource = "user"


class RoleAccessPermission(BaseResourcePermission):
    resource = "role"
    extra_actions = {"set_permissions": "update", "catalog": "read"}


class SystemAdminPermission(BasePermission):
    """Audit system view, retention and number formats."""
    message = "You do not have permission to perform this action."

    def has_permission(self, request, view) -> bool:
        return user_has_permission(request.user, SUPER_PERMISSION)
