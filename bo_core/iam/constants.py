# bo_core/iam/constants.py
from __future__ import annotations

SUPER_PERMISSION = "system:admin"

RESOURCES = ("category", "item", "order", "user", "role")
ACTIONS = ("create", "read", "update", "delete")


def permission_name(resource: str, action: str) -> str:
    return f"{resource}:{action}"


ALL_PERMISSIONS: tuple[str, ...] = tuple(
    permission_name(resource, action) for resource in RESOURCES for action in ACTIONS
) + (SUPER_PERMISSION,)
