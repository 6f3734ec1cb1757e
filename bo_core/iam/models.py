# bo_core/iam/models.py
from django.conf import settings
from django.db import models

from bo_core.common.models import VersionedModel


class Permission(models.Model):
    """
    Atomic capability named `{resource}:{action}`, e.g. "order:update".
    `system:admin` grants everything.
    """
    name = models.CharField(max_length=64, unique=True)
    description = models.CharField(max_length=255, blank=True)

    class Meta:
        db_table = "iam_permission"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Role(models.Model):
    name = models.CharField(max_length=64, unique=True)
    description = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    permissions = models.ManyToManyField(Permission, through="RolePermission", related_name="roles")

    class Meta:
        db_table = "iam_role"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class RolePermission(models.Model):
    """
    Many-to-many Role <-> Permission.
    """
    role = models.ForeignKey(Role, on_delete=models.CASCADE, related_name="role_permissions")
    permission = models.ForeignKey(Permission, on_delete=models.PROTECT, related_name="permission_roles")

    class Meta:
        db_table = "iam_role_permission"
        constraints = [
            models.UniqueConstraint(fields=["role", "permission"], name="uq_role_permission"),
        ]


class UserProfile(VersionedModel):
    """
    Back-office identity anchored to Django's AUTH_USER_MODEL.
    Carries the display name, the (single) role and the version columns.
    """
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    name = models.CharField(max_length=255)
    role = models.ForeignKey(Role, on_delete=models.PROTECT, related_name="profiles", null=True, blank=True)

    class Meta:
        db_table = "iam_user_profile"
        indexes = [
            models.Index(fields=["role"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.user.username})"

    @property
    def email(self) -> str:
        return self.user.email
