# bo_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from bo_core.iam.models import Permission, Role, RolePermission, UserProfile


@admin.register(Permission)
class PermissionAdmin(admin.ModelAdmin):
    list_display = ("name", "description")
    search_fields = ("name", "description")
    ordering = ("name",)


class RolePermissionInline(admin.TabularInline):
    model = RolePermission
    extra = 0
    autocomplete_fields = ("permission",)


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ("name", "description", "updated_at")
    search_fields = ("name",)
    inlines = [RolePermissionInline]
    ordering = ("name",)


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("public_id", "name", "user", "role", "updated_at", "deleted_at")
    list_filter = ("role",)
    search_fields = ("name", "user__username", "user__email")
    readonly_fields = ("public_id", "created_at", "updated_at", "deleted_at")
    ordering = ("name",)
