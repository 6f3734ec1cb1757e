from django.contrib import admin

from bo_core.catalog.models import Category, Item


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "public_id", "updated_at", "deleted_at")
    search_fields = ("name", "public_id")
    readonly_fields = ("public_id", "created_at", "updated_at", "deleted_at")


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "updated_at", "deleted_at")
    list_filter = ("category",)
    search_fields = ("name", "public_id")
    readonly_fields = ("public_id", "created_at", "updated_at", "deleted_at")
