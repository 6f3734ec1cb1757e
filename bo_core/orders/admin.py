from django.contrib import admin

from bo_core.orders.models import Order, OrderLine


class OrderLineInline(admin.TabularInline):
    model = OrderLine
    extra = 0
    readonly_fields = ("item", "quantity", "unit_price", "line_total", "deleted_at")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "status", "total", "updated_at", "deleted_at")
    list_filter = ("status",)
    search_fields = ("order_number", "public_id")
    readonly_fields = ("public_id", "order_number", "created_at", "updated_at", "deleted_at")
    inlines = [OrderLineInline]
