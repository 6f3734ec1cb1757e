from django.contrib import admin

from bo_core.numbering.models import NumberFormat, SequenceCounter


@admin.register(NumberFormat)
class NumberFormatAdmin(admin.ModelAdmin):
    list_display = ("entity_kind", "pattern", "updated_at", "updated_by_id")


@admin.register(SequenceCounter)
class SequenceCounterAdmin(admin.ModelAdmin):
    list_display = ("entity_kind", "period_key", "value")
    list_filter = ("entity_kind",)
    readonly_fields = ("entity_kind", "period_key", "value")
