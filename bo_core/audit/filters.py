# bo_core/audit/filters.py
from __future__ import annotations

import django_filters
from django.contrib.auth import get_user_model
from django.db.models import CharField, Q
from django.db.models.functions import Cast

from bo_core.audit.models import AuditAction, AuditEntry, AuditResource


class AuditEntryFilter(django_filters.FilterSet):
    resource = django_filters.ChoiceFilter(choices=AuditResource.choices)
    action = django_filters.ChoiceFilter(choices=AuditAction.choices)
    resource_id = django_filters.CharFilter()
    actor = django_filters.CharFilter(method="filter_actor_name", label="Actor name contains")
    date_from = django_filters.DateFilter(field_name="occurred_at", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="occurred_at", lookup_expr="date__lte")

    class Meta:
        model = AuditEntry
        fields = ["resource", "action", "resource_id", "actor", "date_from", "date_to"]

    def filter_actor_name(self, queryset, name, value):
        if not value:
            return queryset
        User = get_user_model()
        matching = (
            User.objects.filter(
                Q(profile__name__icontains=value) | Q(**{f"{User.USERNAME_FIELD}__icontains": value})
            )
            .annotate(actor_key=Cast("id", output_field=CharField()))
            .values("actor_key")
        )
        return queryset.filter(actor_id__in=matching)
