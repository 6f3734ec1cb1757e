# bo_core/audit/api/serializers.py
from rest_framework import serializers

from bo_core.audit.models import AuditEntry

UNKNOWN_ACTOR = "Unknown User"


class AuditEntrySerializer(serializers.ModelSerializer):
    """
    `actor` is resolved from the `actor_names` context (one query per page);
    actors that no longer exist show as "Unknown User".
    """
    actor = serializers.SerializerMethodField()
    changes = serializers.SerializerMethodField()
    metadata = serializers.SerializerMethodField()
    timestamp = serializers.DateTimeField(source="occurred_at", read_only=True)

    class Meta:
        model = AuditEntry
        fields = ["id", "action", "resource", "resource_id", "actor", "changes", "metadata", "timestamp"]
        read_only_fields = fields

    def get_actor(self, obj) -> dict:
        names = self.context.get("actor_names") or {}
        return {"id": obj.actor_id, "name": names.get(obj.actor_id, UNKNOWN_ACTOR)}

    def get_changes(self, obj) -> list:
        return [
            {"field": c.get("field"), "from": c.get("from"), "to": c.get("to")}
            for c in (obj.changes or [])
            if isinstance(c, dict)
        ]

    def get_metadata(self, obj) -> dict:
        return obj.metadata or {}


class RetentionKindSerializer(serializers.Serializer):
    retention_days = serializers.IntegerField()
    cutoff = serializers.DateTimeField()
    count = serializers.IntegerField()


class AuditStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    oldest = serializers.DateTimeField(allow_null=True)
    by_resource = serializers.DictField(child=serializers.IntegerField())
