# bo_core/numbering/api/serializers.py
from __future__ import annotations

from rest_framework import serializers


class NumberFormatSerializer(serializers.Serializer):
    entity_kind = serializers.CharField(read_only=True)
    pattern = serializers.CharField(read_only=True)
    is_default = serializers.BooleanField(read_only=True)
    preview = serializers.CharField(read_only=True)


class NumberFormatWriteSerializer(serializers.Serializer):
    pattern = serializers.CharField(max_length=64)


class PreviewRequestSerializer(serializers.Serializer):
    pattern = serializers.CharField(max_length=64)


class PreviewResponseSerializer(serializers.Serializer):
    pattern = serializers.CharField()
    preview = serializers.CharField()
