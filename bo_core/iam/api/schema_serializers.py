# bo_core/iam/api/schema_serializers.py
"""Response shapes for the auth and `me/` endpoints (schema only)."""
from __future__ import annotations

from rest_framework import serializers


class LoginRequestSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(style={"input_type": "password"})


class DetailResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class MeAccountSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField()
    email = serializers.CharField(allow_blank=True)
    is_superuser = serializers.BooleanField()


class MeProfileSerializer(serializers.Serializer):
    public_id = serializers.CharField()
    name = serializers.CharField()
    role = serializers.CharField(allow_null=True)
    updated_at = serializers.IntegerField()


class MeResponseSerializer(serializers.Serializer):
    user = MeAccountSerializer()
    profile = MeProfileSerializer(allow_null=True)
    permissions = serializers.ListField(child=serializers.CharField())
