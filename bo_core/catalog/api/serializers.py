# bo_core/catalog/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from bo_core.catalog.models import Category, Item


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["public_id", "name", "created_at", "updated_at"]
        read_only_fields = fields


class CategoryWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)


class CategoryUpdateSerializer(CategoryWriteSerializer):
    updated_at = serializers.IntegerField()


class ItemSerializer(serializers.ModelSerializer):
    category = serializers.CharField(source="category.public_id", read_only=True)
    category_name = serializers.CharField(source="category.name", read_only=True)

    class Meta:
        model = Item
        fields = ["public_id", "name", "price", "category", "category_name", "created_at", "updated_at"]
        read_only_fields = fields


class ItemCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    category = serializers.CharField(max_length=32)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)


class ItemUpdateSerializer(serializers.Serializer):
    updated_at = serializers.IntegerField()
    name = serializers.CharField(max_length=255, required=False)
    category = serializers.CharField(max_length=32, required=False)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
