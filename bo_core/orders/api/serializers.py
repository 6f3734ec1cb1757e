# bo_core/orders/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from bo_core.orders.models import Order, OrderLine, OrderStatus
from bo_core.orders.services import MAX_QUANTITY


class OrderLineSerializer(serializers.ModelSerializer):
    item = serializers.CharField(source="item.public_id", read_only=True)
    item_name = serializers.CharField(source="item.name", read_only=True)

    class Meta:
        model = OrderLine
        fields = ["id", "item", "item_name", "quantity", "unit_price", "line_total"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    lines = OrderLineSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "public_id",
            "order_number",
            "status",
            "total",
            "lines",
            "created_by_id",
            "updated_by_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderLineInputSerializer(serializers.Serializer):
    item = serializers.CharField(max_length=32)
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY)


class OrderCreateSerializer(serializers.Serializer):
    lines = OrderLineInputSerializer(many=True, allow_empty=False)


class OrderUpdateSerializer(serializers.Serializer):
    updated_at = serializers.IntegerField()
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    lines = OrderLineInputSerializer(many=True, required=False, allow_empty=False)
