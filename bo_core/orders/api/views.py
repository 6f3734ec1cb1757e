# bo_core/orders/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from bo_core.common.api.pagination import paginate
from bo_core.common.api.params import expected_version
from bo_core.common.invalidation import mark_stale
from bo_core.common.permissions import OrderPermission
from bo_core.orders.api.serializers import OrderCreateSerializer, OrderSerializer, OrderUpdateSerializer
from bo_core.orders.models import Order
from bo_core.orders.selectors import get_order, orders_filtered
from bo_core.orders.services import OrderService


class OrderViewSet(viewsets.GenericViewSet):
    """
    Orders with their lines. `order_number` is minted on create from the
    configured `order` number format.
    """
    permission_classes = [OrderPermission]
    serializer_class = OrderSerializer
    queryset = Order.objects.none()
    lookup_field = "public_id"

    @extend_schema(
        tags=["Orders"],
        responses={200: OrderSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="status", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="search", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        qs = orders_filtered(
            status=request.query_params.get("status") or None,
            search=request.query_params.get("search") or None,
        )
        return paginate(request, qs, OrderSerializer)

    @extend_schema(tags=["Orders"], responses={200: OrderSerializer})
    def retrieve(self, request, public_id=None):
        return Response(OrderSerializer(get_order(public_id)).data)

    @extend_schema(tags=["Orders"], request=OrderCreateSerializer, responses={201: OrderSerializer})
    def create(self, request):
        ser = OrderCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        order = OrderService.create_order(actor_id=request.user.id, lines=ser.validated_data["lines"])
        res = Response(OrderSerializer(get_order(order.public_id)).data, status=status.HTTP_201_CREATED)
        return mark_stale(res, "order")

    @extend_schema(tags=["Orders"], request=OrderUpdateSerializer, responses={200: OrderSerializer})
    def partial_update(self, request, public_id=None):
        ser = OrderUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        OrderService.update_order(
            actor_id=request.user.id,
            public_id=public_id,
            expected_version=data["updated_at"],
            status=data.get("status"),
            lines=data.get("lines"),
        )
        return mark_stale(Response(OrderSerializer(get_order(public_id)).data), "order")

    @extend_schema(
        tags=["Orders"],
        responses={204: None},
        parameters=[
            OpenApiParameter(name="updated_at", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def destroy(self, request, public_id=None):
        OrderService.delete_order(
            actor_id=request.user.id,
            public_id=public_id,
            expected_version=expected_version(request, required=False),
        )
        return mark_stale(Response(status=status.HTTP_204_NO_CONTENT), "order")
