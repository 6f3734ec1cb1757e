# bo_core/catalog/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from bo_core.catalog.api.serializers import (
    CategorySerializer,
    CategoryUpdateSerializer,
    CategoryWriteSerializer,
    ItemCreateSerializer,
    ItemSerializer,
    ItemUpdateSerializer,
)
from bo_core.catalog.models import Category, Item
from bo_core.catalog.selectors import categories_filtered, get_category, get_item, items_filtered
from bo_core.catalog.services import CategoryService, ItemService
from bo_core.common.api.pagination import paginate
from bo_core.common.api.params import expected_version
from bo_core.common.invalidation import mark_stale
from bo_core.common.permissions import CategoryPermission, ItemPermission

VERSION_PARAM = OpenApiParameter(
    name="updated_at",
    type=OpenApiTypes.INT,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Version token read by the client; the delete is refused if the record changed since.",
)


class CategoryViewSet(viewsets.GenericViewSet):
    permission_classes = [CategoryPermission]
    serializer_class = CategorySerializer
    queryset = Category.objects.none()
    lookup_field = "public_id"

    @extend_schema(
        tags=["Catalog"],
        responses={200: CategorySerializer(many=True)},
        parameters=[
            OpenApiParameter(name="search", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        qs = categories_filtered(search=request.query_params.get("search") or None)
        return paginate(request, qs, CategorySerializer)

    @extend_schema(tags=["Catalog"], responses={200: CategorySerializer})
    def retrieve(self, request, public_id=None):
        return Response(CategorySerializer(get_category(public_id)).data)

    @extend_schema(tags=["Catalog"], request=CategoryWriteSerializer, responses={201: CategorySerializer})
    def create(self, request):
        ser = CategoryWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        category = CategoryService.create_category(actor_id=request.user.id, name=ser.validated_data["name"])
        res = Response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)
        return mark_stale(res, "category")

    @extend_schema(tags=["Catalog"], request=CategoryUpdateSerializer, responses={200: CategorySerializer})
    def update(self, request, public_id=None):
        ser = CategoryUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        category = CategoryService.update_category(
            actor_id=request.user.id,
            public_id=public_id,
            expected_version=ser.validated_data["updated_at"],
            name=ser.validated_data["name"],
        )
        return mark_stale(Response(CategorySerializer(category).data), "category")

    @extend_schema(tags=["Catalog"], responses={204: None}, parameters=[VERSION_PARAM])
    def destroy(self, request, public_id=None):
        CategoryService.delete_category(
            actor_id=request.user.id,
            public_id=public_id,
            expected_version=expected_version(request, required=False),
        )
        return mark_stale(Response(status=status.HTTP_204_NO_CONTENT), "category")


class ItemViewSet(viewsets.GenericViewSet):
    permission_classes = [ItemPermission]
    serializer_class = ItemSerializer
    queryset = Item.objects.none()
    lookup_field = "public_id"

    @extend_schema(
        tags=["Catalog"],
        responses={200: ItemSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="search", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="category", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        qs = items_filtered(
            search=request.query_params.get("search") or None,
            category_public_id=request.query_params.get("category") or None,
        )
        return paginate(request, qs, ItemSerializer)

    @extend_schema(tags=["Catalog"], responses={200: ItemSerializer})
    def retrieve(self, request, public_id=None):
        return Response(ItemSerializer(get_item(public_id)).data)

    @extend_schema(tags=["Catalog"], request=ItemCreateSerializer, responses={201: ItemSerializer})
    def create(self, request):
        ser = ItemCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        item = ItemService.create_item(
            actor_id=request.user.id,
            name=ser.validated_data["name"],
            category_public_id=ser.validated_data["category"],
            price=ser.validated_data["price"],
        )
        res = Response(ItemSerializer(get_item(item.public_id)).data, status=status.HTTP_201_CREATED)
        return mark_stale(res, "item")

    @extend_schema(tags=["Catalog"], request=ItemUpdateSerializer, responses={200: ItemSerializer})
    def partial_update(self, request, public_id=None):
        ser = ItemUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        ItemService.update_item(
            actor_id=request.user.id,
            public_id=public_id,
            expected_version=data["updated_at"],
            name=data.get("name"),
            price=data.get("price"),
            category_public_id=data.get("category"),
        )
        return mark_stale(Response(ItemSerializer(get_item(public_id)).data), "item")

    @extend_schema(tags=["Catalog"], responses={204: None}, parameters=[VERSION_PARAM])
    def destroy(self, request, public_id=None):
        ItemService.delete_item(
            actor_id=request.user.id,
            public_id=public_id,
            expected_version=expected_version(request, required=False),
        )
        return mark_stale(Response(status=status.HTTP_204_NO_CONTENT), "item")
