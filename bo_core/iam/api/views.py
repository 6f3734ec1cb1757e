# bo_core/iam/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from bo_core.common.api.pagination import paginate
from bo_core.common.api.params import expected_version
from bo_core.common.invalidation import mark_stale
from bo_core.common.permissions import RoleAccessPermission, UserPermission
from bo_core.iam.api.serializers import (
    PermissionSerializer,
    RolePermissionsSerializer,
    RoleSerializer,
    RoleUpdateSerializer,
    RoleWriteSerializer,
    UserCreateSerializer,
    UserProfileSerializer,
    UserUpdateSerializer,
)
from bo_core.iam.models import Role, UserProfile
from bo_core.iam.selectors import get_profile, get_role, permissions_qs, profiles_filtered, roles_qs
from bo_core.iam.services.roles import RoleService
from bo_core.iam.services.users import UserService


class RoleViewSet(viewsets.GenericViewSet):
    """
    Roles and their permission sets. Every write clears the permission cache.
    """
    permission_classes = [RoleAccessPermission]
    serializer_class = RoleSerializer
    queryset = Role.objects.none()
    lookup_value_regex = r"\d+"

    @extend_schema(tags=["IAM"], responses={200: RoleSerializer(many=True)})
    def list(self, request):
        return paginate(request, roles_qs(), RoleSerializer)

    @extend_schema(tags=["IAM"], responses={200: RoleSerializer})
    def retrieve(self, request, pk=None):
        return Response(RoleSerializer(get_role(pk)).data)

    @extend_schema(tags=["IAM"], request=RoleWriteSerializer, responses={201: RoleSerializer})
    def create(self, request):
        ser = RoleWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        role = RoleService.create_role(
            actor_id=request.user.id,
            name=ser.validated_data["name"],
            description=ser.validated_data.get("description", ""),
            permissions=ser.validated_data.get("permissions", []),
        )
        res = Response(RoleSerializer(get_role(role.id)).data, status=status.HTTP_201_CREATED)
        return mark_stale(res, "role")

    @extend_schema(tags=["IAM"], request=RoleUpdateSerializer, responses={200: RoleSerializer})
    def partial_update(self, request, pk=None):
        ser = RoleUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        RoleService.update_role(actor_id=request.user.id, role_id=pk, **ser.validated_data)
        return mark_stale(Response(RoleSerializer(get_role(pk)).data), "role")

    @extend_schema(tags=["IAM"], responses={204: None})
    def destroy(self, request, pk=None):
        RoleService.delete_role(actor_id=request.user.id, role_id=pk)
        return mark_stale(Response(status=status.HTTP_204_NO_CONTENT), "role")

    @extend_schema(tags=["IAM"], request=RolePermissionsSerializer, responses={200: RoleSerializer})
    @action(detail=True, methods=["put"], url_path="permissions")
    def set_permissions(self, request, pk=None):
        ser = RolePermissionsSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        RoleService.set_permissions(
            actor_id=request.user.id,
            role_id=pk,
            permissions=ser.validated_data["permissions"],
        )
        return mark_stale(Response(RoleSerializer(get_role(pk)).data), "role")

    @extend_schema(tags=["IAM"], responses={200: PermissionSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="permissions")
    def catalog(self, request):
        return Response(PermissionSerializer(permissions_qs(), many=True).data)


class UserViewSet(viewsets.GenericViewSet):
    """
    Back-office users. Updates and deletes are optimistic: send the
    `updated_at` you read.
    """
    permission_classes = [UserPermission]
    serializer_class = UserProfileSerializer
    queryset = UserProfile.objects.none()
    lookup_field = "public_id"

    @extend_schema(
        tags=["IAM"],
        responses={200: UserProfileSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="search", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="role", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        role = request.query_params.get("role")
        qs = profiles_filtered(
            search=request.query_params.get("search") or None,
            role_id=int(role) if role and role.isdigit() else None,
        )
        return paginate(request, qs, UserProfileSerializer)

    @extend_schema(tags=["IAM"], responses={200: UserProfileSerializer})
    def retrieve(self, request, public_id=None):
        return Response(UserProfileSerializer(get_profile(public_id)).data)

    @extend_schema(tags=["IAM"], request=UserCreateSerializer, responses={201: UserProfileSerializer})
    def create(self, request):
        ser = UserCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        profile = UserService.create_user(
            actor_id=request.user.id,
            username=data["username"],
            password=data["password"],
            name=data["name"],
            email=data.get("email", ""),
            role_id=data.get("role"),
        )
        res = Response(UserProfileSerializer(get_profile(profile.public_id)).data, status=status.HTTP_201_CREATED)
        return mark_stale(res, "user")

    @extend_schema(tags=["IAM"], request=UserUpdateSerializer, responses={200: UserProfileSerializer})
    def partial_update(self, request, public_id=None):
        ser = UserUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)

        version = data.pop("updated_at")
        if "role" in data:
            data["role_id"] = data.pop("role")

        UserService.update_user(
            actor_id=request.user.id,
            public_id=public_id,
            expected_version=version,
            **data,
        )
        return mark_stale(Response(UserProfileSerializer(get_profile(public_id)).data), "user")

    @extend_schema(
        tags=["IAM"],
        responses={204: None},
        parameters=[
            OpenApiParameter(name="updated_at", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def destroy(self, request, public_id=None):
        UserService.delete_user(
            actor_id=request.user.id,
            public_id=public_id,
            expected_version=expected_version(request, required=False),
        )
        return mark_stale(Response(status=status.HTTP_204_NO_CONTENT), "user")
