# bo_core/iam/api/me.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from bo_core.iam.api.schema_serializers import MeResponseSerializer
from bo_core.iam.constants import ALL_PERMISSIONS
from bo_core.iam.models import UserProfile
from bo_core.iam.permission_cache import get_permission_cache


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MeResponseSerializer}, tags=["IAM"])
    def get(self, request):
        user = request.user
        profile = UserProfile.objects.alive().select_related("role").filter(user_id=user.id).first()

        if user.is_superuser:
            permissions = sorted(ALL_PERMISSIONS)
        else:
            permissions = sorted(get_permission_cache().permissions_for(user.id))

        return Response(
            {
                "user": {
                    "id": user.id,
                    "username": getattr(user, "username", None),
                    "email": getattr(user, "email", None),
                    "is_superuser": bool(user.is_superuser),
                },
                "profile": None
                if profile is None
                else {
                    "public_id": profile.public_id,
                    "name": profile.name,
                    "role": profile.role.name if profile.role else None,
                    "updated_at": profile.updated_at,
                },
                "permissions": permissions,
            },
            status=status.HTTP_200_OK,
        )
