# bo_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from bo_core.audit import retention
from bo_core.audit.api.serializers import AuditEntrySerializer, AuditStatsSerializer, RetentionKindSerializer
from bo_core.audit.filters import AuditEntryFilter
from bo_core.audit.models import AuditEntry, AuditResource
from bo_core.audit.selectors import audit_entries_qs, entries_for_resource
from bo_core.common.api.pagination import paginate
from bo_core.common.permissions import SystemAdminPermission, require_permission
from bo_core.iam.constants import SUPER_PERMISSION, permission_name
from bo_core.iam.selectors import actor_names


def _actor_context(rows) -> dict:
    return {"actor_names": actor_names(r.actor_id for r in rows)}


class ResourceAuditView(APIView):
    """
    History of one record. Needs read access to that kind of record;
    `auth` history is admin-only.
    """

    @extend_schema(tags=["Audit"], responses={200: AuditEntrySerializer(many=True)})
    def get(self, request, resource: str, resource_id: str):
        if resource not in AuditResource.values:
            raise ValidationError({"resource": f"Unknown resource: {resource}"})

        if resource == AuditResource.AUTH:
            require_permission(request, SUPER_PERMISSION)
        else:
            require_permission(request, permission_name(resource, "read"))

        qs = entries_for_resource(resource=resource, resource_id=resource_id)
        return paginate(request, qs, AuditEntrySerializer, context_for=_actor_context)


class AuditEventViewSet(viewsets.GenericViewSet):
    """
    System-wide audit log, newest first.
    """
    permission_classes = [SystemAdminPermission]
    serializer_class = AuditEntrySerializer
    queryset = AuditEntry.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditEntrySerializer(many=True)},
        parameters=[
            OpenApiParameter(name="resource", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="action", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(
                name="actor",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Substring of the actor's name or username.",
            ),
            OpenApiParameter(name="date_from", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="date_to", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        filterset = AuditEntryFilter(request.query_params, queryset=audit_entries_qs(), request=request)
        if not filterset.is_valid():
            raise ValidationError(filterset.errors)
        return paginate(request, filterset.qs, AuditEntrySerializer, context_for=_actor_context)


class RetentionPreviewView(APIView):
    permission_classes = [SystemAdminPermission]

    @extend_schema(tags=["Audit"], responses={200: RetentionKindSerializer(many=True)})
    def get(self, request):
        plan = retention.preview()
        return Response(
            {
                "total": sum(p["count"] for p in plan.values()),
                "by_resource": {k: RetentionKindSerializer(v).data for k, v in plan.items()},
            }
        )


class RetentionCleanupView(APIView):
    permission_classes = [SystemAdminPermission]

    @extend_schema(tags=["Audit"], request=None, responses={200: OpenApiTypes.OBJECT})
    def post(self, request):
        deleted = retention.cleanup()
        return Response(
            {"total": sum(deleted.values()), "deleted": deleted},
            status=status.HTTP_200_OK,
        )


class AuditStatsView(APIView):
    permission_classes = [SystemAdminPermission]

    @extend_schema(tags=["Audit"], responses={200: AuditStatsSerializer})
    def get(self, request):
        return Response(AuditStatsSerializer(retention.statistics()).data)
