# bo_core/numbering/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from bo_core.common.permissions import SystemAdminPermission
from bo_core.numbering.api.serializers import (
    NumberFormatSerializer,
    NumberFormatWriteSerializer,
    PreviewRequestSerializer,
    PreviewResponseSerializer,
)
from bo_core.numbering.models import NumberFormat
from bo_core.numbering.services import NumberFormatService


def _format_payload(entity_kind: str) -> dict:
    pattern = NumberFormatService.get_pattern(entity_kind)
    return {
        "entity_kind": entity_kind,
        "pattern": pattern,
        "is_default": not NumberFormat.objects.filter(entity_kind=entity_kind).exists(),
        "preview": NumberFormatService.preview(pattern),
    }


class NumberFormatViewSet(viewsets.GenericViewSet):
    """
    Number formats per entity kind (`order`, `invoice`, `quote`, ...).
    """
    permission_classes = [SystemAdminPermission]
    serializer_class = NumberFormatSerializer
    queryset = NumberFormat.objects.none()
    lookup_field = "entity_kind"
    lookup_value_regex = r"[a-z_]+"

    @extend_schema(tags=["Numbering"], responses={200: NumberFormatSerializer})
    def retrieve(self, request, entity_kind=None):
        return Response(NumberFormatSerializer(_format_payload(entity_kind)).data)

    @extend_schema(tags=["Numbering"], request=NumberFormatWriteSerializer, responses={200: NumberFormatSerializer})
    def update(self, request, entity_kind=None):
        ser = NumberFormatWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        NumberFormatService.set_pattern(
            entity_kind=entity_kind,
            pattern=ser.validated_data["pattern"],
            actor_id=request.user.id,
        )
        return Response(NumberFormatSerializer(_format_payload(entity_kind)).data)

    @extend_schema(tags=["Numbering"], request=PreviewRequestSerializer, responses={200: PreviewResponseSerializer})
    @action(detail=False, methods=["post"], url_path="preview")
    def preview(self, request):
        ser = PreviewRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        pattern = ser.validated_data["pattern"]
        return Response({"pattern": pattern, "preview": NumberFormatService.preview(pattern)})
