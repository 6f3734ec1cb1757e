# bo_core/common/api/exceptions.py
"""
Error taxonomy and the JSON error envelope.

Every error response has the shape
    {"error": {"code", "message", "details", "request_id"}}
and 409s carry a code that tells the client what to do next:
`version_conflict` (refetch and retry) or `dependency_conflict` (remove the
references first).
"""
from __future__ import annotations

import logging
import re
import uuid
from typing import Any

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "HTTP_X_REQUEST_ID"
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{8,64}$")

# most specific first
_CODES: tuple[tuple[type, str], ...] = (
    (ValidationError, "validation_error"),
    (NotAuthenticated, "not_authenticated"),
    (PermissionDenied, "permission_denied"),
    (NotFound, "not_found"),
    (Http404, "not_found"),
)


def ensure_request_id(request) -> str:
    """
    The id echoed in error bodies. Reuses a well-formed `X-Request-ID` from
    the caller, otherwise mints one; either way it is pinned on the request.
    """
    if request is None:
        return uuid.uuid4().hex

    rid = getattr(request, "request_id", None)
    if rid:
        return rid

    incoming = getattr(request, "META", {}).get(REQUEST_ID_HEADER, "")
    rid = incoming if _REQUEST_ID_RE.match(incoming) else uuid.uuid4().hex
    request.request_id = rid
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": ensure_request_id(request),
        }
    }


class ConflictError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)


class VersionConflict(ConflictError):
    """The record changed after the caller read it. Refetch and retry."""
    default_detail = "Record was modified by someone else. Please refresh and try again."
    default_code = "version_conflict"


class DependencyConflict(ConflictError):
    """Other live records still reference the one being deleted."""
    default_detail = "Record is still referenced and cannot be deleted."
    default_code = "dependency_conflict"


def _code_for(exc: Exception, http_status: int) -> str:
    for exc_type, code in _CODES:
        if isinstance(exc, exc_type):
            return code
    if isinstance(exc, APIException):
        return exc.default_code or "api_error"
    return "server_error" if http_status >= 500 else "error"


def _split_payload(data: Any) -> tuple[str, Any]:
    """DRF's response data -> (message, details)."""
    if isinstance(data, dict) and "detail" in data:
        rest = {k: v for k, v in data.items() if k != "detail"}
        return str(data["detail"]), rest or None
    if isinstance(data, list) and len(data) == 1:
        return str(data[0]), None
    return "Request failed.", data


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")
    response = drf_exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "Unhandled error in %s (request_id=%s)",
            type(view).__name__ if view is not None else "unknown view",
            ensure_request_id(request),
            exc_info=exc,
        )
        body = build_error_envelope(request=request, code="server_error", message="Unexpected server error.")
        return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    message, details = _split_payload(response.data)
    body = build_error_envelope(
        request=request,
        code=_code_for(exc, response.status_code),
        message=message,
        details=details,
    )
    return Response(body, status=response.status_code, headers=response.headers)
