# bo_core/common/api/params.py
from __future__ import annotations

from rest_framework.exceptions import ValidationError

VERSION_FIELD = "updated_at"


def expected_version(request, *, required: bool = True) -> int | None:
    """
    The version token the client read, from the body or the query string.
    """
    raw = None
    if hasattr(request.data, "get"):
        raw = request.data.get(VERSION_FIELD)
    if raw in (None, ""):
        raw = request.query_params.get(VERSION_FIELD)

    if raw in (None, ""):
        if required:
            raise ValidationError({VERSION_FIELD: "This field is required."})
        return None

    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError({VERSION_FIELD: "Must be an integer timestamp (ms)."})
