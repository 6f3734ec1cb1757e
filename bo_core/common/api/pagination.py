from __future__ import annotations

from typing import Any, Callable, Sequence

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class DefaultPagination(PageNumberPagination):
    page_size = 25
    page_size_query_param = "page_size"
    max_page_size = 100


def paginate(
    request,
    queryset,
    serializer_class,
    *,
    paginator: PageNumberPagination | None = None,
    context_for: Callable[[Sequence[Any]], dict[str, Any]] | None = None,
) -> Response:
    """
    Shared pagination helper to enforce a stable contract:
      { count, next, previous, results }

    `context_for` receives the rows of the current page and returns extra
    serializer context (e.g. names resolved in one query for the page).
    """
    p = paginator or DefaultPagination()
    page = p.paginate_queryset(queryset, request)
    rows = page if page is not None else list(queryset)

    context = {"request": request}
    if context_for is not None:
        context.update(context_for(rows))

    ser = serializer_class(rows, many=True, context=context)
    if page is not None:
        return p.get_paginated_response(ser.data)
    return Response(ser.data)
