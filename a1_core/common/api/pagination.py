# a1_core/common/api/pagination.py
from __future__ import annotations

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class DefaultPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100


def paginate(request, queryset, serializer_class, *, paginator: PageNumberPagination | None = None) -> Response:
    """
    Every list endpoint answers {count, next, previous, results}.

    Scoped querysets are filtered before they get here, so `count` is the
    number of records the caller may see, never the table size.
    """
    paginator = paginator or DefaultPagination()
    context = {"request": request}

    page = paginator.paginate_queryset(queryset, request)
    if page is None:
        return Response(serializer_class(queryset, many=True, context=context).data)

    return paginator.get_paginated_response(serializer_class(page, many=True, context=context).data)
