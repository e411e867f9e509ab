"""
Pagination and ordering helpers for list endpoints.
"""
import math

from django.core.paginator import EmptyPage, Paginator

from .text import camel_to_snake


def paginate(queryset, page, limit):
    """
    Return ``(items, pagination)`` for one page of ``queryset``.

    A page past the end yields an empty list rather than an error.
    """
    paginator = Paginator(queryset, limit)
    total = paginator.count
    total_pages = math.ceil(total / limit) if limit else 0

    try:
        items = list(paginator.page(page).object_list) if total else []
    except EmptyPage:
        items = []

    return items, {
        "currentPage": page,
        "totalPages": total_pages,
        "totalItems": total,
        "itemsPerPage": limit,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
    }


def order_by(sort, order, fields=None):
    """
    Translate a camelCase sort name and ``asc``/``desc`` into an
    ``order_by()`` argument.

    ``fields`` optionally maps sort names to model fields when they do not
    follow the camelCase to snake_case convention.
    """
    field = (fields or {}).get(sort) or camel_to_snake(sort)
    return field if order == "asc" else f"-{field}"
