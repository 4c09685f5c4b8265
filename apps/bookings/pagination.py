"""Pagination for booking listings."""

from django.core.paginator import Page  # type: ignore
from rest_framework.exceptions import NotFound  # type: ignore
from rest_framework.pagination import PageNumberPagination  # type: ignore
from rest_framework.response import Response  # type: ignore


class BookingPagination(PageNumberPagination):
    page_size = 10
    page_query_param = "page"
    page_size_query_param = "limit"
    max_page_size = 100

    def paginate_queryset(self, queryset, request, view=None):  # type: ignore
        """A page past the last one is an empty page, not a 404."""
        self.request = request
        try:
            return super().paginate_queryset(queryset, request, view)
        except NotFound:
            number = self._requested_page_number(request)
            paginator = self.django_paginator_class(queryset, self.get_page_size(request))
            if number is None or number <= paginator.num_pages:
                raise
            self.page = Page([], number, paginator)
            return []

    def _requested_page_number(self, request):
        try:
            number = int(request.query_params.get(self.page_query_param, ""))
        except ValueError:
            return None
        return number if number > 0 else None

    def get_paginated_response(self, data):  # type: ignore
        page = self.page
        return Response(
            {
                "bookings": data,
                "pagination": {
                    "currentPage": page.number,
                    "totalPages": page.paginator.num_pages,
                    "totalBookings": page.paginator.count,
                    "hasNext": page.has_next(),
                    "hasPrev": page.has_previous(),
                },
            }
        )

    def get_paginated_response_schema(self, schema):  # type: ignore
        return {
            "type": "object",
            "properties": {
                "bookings": schema,
                "pagination": {
                    "type": "object",
                    "properties": {
                        "currentPage": {"type": "integer"},
                        "totalPages": {"type": "integer"},
                        "totalBookings": {"type": "integer"},
                        "hasNext": {"type": "boolean"},
                        "hasPrev": {"type": "boolean"},
                    },
                },
            },
        }
