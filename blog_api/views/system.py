"""
Health check and the JSON 404 handler.
"""
from django.conf import settings
from django.http import JsonResponse
from django.utils import timezone

from ..responses import error_response
from .base import ApiView


class HealthView(ApiView):
    def get(self, request):
        return JsonResponse({
            "success": True,
            "message": "API is running",
            "timestamp": timezone.now().isoformat(),
            "environment": "development" if settings.DEBUG else "production",
        })


def not_found(request, exception=None):
    """
    JSON 404 for unknown routes.

    Use as the project's ``handler404``.
    """
    return error_response(404, f"Route {request.path} not found", path=request.path)
