"""
Middleware for django-blog-api.

Add to MIDDLEWARE in your settings:

    MIDDLEWARE = [
        ...
        'blog_api.middleware.SecurityHeadersMiddleware',
        'blog_api.middleware.SuspiciousRequestMiddleware',
        'blog_api.middleware.ApiErrorMiddleware',
    ]
"""
import logging
import re
import traceback
from urllib.parse import unquote_plus

from django.conf import settings
from django.core.exceptions import PermissionDenied, ValidationError
from django.http import Http404

from .exceptions import ApiError
from .responses import error_response

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}

SUSPICIOUS_PATTERNS = [
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"<[^>]*\bon\w+\s*=", re.IGNORECASE),
    re.compile(r"union\s+select", re.IGNORECASE),
    re.compile(r"drop\s+table", re.IGNORECASE),
    re.compile(r"delete\s+from", re.IGNORECASE),
    re.compile(r"insert\s+into", re.IGNORECASE),
    re.compile(r"update\s+set", re.IGNORECASE),
]

# Bodies larger than this are not scanned
SCAN_BODY_LIMIT = 64 * 1024


def validation_messages(exc):
    """Flatten a ValidationError into ``[{"field", "message"}]``."""
    if hasattr(exc, "error_dict"):
        return [
            {"field": field, "message": message}
            for field, messages in exc.message_dict.items()
            for message in messages
        ]
    return [{"field": None, "message": message} for message in exc.messages]


class SecurityHeadersMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers[header] = value
        return response


class SuspiciousRequestMiddleware:
    """Log requests that look like injection attempts. Nothing is blocked."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if self.is_suspicious(request):
            logger.warning(
                "Suspicious request detected: %s %s",
                request.method,
                request.get_full_path(),
                extra={
                    "ip": request.META.get("REMOTE_ADDR"),
                    "user_agent": request.headers.get("User-Agent", ""),
                },
            )
        return self.get_response(request)

    def is_suspicious(self, request):
        parts = [unquote_plus(request.get_full_path())]
        content_type = request.content_type or ""
        if content_type.startswith("application/json"):
            length = int(request.headers.get("Content-Length") or 0)
            if 0 < length <= SCAN_BODY_LIMIT:
                parts.append(request.body.decode("utf-8", errors="replace"))
        text = "\n".join(parts)
        return any(pattern.search(text) for pattern in SUSPICIOUS_PATTERNS)


class ApiErrorMiddleware:
    """Render exceptions raised by API views as JSON error envelopes."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if isinstance(exception, ApiError):
            return error_response(
                exception.status_code, exception.message, errors=exception.errors
            )

        if isinstance(exception, ValidationError):
            errors = validation_messages(exception)
            message = "Validation errors: " + ", ".join(
                f"{e['field']}: {e['message']}" if e["field"] else e["message"]
                for e in errors
            )
            return error_response(400, message, errors=errors)

        if isinstance(exception, Http404):
            return error_response(404, str(exception) or "Not found")

        if isinstance(exception, PermissionDenied):
            return error_response(403, str(exception) or "Insufficient permissions")

        logger.exception(
            "Unhandled error on %s %s", request.method, request.get_full_path()
        )
        stack = traceback.format_exc() if settings.DEBUG else None
        return error_response(500, "Internal server error", stack=stack)
