"""
Per-client rate limiting backed by the Django cache.
"""
import functools
import logging

from django.core.cache import cache

from .conf import api_settings
from .exceptions import TooManyRequests

logger = logging.getLogger(__name__)


def client_ip(request):
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "unknown")


def hit(scope, key, limit, window):
    """
    Count one request for ``key`` in ``scope``.

    Returns False once more than ``limit`` requests were made within
    ``window`` seconds of the first one.
    """
    cache_key = f"blog_api:ratelimit:{scope}:{key}"
    if cache.add(cache_key, 1, timeout=window):
        return True
    try:
        count = cache.incr(cache_key)
    except ValueError:
        # Expired between add() and incr()
        cache.set(cache_key, 1, timeout=window)
        return True
    return count <= limit


def rate_limit(scope, setting_name, message=None):
    """
    Decorate a view method with a rate limit.

    ``setting_name`` names a BLOG_API setting holding
    ``(max requests, window seconds)``.
    """

    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, request, *args, **kwargs):
            limit, window = getattr(api_settings, setting_name)
            ip = client_ip(request)
            if not hit(scope, ip, limit, window):
                logger.warning("Rate limit exceeded for %s on %s", ip, scope)
                raise TooManyRequests(message)
            return method(self, request, *args, **kwargs)

        return wrapper

    return decorator
