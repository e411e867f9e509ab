"""
Configuration settings for django-blog-api.

Override these in your Django settings.py:

    BLOG_API = {
        'JWT_SECRET': 'change-me',
        'JWT_REFRESH_SECRET': 'change-me-too',
        'PUBLIC_PAGE_SIZE': 12,
        ...
    }

JWT secrets fall back to SECRET_KEY when they are not set.

Django rejects bodies over DATA_UPLOAD_MAX_MEMORY_SIZE (2.5MB by default)
before MAX_JSON_BODY_SIZE applies. Raise it to match:

    DATA_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024
"""
from datetime import timedelta

from django.conf import settings

MB = 1024 * 1024

DEFAULTS = {
    # Pagination
    "ADMIN_PAGE_SIZE": 10,
    "PUBLIC_PAGE_SIZE": 12,
    "CATEGORY_PAGE_SIZE": 20,
    "TAG_PAGE_SIZE": 50,
    "USER_PAGE_SIZE": 10,
    "MAX_PAGE_SIZE": 100,
    "PUBLIC_MAX_PAGE_SIZE": 50,

    # JWT
    "JWT_SECRET": None,
    "JWT_REFRESH_SECRET": None,
    "JWT_ALGORITHM": "HS256",
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=15),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=7),

    # Auth cookies
    "ACCESS_COOKIE_NAME": "access_token",
    "REFRESH_COOKIE_NAME": "refresh_token",
    "COOKIE_SECURE": None,  # None means "secure unless DEBUG"
    "COOKIE_DOMAIN": None,
    "COOKIE_SAMESITE": "Strict",

    # Rate limits as (max requests, window in seconds)
    "SIGNIN_RATE_LIMIT": (5, 15 * 60),
    "SIGNUP_RATE_LIMIT": (3, 60 * 60),

    # Request bodies
    "MAX_JSON_BODY_SIZE": 10 * MB,

    # Slugs and excerpts
    "SLUG_MAX_LENGTH": 100,
    "EXCERPT_LENGTH": 200,

    # Default colors
    "CATEGORY_DEFAULT_COLOR": "#3B82F6",
    "TAG_DEFAULT_COLOR": "#6B7280",

    # Media
    "MEDIA_UPLOAD_PATH": "uploads/%Y/%m/",
    "UPLOAD_MAX_SIZE": 50 * MB,
    "ALLOWED_IMAGE_TYPES": [
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/svg+xml",
    ],
    "ALLOWED_VIDEO_TYPES": [
        "video/mp4",
        "video/webm",
        "video/ogg",
        "video/avi",
        "video/mov",
        "video/wmv",
        "video/flv",
    ],
    "ALLOWED_DOCUMENT_TYPES": [
        "application/pdf",
        "text/plain",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ],
    "MEDIA_MAX_SIZES": {
        "image": 10 * MB,
        "video": 100 * MB,
        "document": 5 * MB,
    },
    "ORPHAN_MEDIA_MAX_AGE": timedelta(hours=24),

    # Password reset link, formatted with uid and token
    "PASSWORD_RESET_URL": "/reset-password?uid={uid}&token={token}",
    "DEFAULT_FROM_EMAIL": None,
}


class BlogApiSettings:
    """
    Lazy settings object that reads from Django settings.

    Access via: from blog_api.conf import api_settings
    """

    def __getattr__(self, name):
        if name not in DEFAULTS:
            raise AttributeError(f"Invalid blog_api setting: {name}")

        user_settings = getattr(settings, "BLOG_API", {})
        return user_settings.get(name, DEFAULTS[name])

    @property
    def jwt_secret(self):
        return self.JWT_SECRET or settings.SECRET_KEY

    @property
    def jwt_refresh_secret(self):
        return self.JWT_REFRESH_SECRET or settings.SECRET_KEY

    @property
    def cookie_secure(self):
        if self.COOKIE_SECURE is None:
            return not settings.DEBUG
        return self.COOKIE_SECURE

    @property
    def allowed_media_types(self):
        return (
            self.ALLOWED_IMAGE_TYPES
            + self.ALLOWED_VIDEO_TYPES
            + self.ALLOWED_DOCUMENT_TYPES
        )


api_settings = BlogApiSettings()
