"""
Models for django-blog-api.

All models are importable from blog_api.models:

    from blog_api.models import Article, Category, Tag, Media, Profile
"""
from .accounts import Profile, RefreshToken, get_role
from .articles import Article, Category, Tag
from .media import Media

__all__ = [
    # Accounts
    "Profile",
    "RefreshToken",
    "get_role",
    # Content
    "Article",
    "Category",
    "Tag",
    # Media
    "Media",
]
