"""
Text helpers: slugs, excerpts and key case conversion.
"""
import re

from django.utils.html import strip_tags
from django.utils.text import slugify

from .conf import api_settings

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def slugify_text(value):
    """
    Slugify a title or name.

    Underscores and repeated separators collapse into a single hyphen,
    so "Hello__World !" becomes "hello-world".
    """
    return re.sub(r"[-_]+", "-", slugify(value or "")).strip("-")


def unique_slug(instance, value, fallback="item", reserved=()):
    """
    Return a slug for ``instance`` that no other row of its model uses.

    Collisions, and slugs listed in ``reserved``, are resolved by appending
    -1, -2, ... to the base slug.
    """
    max_length = api_settings.SLUG_MAX_LENGTH
    base_slug = slugify_text(value)[:max_length].strip("-") or fallback
    queryset = type(instance)._default_manager.all()

    slug = base_slug
    counter = 1
    while (
        slug in reserved
        or queryset.filter(slug=slug).exclude(pk=instance.pk).exists()
    ):
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug


def make_excerpt(content, length=None):
    """Plain-text excerpt of HTML/markdown content."""
    if length is None:
        length = api_settings.EXCERPT_LENGTH
    plain = strip_tags(content or "")
    excerpt = plain[:length].strip()
    if len(plain) > length:
        excerpt += "..."
    return excerpt


def camel_to_snake(name):
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def snake_to_camel(name):
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def snake_keys(data):
    """Convert the top-level keys of a request body to snake_case."""
    return {camel_to_snake(key): value for key, value in data.items()}
