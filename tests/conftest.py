"""
Shared fixtures for django-blog-api tests.
"""
import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import Client

from blog_api.models import Article, Category, Profile, Tag
from blog_api.tokens import generate_access_token

User = get_user_model()


def make_user(username, role=Profile.ROLE_USER, password="testpass123", **extra):
    user = User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password=password,
        **extra,
    )
    if role != Profile.ROLE_USER:
        Profile.objects.filter(user=user).update(role=role)
    return user


@pytest.fixture(autouse=True)
def clear_cache():
    """Rate limit counters live in the cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user(db):
    """Create a regular user."""
    return make_user("testuser")


@pytest.fixture
def other_user(db):
    return make_user("otheruser")


@pytest.fixture
def moderator(db):
    return make_user("moderator", role=Profile.ROLE_MODERATOR)


@pytest.fixture
def admin(db):
    return make_user("admin", role=Profile.ROLE_ADMIN)


@pytest.fixture
def api_client():
    """Return a factory building a test client authenticated as a user."""

    def build(user=None):
        if user is None:
            return Client()
        return Client(HTTP_AUTHORIZATION=f"Bearer {generate_access_token(user)}")

    return build


@pytest.fixture
def user_client(api_client, user):
    return api_client(user)


@pytest.fixture
def moderator_client(api_client, moderator):
    return api_client(moderator)


@pytest.fixture
def admin_api_client(api_client, admin):
    return api_client(admin)


@pytest.fixture
def category(db):
    """Create a test category."""
    return Category.objects.create(name="Test Category")


@pytest.fixture
def tag(db):
    """Create a test tag."""
    return Tag.objects.create(name="python")


@pytest.fixture
def article(db, user, category, tag):
    """Create a published article."""
    article = Article.objects.create(
        title="Test Article",
        content="This is the content of a test article.",
        author=user,
        category=category,
        status=Article.STATUS_PUBLISHED,
    )
    article.tags.add(tag)
    return article


@pytest.fixture
def draft(db, user, category):
    """Create a draft article."""
    return Article.objects.create(
        title="Draft Article",
        content="This article is not published yet.",
        author=user,
        category=category,
    )
