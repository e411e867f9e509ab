"""
Tests for slug, excerpt and key case helpers.
"""
from blog_api.text import (
    camel_to_snake,
    make_excerpt,
    slugify_text,
    snake_keys,
    snake_to_camel,
)


class TestSlugify:
    def test_basic(self):
        assert slugify_text("Hello World") == "hello-world"

    def test_collapses_separators(self):
        assert slugify_text("Hello__World  !") == "hello-world"

    def test_strips_accents(self):
        assert slugify_text("Café Crème") == "cafe-creme"

    def test_empty(self):
        assert slugify_text("") == ""
        assert slugify_text(None) == ""


class TestExcerpt:
    def test_short_content_is_kept(self):
        assert make_excerpt("<p>Short text</p>") == "Short text"

    def test_long_content_is_truncated(self):
        assert make_excerpt("abcdefghij", length=4) == "abcd..."


class TestCaseConversion:
    def test_camel_to_snake(self):
        assert camel_to_snake("publishedAt") == "published_at"
        assert camel_to_snake("isFeatured") == "is_featured"
        assert camel_to_snake("name") == "name"

    def test_snake_to_camel(self):
        assert snake_to_camel("articles_count") == "articlesCount"
        assert snake_to_camel("id") == "id"

    def test_snake_keys(self):
        assert snake_keys({"categoryId": 1, "seoTitle": "x"}) == {
            "category_id": 1,
            "seo_title": "x",
        }
