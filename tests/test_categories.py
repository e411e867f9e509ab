"""
Tests for the category administration endpoints.
"""
from django.urls import reverse

from blog_api.models import Category

JSON = "application/json"

LIST_URL = "/api/admin/categories"


def detail_url(category):
    return reverse("blog_api:category_detail", args=[category.pk])


class TestCategoryList:
    def test_requires_moderator(self, user_client):
        assert user_client.get(LIST_URL).status_code == 403

    def test_list_sorted_by_name(self, moderator_client, category):
        Category.objects.create(name="Alpha")
        response = moderator_client.get(LIST_URL)
        names = [c["name"] for c in response.json()["data"]["categories"]]
        assert names == ["Alpha", "Test Category"]

    def test_filter_roots(self, moderator_client, category):
        Category.objects.create(name="Child", parent=category)
        response = moderator_client.get(LIST_URL, {"parentId": "null"})
        assert [c["id"] for c in response.json()["data"]["categories"]] == [category.pk]

    def test_filter_by_parent(self, moderator_client, category):
        child = Category.objects.create(name="Child", parent=category)
        response = moderator_client.get(LIST_URL, {"parentId": category.pk})
        assert [c["id"] for c in response.json()["data"]["categories"]] == [child.pk]

    def test_filter_inactive(self, moderator_client, category):
        hidden = Category.objects.create(name="Hidden", is_active=False)
        response = moderator_client.get(LIST_URL, {"isActive": "false"})
        assert [c["id"] for c in response.json()["data"]["categories"]] == [hidden.pk]

    def test_search(self, moderator_client, category):
        Category.objects.create(name="Travel", description="Trips around the world")
        response = moderator_client.get(LIST_URL, {"search": "trips"})
        assert [c["name"] for c in response.json()["data"]["categories"]] == ["Travel"]


class TestCategoryCreate:
    def test_create(self, moderator_client, category):
        response = moderator_client.post(LIST_URL, {
            "name": "Sub Category",
            "parentId": category.pk,
            "color": "#abc",
        }, content_type=JSON)

        assert response.status_code == 201
        data = response.json()["data"]["category"]
        assert data["slug"] == "sub-category"
        assert data["color"] == "#abc"
        assert data["parent"]["id"] == category.pk

    def test_default_color(self, moderator_client):
        response = moderator_client.post(LIST_URL, {"name": "Plain"}, content_type=JSON)
        assert response.json()["data"]["category"]["color"] == "#3B82F6"

    def test_invalid_color(self, moderator_client):
        response = moderator_client.post(
            LIST_URL, {"name": "Bad", "color": "red"}, content_type=JSON
        )
        assert response.status_code == 400
        assert response.json()["errors"][0] == {
            "field": "color",
            "message": "Invalid hexadecimal color",
        }

    def test_missing_parent(self, moderator_client):
        response = moderator_client.post(
            LIST_URL, {"name": "Orphan", "parentId": 9999}, content_type=JSON
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Parent category not found"

    def test_inactive_parent(self, moderator_client, category):
        category.is_active = False
        category.save()
        response = moderator_client.post(
            LIST_URL, {"name": "Child", "parentId": category.pk}, content_type=JSON
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Parent category is not active"


class TestCategoryDetail:
    def test_detail_includes_children(self, moderator_client, category):
        child = Category.objects.create(name="Child", parent=category)
        response = moderator_client.get(detail_url(category))
        data = response.json()["data"]["category"]
        assert data["parent"] is None
        assert data["children"] == [{
            "id": child.pk,
            "name": "Child",
            "slug": "child",
            "color": "#3B82F6",
            "articlesCount": 0,
        }]

    def test_partial_update(self, moderator_client, category):
        response = moderator_client.put(
            detail_url(category), {"description": "Updated"}, content_type=JSON
        )
        data = response.json()["data"]["category"]
        assert data["name"] == "Test Category"
        assert data["description"] == "Updated"

    def test_circular_parent_rejected(self, moderator_client, category):
        child = Category.objects.create(name="Child", parent=category)
        response = moderator_client.put(
            detail_url(category), {"parentId": child.pk}, content_type=JSON
        )
        assert response.status_code == 400
        assert "Circular reference" in response.json()["message"]

    def test_move_to_root(self, moderator_client, category):
        child = Category.objects.create(name="Child", parent=category)
        response = moderator_client.put(detail_url(child), {"parentId": None}, content_type=JSON)
        assert response.json()["data"]["category"]["parentId"] is None

    def test_delete_with_children_refused(self, moderator_client, category):
        Category.objects.create(name="Child", parent=category)
        response = moderator_client.delete(detail_url(category))
        assert response.status_code == 400
        assert Category.objects.filter(pk=category.pk).exists()

    def test_delete(self, moderator_client, category):
        response = moderator_client.delete(detail_url(category))
        assert response.status_code == 200
        assert not Category.objects.exists()

    def test_toggle_status(self, moderator_client, category):
        url = reverse("blog_api:category_status", args=[category.pk])
        response = moderator_client.patch(url, {"isActive": False}, content_type=JSON)
        assert response.status_code == 200
        assert response.json()["message"] == "Category deactivated successfully"
        category.refresh_from_db()
        assert not category.is_active

    def test_toggle_status_requires_value(self, moderator_client, category):
        url = reverse("blog_api:category_status", args=[category.pk])
        response = moderator_client.patch(url, {}, content_type=JSON)
        assert response.status_code == 400


class TestCategoryOverview:
    def test_hierarchy(self, moderator_client, category):
        Category.objects.create(name="Child", parent=category)
        response = moderator_client.get(reverse("blog_api:category_hierarchy"))
        tree = response.json()["data"]["hierarchy"]
        assert tree[0]["name"] == "Test Category"
        assert tree[0]["children"][0]["name"] == "Child"
        assert tree[0]["children"][0]["children"] == []

    def test_stats(self, moderator_client, article, category):
        Category.objects.create(name="Empty")
        response = moderator_client.get(reverse("blog_api:category_stats"))
        data = response.json()["data"]
        assert data["stats"]["totalCategories"] == 2
        assert data["stats"]["categoriesWithArticles"] == 1
        assert data["topCategories"][0]["id"] == category.pk
        assert data["topCategories"][0]["articlesCount"] == 1
