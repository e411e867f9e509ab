"""
Tests for media uploads, media administration and orphan cleanup.
"""
import io
import os
from datetime import timedelta
from io import StringIO

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.urls import reverse
from django.utils import timezone
from PIL import Image

from blog_api.models import Media

UPLOAD_URL = "/api/upload/image"


def png_upload(name="pic.png", color="red", size=(4, 3)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return SimpleUploadedFile(name, buffer.getvalue(), content_type="image/png")


@pytest.fixture
def media(user):
    item, _ = Media.get_or_create_from_upload(png_upload(), user)
    return item


class TestUpload:
    def test_upload_image(self, user_client, user):
        response = user_client.post(UPLOAD_URL, {"image": png_upload()})

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["originalName"] == "pic.png"
        assert data["mimetype"] == "image/png"
        assert data["url"].startswith("/media/uploads/")
        assert data["width"] == 4
        assert data["height"] == 3

        item = Media.objects.get(pk=data["id"])
        assert item.user == user
        assert item.type == Media.TYPE_IMAGE
        assert item.filename.startswith("image-")
        assert os.path.exists(item.file.path)

    def test_same_file_is_reused(self, user_client):
        first = user_client.post(UPLOAD_URL, {"image": png_upload()}).json()["data"]
        response = user_client.post(UPLOAD_URL, {"image": png_upload("copy.png")})

        assert response.status_code == 200
        assert response.json()["data"]["id"] == first["id"]
        assert Media.objects.count() == 1

    def test_requires_auth(self, client, db):
        assert client.post(UPLOAD_URL, {"image": png_upload()}).status_code == 401

    def test_missing_file(self, user_client):
        response = user_client.post(UPLOAD_URL, {})
        assert response.status_code == 400
        assert response.json()["message"] == "No file uploaded"

    def test_rejects_non_media(self, user_client, caplog):
        upload = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")
        response = user_client.post(UPLOAD_URL, {"image": upload})

        assert response.status_code == 400
        assert response.json()["message"] == "Only images and videos are allowed"
        assert "Rejected upload" in caplog.text

    def test_rejects_disallowed_image_type(self, user_client):
        upload = SimpleUploadedFile("pic.bmp", b"BM....", content_type="image/bmp")
        response = user_client.post(UPLOAD_URL, {"image": upload})
        assert response.status_code == 400
        assert "File type not allowed" in response.json()["message"]

    def test_rejects_large_file(self, user_client, settings):
        settings.BLOG_API = dict(settings.BLOG_API, UPLOAD_MAX_SIZE=10)
        response = user_client.post(UPLOAD_URL, {"image": png_upload()})
        assert response.status_code == 400
        assert response.json()["message"].startswith("File too large")


class TestMediaAdmin:
    def test_list(self, moderator_client, media):
        response = moderator_client.get(reverse("blog_api:media_list"), {"type": "image"})
        data = response.json()["data"]
        assert [m["id"] for m in data["media"]] == [media.pk]
        assert data["media"][0]["width"] == 4

        response = moderator_client.get(reverse("blog_api:media_list"), {"type": "video"})
        assert response.json()["data"]["media"] == []

    def test_requires_moderator(self, user_client, media):
        assert user_client.get(reverse("blog_api:media_list")).status_code == 403

    def test_stats(self, moderator_client, media):
        response = moderator_client.get(reverse("blog_api:media_stats"))
        stats = response.json()["data"]["stats"]
        assert stats["total"] == 1
        assert stats["totalSize"] == media.size
        assert stats["images"] == {"count": 1, "size": media.size}
        assert stats["videos"] == {"count": 0, "size": 0}

    def test_delete_removes_file(self, moderator_client, media):
        path = media.file.path
        response = moderator_client.delete(reverse("blog_api:media_detail", args=[media.pk]))

        assert response.status_code == 200
        assert not Media.objects.exists()
        assert not os.path.exists(path)


class TestMediaCleanup:
    def test_cleanup_old_orphans(self, media, article, user):
        attached, _ = Media.get_or_create_from_upload(png_upload(color="blue"), user)
        attached.article = article
        attached.save()
        Media.objects.update(created_at=timezone.now() - timedelta(days=2))

        out = StringIO()
        call_command("cleanup_media", stdout=out)

        assert "1 orphaned media removed" in out.getvalue()
        assert list(Media.objects.all()) == [attached]

    def test_recent_orphans_kept(self, media):
        call_command("cleanup_media", stdout=StringIO())
        assert Media.objects.count() == 1

    def test_hours_option(self, media):
        Media.objects.update(created_at=timezone.now() - timedelta(hours=3))
        call_command("cleanup_media", "--hours", "2", stdout=StringIO())
        assert not Media.objects.exists()
