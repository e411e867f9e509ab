"""
Media models for django-blog-api.

Uploads are deduplicated per user by the SHA256 hash of their content.
"""
import hashlib
import logging
import os
import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Count, Sum
from django.utils import timezone

from ..conf import api_settings

logger = logging.getLogger(__name__)


def get_upload_path(instance, filename):
    """Generate a unique upload path, keeping the original extension."""
    ext = os.path.splitext(filename)[1].lower()
    prefix = instance.type or Media.type_for_mimetype(instance.mimetype)
    directory = timezone.now().strftime(api_settings.MEDIA_UPLOAD_PATH)
    return f"{directory}{prefix}-{uuid.uuid4().hex}{ext}"


def hash_file(file_obj):
    """Return the SHA256 hex digest of an uploaded file."""
    hasher = hashlib.sha256()
    for chunk in file_obj.chunks():
        hasher.update(chunk)
    file_obj.seek(0)
    return hasher.hexdigest()


class MediaQuerySet(models.QuerySet):
    def _of_type(self, media_type):
        if media_type:
            return self.filter(type=media_type)
        return self

    def for_user(self, user, media_type=None):
        return self.filter(user=user)._of_type(media_type).order_by("-created_at")

    def for_article(self, article, media_type=None):
        return self.filter(article=article)._of_type(media_type).order_by("-created_at")

    def public(self, media_type=None):
        return self.filter(is_public=True)._of_type(media_type).order_by("-created_at")

    def orphaned(self):
        return self.filter(article__isnull=True)

    def cleanup(self, max_age=None):
        """
        Delete orphaned media older than ``max_age``. Returns the count.

        Rows are deleted one by one so their files are removed too.
        """
        if max_age is None:
            max_age = api_settings.ORPHAN_MEDIA_MAX_AGE
        cutoff = timezone.now() - max_age
        deleted = 0
        for media in self.orphaned().filter(created_at__lt=cutoff):
            media.delete()
            deleted += 1
        return deleted

    def stats(self):
        result = {
            "total": 0,
            "total_size": 0,
            "images": {"count": 0, "size": 0},
            "videos": {"count": 0, "size": 0},
            "documents": {"count": 0, "size": 0},
        }
        rows = self.order_by().values("type").annotate(count=Count("pk"), size=Sum("size"))
        for row in rows:
            size = row["size"] or 0
            result["total"] += row["count"]
            result["total_size"] += size
            result[f"{row['type']}s"] = {"count": row["count"], "size": size}
        return result


class Media(models.Model):
    """
    Uploaded image, video or document.

    Media may be attached to an article. Unattached ("orphaned") media is
    removed by the cleanup_media management command after a grace period.
    """

    TYPE_IMAGE = "image"
    TYPE_VIDEO = "video"
    TYPE_DOCUMENT = "document"
    TYPE_CHOICES = [
        (TYPE_IMAGE, "Image"),
        (TYPE_VIDEO, "Video"),
        (TYPE_DOCUMENT, "Document"),
    ]

    file = models.FileField(upload_to=get_upload_path, max_length=255)
    original_name = models.CharField(max_length=255)
    mimetype = models.CharField(max_length=100, db_index=True)
    size = models.PositiveBigIntegerField(default=0, help_text="File size in bytes")
    content_hash = models.CharField(
        max_length=64,
        db_index=True,
        help_text="SHA256 hash of file content for deduplication",
    )
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, db_index=True)
    width = models.PositiveIntegerField(null=True, blank=True)
    height = models.PositiveIntegerField(null=True, blank=True)
    alt = models.CharField(max_length=200, blank=True)
    caption = models.CharField(max_length=500, blank=True)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="blog_media",
    )
    article = models.ForeignKey(
        "blog_api.Article",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="media",
    )
    is_public = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = MediaQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Media"
        verbose_name_plural = "Media"
        indexes = [
            models.Index(fields=["user", "type", "-created_at"]),
            models.Index(fields=["article", "type"]),
            models.Index(fields=["is_public", "type", "-created_at"]),
        ]

    def __str__(self):
        return f"{self.original_name} ({self.type})"

    @staticmethod
    def type_for_mimetype(mimetype):
        if mimetype.startswith("image/"):
            return Media.TYPE_IMAGE
        if mimetype.startswith("video/"):
            return Media.TYPE_VIDEO
        return Media.TYPE_DOCUMENT

    def clean(self):
        super().clean()
        self.type = self.type_for_mimetype(self.mimetype)

        if self.mimetype not in api_settings.allowed_media_types:
            raise ValidationError({"mimetype": f"File type not allowed: {self.mimetype}"})

        max_size = api_settings.MEDIA_MAX_SIZES[self.type]
        if self.size > max_size:
            raise ValidationError({
                "size": f"File too large. Maximum size for {self.type}: "
                        f"{max_size // (1024 * 1024)}MB"
            })

    def save(self, *args, **kwargs):
        self.type = self.type_for_mimetype(self.mimetype)
        super().save(*args, **kwargs)

    @property
    def url(self):
        if self.file:
            return self.file.url
        return None

    @property
    def filename(self):
        return os.path.basename(self.file.name) if self.file else ""

    @property
    def is_image(self):
        return self.type == self.TYPE_IMAGE

    @property
    def is_video(self):
        return self.type == self.TYPE_VIDEO

    @classmethod
    def get_or_create_from_upload(cls, file_obj, user):
        """
        Return the user's existing media for this content or store a new one.

        Args:
            file_obj: Django UploadedFile
            user: uploading user

        Returns:
            (Media instance, created boolean)
        """
        content_hash = hash_file(file_obj)

        existing = cls.objects.filter(user=user, content_hash=content_hash).first()
        if existing:
            return existing, False

        mimetype = getattr(file_obj, "content_type", "") or "application/octet-stream"
        item = cls(
            file=file_obj,
            original_name=os.path.basename(file_obj.name),
            mimetype=mimetype,
            size=file_obj.size,
            content_hash=content_hash,
            type=cls.type_for_mimetype(mimetype),
            user=user,
        )
        item.full_clean(exclude=["file"])
        item.save()

        if item.is_image:
            item._extract_image_metadata()

        return item, True

    def _extract_image_metadata(self):
        """Read image dimensions with Pillow."""
        from PIL import Image

        try:
            with self.file.open("rb") as fh, Image.open(fh) as img:
                self.width, self.height = img.size
        except (OSError, ValueError) as exc:
            logger.info("Could not read dimensions of %s: %s", self.original_name, exc)
            return

        self.save(update_fields=["width", "height", "updated_at"])
