"""
Signal handlers for django-blog-api.

Keeps denormalized article counts on categories and tags current and
creates a Profile for every new user.
"""
from django.conf import settings
from django.db.models.signals import (
    m2m_changed,
    post_delete,
    post_save,
    pre_delete,
    pre_save,
)
from django.dispatch import receiver

from .models import Article, Category, Media, Profile, Tag


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_profile(sender, instance, created, **kwargs):
    if created:
        Profile.objects.get_or_create(user=instance)


@receiver(pre_save, sender=Article)
def remember_previous_category(sender, instance, **kwargs):
    """Stash the stored category so a move refreshes both counts."""
    instance._previous_category_id = None
    if instance.pk:
        instance._previous_category_id = (
            Article.objects.filter(pk=instance.pk)
            .values_list("category_id", flat=True)
            .first()
        )


def _refresh_category_counts(*category_ids):
    for category in Category.objects.filter(pk__in=[pk for pk in category_ids if pk]):
        category.refresh_articles_count()


def _refresh_tag_counts(tags):
    for tag in tags:
        tag.refresh_articles_count()


@receiver(post_save, sender=Article)
def article_saved(sender, instance, **kwargs):
    _refresh_category_counts(
        instance.category_id, getattr(instance, "_previous_category_id", None)
    )
    _refresh_tag_counts(instance.tags.all())


@receiver(pre_delete, sender=Article)
def remember_article_tags(sender, instance, **kwargs):
    instance._deleted_tag_ids = list(instance.tags.values_list("pk", flat=True))


@receiver(post_delete, sender=Article)
def article_deleted(sender, instance, **kwargs):
    _refresh_category_counts(instance.category_id)
    _refresh_tag_counts(
        Tag.objects.filter(pk__in=getattr(instance, "_deleted_tag_ids", []))
    )


@receiver(m2m_changed, sender=Article.tags.through)
def article_tags_changed(sender, instance, action, reverse, pk_set, **kwargs):
    if action not in ("post_add", "post_remove", "post_clear", "pre_clear"):
        return

    if reverse:
        # instance is a Tag
        if action != "pre_clear":
            instance.refresh_articles_count()
        return

    if action == "pre_clear":
        instance._cleared_tag_ids = list(instance.tags.values_list("pk", flat=True))
        return
    if action == "post_clear":
        pk_set = getattr(instance, "_cleared_tag_ids", [])
    _refresh_tag_counts(Tag.objects.filter(pk__in=pk_set or []))


@receiver(post_delete, sender=Media)
def delete_media_file(sender, instance, **kwargs):
    if instance.file:
        instance.file.delete(save=False)
