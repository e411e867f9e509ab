"""
Article, Category, and Tag models for django-blog-api.
"""
import math

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxLengthValidator, MinLengthValidator, RegexValidator
from django.db import models, transaction
from django.db.models import Avg, Case, Count, F, IntegerField, Q, Sum, Value, When
from django.utils import timezone

from ..conf import api_settings
from ..text import make_excerpt, unique_slug

hex_color_validator = RegexValidator(
    r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$",
    "Invalid hexadecimal color",
)


def weighted_search(queryset, query, weights):
    """
    Filter ``queryset`` to rows matching any word of ``query`` and order
    them by relevance.

    ``weights`` maps field names to the score a match in that field adds.
    """
    terms = query.split()
    if not terms:
        return queryset.none()

    condition = Q()
    score = Value(0)
    for term in terms:
        for field, weight in weights.items():
            lookup = {f"{field}__icontains": term}
            condition |= Q(**lookup)
            score = score + Case(
                When(Q(**lookup), then=Value(weight)),
                default=Value(0),
                output_field=IntegerField(),
            )
    return queryset.filter(condition).annotate(score=score).order_by("-score")


class SluggedModel(models.Model):
    """
    Abstract base regenerating a unique slug whenever its source field
    changes (or on first save).
    """

    slug_source = "name"
    slug_fallback = "item"
    reserved_slugs = ()

    class Meta:
        abstract = True

    def _slug_source_changed(self):
        if self.pk is None or not self.slug:
            return True
        stored = (
            type(self)._default_manager.filter(pk=self.pk)
            .values_list(self.slug_source, flat=True)
            .first()
        )
        return stored != getattr(self, self.slug_source)

    def save(self, *args, **kwargs):
        update_fields = kwargs.get("update_fields")
        if update_fields is None or self.slug_source in update_fields:
            if self._slug_source_changed():
                self.slug = unique_slug(
                    self,
                    getattr(self, self.slug_source),
                    self.slug_fallback,
                    self.reserved_slugs,
                )
                if update_fields is not None:
                    kwargs["update_fields"] = {*update_fields, "slug"}
        super().save(*args, **kwargs)


class CategoryQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True).order_by("name")

    def roots(self):
        return self.active().filter(parent__isnull=True)

    def find_by_slug(self, slug):
        return self.filter(slug=slug, is_active=True).first()

    def popular(self, limit=10):
        return self.active().order_by("-articles_count", "name")[:limit]

    def search(self, query):
        return weighted_search(self, query, {"name": 10, "description": 1})

    def hierarchy(self):
        """
        Return active categories as a tree.

        Each node is a dict ``{"category": Category, "children": [nodes]}``.
        """
        categories = list(self.active())
        by_parent = {}
        for category in categories:
            by_parent.setdefault(category.parent_id, []).append(category)

        def build(parent_id):
            return [
                {"category": category, "children": build(category.pk)}
                for category in by_parent.get(parent_id, [])
            ]

        return build(None)

    def stats(self):
        total = self.count()
        active = self.filter(is_active=True).count()
        with_articles = self.filter(articles_count__gt=0).count()
        return {
            "total_categories": total,
            "active_categories": active,
            "inactive_categories": total - active,
            "root_categories": self.filter(parent__isnull=True, is_active=True).count(),
            "categories_with_articles": with_articles,
            "empty_categories_count": total - with_articles,
        }


class Category(SluggedModel):
    """
    Hierarchical category for organizing articles.

    Categories nest via the parent field. A category can never become a
    descendant of itself, and only active categories can take children.
    """

    slug_fallback = "category"

    name = models.CharField(max_length=100, validators=[MinLengthValidator(2)])
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    description = models.TextField(blank=True, validators=[MaxLengthValidator(500)])
    color = models.CharField(
        max_length=7,
        validators=[hex_color_validator],
        default=api_settings.CATEGORY_DEFAULT_COLOR,
    )
    icon = models.CharField(max_length=50, blank=True)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="children",
    )
    is_active = models.BooleanField(default=True, db_index=True)
    articles_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CategoryQuerySet.as_manager()

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "Categories"
        indexes = [
            models.Index(fields=["is_active", "-articles_count"]),
            models.Index(fields=["parent", "is_active"]),
        ]

    def __str__(self):
        if self.parent:
            return f"{self.parent} > {self.name}"
        return self.name

    def clean(self):
        super().clean()
        if self.parent_id is None:
            return

        if self.pk is not None and self.parent_id == self.pk:
            raise ValidationError({"parent": "A category cannot be its own parent"})

        parent = Category.objects.filter(pk=self.parent_id).first()
        if parent is None:
            raise ValidationError({"parent": "Parent category does not exist"})
        if self.pk is not None and parent.is_child_of(self):
            raise ValidationError(
                {"parent": "Circular reference detected in the category hierarchy"}
            )
        if not parent.is_active:
            raise ValidationError({"parent": "Parent category is not active"})

    def get_children(self):
        """Return active child categories ordered by name."""
        return self.children.filter(is_active=True).order_by("name")

    def get_parent(self):
        return self.parent

    def get_ancestors(self):
        """Return list of ancestor categories from root to parent."""
        ancestors = []
        seen = {self.pk}
        current = self.parent
        while current and current.pk not in seen:
            ancestors.insert(0, current)
            seen.add(current.pk)
            current = current.parent
        return ancestors

    def is_child_of(self, category):
        """Check whether ``category`` is an ancestor of this category."""
        return any(ancestor.pk == category.pk for ancestor in self.get_ancestors())

    def refresh_articles_count(self):
        count = self.articles.filter(status=Article.STATUS_PUBLISHED).count()
        Category.objects.filter(pk=self.pk).update(articles_count=count)
        self.articles_count = count
        return count


class TagQuerySet(models.QuerySet):
    def find_by_slug(self, slug):
        return self.filter(slug=slug).first()

    def find_or_create(self, names):
        """
        Return tags for ``names``, matching existing tags case-insensitively
        and creating the missing ones. Blank names are skipped.
        """
        tags = []
        seen = set()
        for name in names:
            name = (name or "").strip()
            if not name:
                continue
            tag = self.filter(name__iexact=name).first()
            if tag is None:
                tag = self.create(name=name)
            if tag.pk not in seen:
                seen.add(tag.pk)
                tags.append(tag)
        return tags

    def used(self):
        return self.filter(articles_count__gt=0)

    def popular(self, limit=20):
        return self.used().order_by("-articles_count", "name")[:limit]

    def recent(self, limit=10):
        return self.used().order_by("-created_at")[:limit]

    def search(self, query):
        return weighted_search(self, query, {"name": 10, "description": 1})

    def tag_cloud(self, limit=50):
        """
        Return the most used tags, each with a ``weight`` from 1 to 6
        proportional to its article count.
        """
        tags = list(self.used().order_by("-articles_count", "name")[:limit])
        if not tags:
            return []

        max_count = tags[0].articles_count
        min_count = tags[-1].articles_count
        for tag in tags:
            if max_count == min_count:
                tag.weight = 1
            else:
                ratio = (tag.articles_count - min_count) / (max_count - min_count)
                tag.weight = math.ceil(ratio * 5) + 1
        return tags

    def cleanup(self):
        """Delete tags attached to no article at all. Returns the count."""
        unused = self.annotate(n_articles=Count("articles")).filter(n_articles=0)
        pks = list(unused.values_list("pk", flat=True))
        self.filter(pk__in=pks).delete()
        return len(pks)

    def stats(self):
        total = self.count()
        used = self.used().count()
        average = self.used().aggregate(avg=Avg("articles_count"))["avg"]
        return {
            "total_tags": total,
            "used_tags": used,
            "unused_tags": total - used,
            "avg_articles_per_tag": average or 0,
        }


class Tag(SluggedModel):
    """
    Flat tag for articles.

    Tag names are unique regardless of case.
    """

    slug_fallback = "tag"

    name = models.CharField(
        max_length=50, unique=True, validators=[MinLengthValidator(2)]
    )
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    description = models.TextField(blank=True, validators=[MaxLengthValidator(200)])
    color = models.CharField(
        max_length=7,
        validators=[hex_color_validator],
        default=api_settings.TAG_DEFAULT_COLOR,
    )
    articles_count = models.PositiveIntegerField(default=0, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TagQuerySet.as_manager()

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["-articles_count", "-created_at"]),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        super().clean()
        if self.name:
            self.name = self.name.strip()
            duplicate = Tag.objects.filter(name__iexact=self.name).exclude(pk=self.pk)
            if duplicate.exists():
                raise ValidationError({"name": "A tag with this name already exists"})

    def refresh_articles_count(self):
        count = self.articles.filter(status=Article.STATUS_PUBLISHED).count()
        Tag.objects.filter(pk=self.pk).update(articles_count=count)
        self.articles_count = count
        return count

    def merge(self, target):
        """
        Move every article of this tag onto ``target`` and delete this tag.
        """
        if target.pk == self.pk:
            raise ValueError("Cannot merge a tag into itself")

        with transaction.atomic():
            for article in self.articles.all():
                article.tags.add(target)
            self.delete()
        target.refresh_articles_count()
        return target


class ArticleQuerySet(models.QuerySet):
    SEARCH_WEIGHTS = {
        "title": 10,
        "excerpt": 5,
        "seo_keywords": 3,
        "content": 1,
    }

    def with_relations(self):
        return self.select_related("author", "category").prefetch_related("tags")

    def published(self):
        return self.filter(
            status=Article.STATUS_PUBLISHED,
            published_at__lte=timezone.now(),
        )

    def featured(self, limit=5):
        return self.published().filter(is_featured=True).order_by("-published_at")[:limit]

    def by_category(self, category):
        return self.published().filter(category=category)

    def by_tag(self, tag):
        return self.published().filter(tags=tag)

    def search(self, query):
        return weighted_search(self, query, self.SEARCH_WEIGHTS)

    def similar_to(self, article, limit=3):
        """Published articles sharing the category or a tag with ``article``."""
        condition = Q(tags__in=article.tags.all())
        if article.category_id:
            condition |= Q(category_id=article.category_id)
        return (
            self.published()
            .exclude(pk=article.pk)
            .filter(condition)
            .distinct()
            .order_by("-published_at")[:limit]
        )

    def stats(self):
        totals = self.aggregate(
            views=Sum("view_count"),
            likes=Sum("likes_count"),
            comments=Sum("comments_count"),
        )
        return {
            "total_articles": self.count(),
            "published_articles": self.filter(status=Article.STATUS_PUBLISHED).count(),
            "draft_articles": self.filter(status=Article.STATUS_DRAFT).count(),
            "archived_articles": self.filter(status=Article.STATUS_ARCHIVED).count(),
            "total_views": totals["views"] or 0,
            "total_likes": totals["likes"] or 0,
            "total_comments": totals["comments"] or 0,
        }


class Article(SluggedModel):
    """
    Blog article.

    Supports:
    - Draft / published / archived workflow
    - Featured articles and featured video
    - Auto-generated slug, excerpt and SEO metadata
    """

    STATUS_DRAFT = "draft"
    STATUS_PUBLISHED = "published"
    STATUS_ARCHIVED = "archived"
    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_PUBLISHED, "Published"),
        (STATUS_ARCHIVED, "Archived"),
    ]

    VIDEO_TYPE_CHOICES = [
        ("upload", "Upload"),
        ("youtube", "YouTube"),
        ("vimeo", "Vimeo"),
        ("url", "URL"),
    ]

    slug_source = "title"
    slug_fallback = "article"
    # Taken by the fixed public routes
    reserved_slugs = ("home", "search")

    # Content
    title = models.CharField(max_length=200, validators=[MinLengthValidator(3)])
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    content = models.TextField(validators=[MinLengthValidator(10)])
    excerpt = models.TextField(
        blank=True,
        validators=[MaxLengthValidator(500)],
        help_text="Optional manual excerpt. Auto-generated if blank.",
    )

    # Featured media
    featured_image = models.CharField(max_length=500, blank=True)
    featured_video = models.CharField(max_length=500, blank=True)
    video_type = models.CharField(max_length=10, choices=VIDEO_TYPE_CHOICES, blank=True)
    video_thumbnail = models.CharField(max_length=500, blank=True)
    video_duration = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Duration in seconds",
    )

    # Status
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_DRAFT,
        db_index=True,
    )
    published_at = models.DateTimeField(null=True, blank=True, db_index=True)
    is_featured = models.BooleanField(default=False, db_index=True)

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="blog_articles",
    )

    # Taxonomy
    category = models.ForeignKey(
        Category,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="articles",
    )
    tags = models.ManyToManyField(Tag, related_name="articles", blank=True)

    # Engagement stats
    view_count = models.PositiveIntegerField(default=0)
    likes_count = models.PositiveIntegerField(default=0)
    comments_count = models.PositiveIntegerField(default=0)

    # SEO
    seo_title = models.CharField(max_length=60, blank=True)
    seo_description = models.CharField(max_length=160, blank=True)
    seo_keywords = models.JSONField(default=list, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ArticleQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "-published_at"]),
            models.Index(fields=["author", "status"]),
            models.Index(fields=["category", "status"]),
            models.Index(fields=["is_featured", "status", "-published_at"]),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if kwargs.get("update_fields") is None:
            # Generate excerpt from content
            if not self.excerpt and self.content:
                self.excerpt = make_excerpt(self.content)

            # Set published_at on first publication
            if self.status == self.STATUS_PUBLISHED and not self.published_at:
                self.published_at = timezone.now()

            # SEO defaults
            if not self.seo_title:
                self.seo_title = self.title[:60]
            if not self.seo_description and self.excerpt:
                self.seo_description = self.excerpt[:160]
            self.seo_keywords = [
                keyword.strip().lower()
                for keyword in self.seo_keywords or []
                if keyword and keyword.strip()
            ]

        super().save(*args, **kwargs)

    def is_published(self):
        """Check if the article is published and its publication date has passed."""
        return (
            self.status == self.STATUS_PUBLISHED
            and self.published_at is not None
            and self.published_at <= timezone.now()
        )

    def can_be_edited_by(self, user):
        """Admins and moderators edit everything; authors edit their own."""
        from .accounts import Profile, get_role

        if get_role(user) in (Profile.ROLE_ADMIN, Profile.ROLE_MODERATOR):
            return True
        return user.is_authenticated and self.author_id == user.pk

    def set_status(self, status):
        """Move the article to ``status``, stamping published_at on publication."""
        self.status = status
        if status == self.STATUS_PUBLISHED and not self.published_at:
            self.published_at = timezone.now()
        self.save()

    def increment_view_count(self):
        """Increment view count atomically."""
        Article.objects.filter(pk=self.pk).update(view_count=F("view_count") + 1)
        self.refresh_from_db(fields=["view_count"])
