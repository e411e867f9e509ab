"""
Django admin configuration for blog_api.
"""
from django.contrib import admin
from django.utils.html import format_html

from .models import Article, Category, Media, Profile, RefreshToken, Tag


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "parent", "slug", "articles_count", "is_active", "created_at"]
    list_filter = ["is_active", "parent"]
    search_fields = ["name", "slug", "description"]
    readonly_fields = ["slug", "articles_count", "created_at", "updated_at"]
    ordering = ["name"]
    actions = ["activate_categories", "deactivate_categories"]

    @admin.action(description="Activate selected categories")
    def activate_categories(self, request, queryset):
        count = queryset.update(is_active=True)
        self.message_user(request, f"{count} categories activated.")

    @admin.action(description="Deactivate selected categories")
    def deactivate_categories(self, request, queryset):
        count = queryset.update(is_active=False)
        self.message_user(request, f"{count} categories deactivated.")


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "articles_count", "created_at"]
    search_fields = ["name", "slug"]
    readonly_fields = ["slug", "articles_count", "created_at", "updated_at"]


@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    list_display = [
        "title_preview",
        "author",
        "status",
        "is_featured",
        "category",
        "view_count",
        "published_at",
        "created_at",
    ]
    list_filter = ["status", "is_featured", "category", "created_at"]
    search_fields = ["title", "content", "author__username"]
    raw_id_fields = ["author", "category"]
    filter_horizontal = ["tags"]
    date_hierarchy = "created_at"
    readonly_fields = [
        "slug",
        "view_count",
        "likes_count",
        "comments_count",
        "created_at",
        "updated_at",
    ]

    fieldsets = (
        (None, {
            "fields": ("title", "slug", "content", "excerpt", "author")
        }),
        ("Taxonomy", {
            "fields": ("category", "tags")
        }),
        ("Status", {
            "fields": ("status", "published_at", "is_featured")
        }),
        ("Media", {
            "fields": (
                "featured_image",
                "featured_video",
                "video_type",
                "video_thumbnail",
                "video_duration",
            ),
            "classes": ("collapse",),
        }),
        ("SEO", {
            "fields": ("seo_title", "seo_description", "seo_keywords"),
            "classes": ("collapse",),
        }),
        ("Metadata", {
            "fields": (
                "view_count",
                "likes_count",
                "comments_count",
                "created_at",
                "updated_at",
            ),
            "classes": ("collapse",),
        }),
    )

    actions = ["publish_articles", "archive_articles", "feature_articles", "unfeature_articles"]

    def title_preview(self, obj):
        """Truncated title for list display."""
        return obj.title[:60] + "..." if len(obj.title) > 60 else obj.title

    title_preview.short_description = "Title"

    @admin.action(description="Publish selected articles")
    def publish_articles(self, request, queryset):
        for article in queryset:
            article.set_status(Article.STATUS_PUBLISHED)
        self.message_user(request, f"{queryset.count()} articles published.")

    @admin.action(description="Archive selected articles")
    def archive_articles(self, request, queryset):
        for article in queryset:
            article.set_status(Article.STATUS_ARCHIVED)
        self.message_user(request, f"{queryset.count()} articles archived.")

    @admin.action(description="Feature selected articles")
    def feature_articles(self, request, queryset):
        count = queryset.update(is_featured=True)
        self.message_user(request, f"{count} articles featured.")

    @admin.action(description="Unfeature selected articles")
    def unfeature_articles(self, request, queryset):
        count = queryset.update(is_featured=False)
        self.message_user(request, f"{count} articles unfeatured.")


@admin.register(Media)
class MediaAdmin(admin.ModelAdmin):
    list_display = [
        "thumbnail_preview",
        "original_name",
        "type",
        "mimetype",
        "size",
        "dimensions",
        "user",
        "article",
        "created_at",
    ]
    list_filter = ["type", "is_public", "created_at"]
    search_fields = ["original_name", "alt", "caption"]
    raw_id_fields = ["user", "article"]
    readonly_fields = [
        "content_hash",
        "size",
        "width",
        "height",
        "mimetype",
        "type",
        "created_at",
        "updated_at",
    ]

    def thumbnail_preview(self, obj):
        if obj.is_image and obj.file:
            return format_html(
                '<img src="{}" style="max-width: 50px; max-height: 50px;" />',
                obj.file.url,
            )
        return obj.type

    thumbnail_preview.short_description = "Preview"

    def dimensions(self, obj):
        if obj.width and obj.height:
            return f"{obj.width}x{obj.height}"
        return "-"

    dimensions.short_description = "Size"


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ["user", "role", "is_verified", "created_at"]
    list_filter = ["role", "is_verified"]
    search_fields = ["user__username", "user__email"]
    raw_id_fields = ["user"]


@admin.register(RefreshToken)
class RefreshTokenAdmin(admin.ModelAdmin):
    list_display = ["user", "device_info", "created_at", "expires_at", "is_expired"]
    search_fields = ["user__username", "device_info"]
    raw_id_fields = ["user"]
    readonly_fields = ["jti", "created_at"]

    @admin.display(boolean=True, description="Expired")
    def is_expired(self, obj):
        return obj.is_expired
