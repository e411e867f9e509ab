"""
Convert model instances to JSON-ready dicts with camelCase keys.
"""
from .models import get_role
from .text import snake_to_camel


def iso(value):
    return value.isoformat() if value else None


def camel_keys(data):
    """Recursively convert dict keys from snake_case to camelCase."""
    if isinstance(data, dict):
        return {snake_to_camel(key): camel_keys(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [camel_keys(item) for item in data]
    return data


def _avatar(user):
    profile = getattr(user, "blog_profile", None)
    return (profile.avatar or None) if profile else None


def serialize_author(user):
    return {"id": user.pk, "username": user.get_username(), "avatar": _avatar(user)}


def serialize_user(user):
    profile = getattr(user, "blog_profile", None)
    return {
        "id": user.pk,
        "username": user.get_username(),
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "avatar": _avatar(user),
        "role": get_role(user),
        "isActive": user.is_active,
        "isVerified": profile.is_verified if profile else False,
        "lastLogin": iso(user.last_login),
        "createdAt": iso(user.date_joined),
    }


def serialize_category_ref(category):
    if category is None:
        return None
    return {
        "id": category.pk,
        "name": category.name,
        "slug": category.slug,
        "color": category.color,
    }


def serialize_category(category, detail=False):
    data = {
        "id": category.pk,
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "color": category.color,
        "icon": category.icon,
        "parentId": category.parent_id,
        "isActive": category.is_active,
        "articlesCount": category.articles_count,
        "createdAt": iso(category.created_at),
        "updatedAt": iso(category.updated_at),
    }
    if detail:
        data["parent"] = serialize_category_ref(category.parent)
        data["children"] = [
            dict(serialize_category_ref(child), articlesCount=child.articles_count)
            for child in category.children.order_by("name")
        ]
    return data


def serialize_hierarchy(nodes):
    return [
        dict(
            serialize_category(node["category"]),
            children=serialize_hierarchy(node["children"]),
        )
        for node in nodes
    ]


def serialize_tag_ref(tag):
    return {"id": tag.pk, "name": tag.name, "slug": tag.slug, "color": tag.color}


def serialize_tag(tag):
    data = {
        "id": tag.pk,
        "name": tag.name,
        "slug": tag.slug,
        "description": tag.description,
        "color": tag.color,
        "articlesCount": tag.articles_count,
        "createdAt": iso(tag.created_at),
        "updatedAt": iso(tag.updated_at),
    }
    if hasattr(tag, "weight"):
        data["weight"] = tag.weight
    return data


def serialize_article(article, detail=True):
    """
    Serialize an article. List views pass ``detail=False`` to leave out
    the content.
    """
    data = {
        "id": article.pk,
        "title": article.title,
        "slug": article.slug,
        "excerpt": article.excerpt,
        "featuredImage": article.featured_image or None,
        "featuredVideo": article.featured_video or None,
        "videoType": article.video_type or None,
        "videoThumbnail": article.video_thumbnail or None,
        "videoDuration": article.video_duration,
        "status": article.status,
        "publishedAt": iso(article.published_at),
        "isFeatured": article.is_featured,
        "author": serialize_author(article.author),
        "category": serialize_category_ref(article.category),
        "tags": [serialize_tag_ref(tag) for tag in article.tags.all()],
        "viewCount": article.view_count,
        "likesCount": article.likes_count,
        "commentsCount": article.comments_count,
        "seoTitle": article.seo_title,
        "seoDescription": article.seo_description,
        "seoKeywords": article.seo_keywords,
        "createdAt": iso(article.created_at),
        "updatedAt": iso(article.updated_at),
    }
    if detail:
        data["content"] = article.content
    return data


def serialize_media(media):
    return {
        "id": media.pk,
        "url": media.url,
        "filename": media.filename,
        "originalName": media.original_name,
        "mimetype": media.mimetype,
        "size": media.size,
        "type": media.type,
        "width": media.width,
        "height": media.height,
        "alt": media.alt,
        "caption": media.caption,
        "userId": media.user_id,
        "articleId": media.article_id,
        "isPublic": media.is_public,
        "createdAt": iso(media.created_at),
    }
