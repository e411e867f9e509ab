"""
Article administration views.

Every authenticated user may write articles. Users with the ``user`` role
only see and edit their own; moderators and admins manage all of them.
"""
import logging

from django.db import transaction

from ..exceptions import Forbidden
from ..forms import AdminArticleQueryForm, ArticleForm, ArticleStatusForm
from ..models import Article, Category, Profile, Tag
from ..pagination import paginate
from ..serializers import camel_keys, serialize_article
from .base import (
    ApiView,
    LoginRequiredMixin,
    ModeratorRequiredMixin,
    get_or_404,
    json_body,
    query_params,
)

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    Article.STATUS_PUBLISHED: "Article published successfully",
    Article.STATUS_ARCHIVED: "Article archived successfully",
    Article.STATUS_DRAFT: "Article moved to drafts successfully",
}


def apply_article_data(article, data):
    """Copy validated form data onto ``article``, save it and set its tags."""
    data = dict(data)
    tag_names = data.pop("tags", None)

    if "category_id" in data:
        category_id = data.pop("category_id")
        if category_id is None:
            article.category = None
        else:
            article.category = get_or_404(
                Category.objects.all(), "Category not found", pk=category_id
            )

    for name, value in data.items():
        setattr(article, name, value)

    with transaction.atomic():
        article.full_clean(exclude=["slug"])
        article.save()
        if tag_names is not None:
            article.tags.set(Tag.objects.find_or_create(tag_names))
    return article


class ArticleListView(LoginRequiredMixin, ApiView):
    def get(self, request):
        form = AdminArticleQueryForm(query_params(request))
        params = form.validated()
        queryset = Article.objects.with_relations()

        if self.role == Profile.ROLE_USER:
            queryset = queryset.filter(author=request.user)

        if params["status"]:
            queryset = queryset.filter(status=params["status"])
        if params["category_id"]:
            queryset = queryset.filter(category_id=params["category_id"])
        if params["author_id"]:
            queryset = queryset.filter(author_id=params["author_id"])
        if params["is_featured"] is not None:
            queryset = queryset.filter(is_featured=params["is_featured"])
        if params["date_from"]:
            queryset = queryset.filter(created_at__gte=params["date_from"])
        if params["date_to"]:
            queryset = queryset.filter(created_at__lte=params["date_to"])

        slugs = [
            slug.strip()
            for value in request.GET.getlist("tags")
            for slug in value.split(",")
            if slug.strip()
        ]
        if slugs:
            tags = Tag.objects.filter(slug__in=slugs)
            if tags.exists():
                queryset = queryset.filter(tags__in=tags).distinct()

        if params["search"]:
            queryset = queryset.search(params["search"])

        queryset = queryset.order_by(form.ordering(), "-pk")
        articles, pagination = paginate(queryset, params["page"], params["limit"])
        return self.respond({
            "articles": [serialize_article(article, detail=False) for article in articles],
            "pagination": pagination,
        })

    def post(self, request):
        data = ArticleForm(json_body(request)).validated()
        article = apply_article_data(Article(author=request.user), data)
        logger.info("Article %s created by user %s", article.pk, request.user.pk)
        return self.respond(
            {"article": serialize_article(article)},
            message="Article created successfully",
            status=201,
        )


class ArticleStatsView(ModeratorRequiredMixin, ApiView):
    def get(self, request):
        recent = (
            Article.objects.with_relations()
            .filter(status=Article.STATUS_PUBLISHED)
            .order_by("-published_at")[:5]
        )
        return self.respond({
            "stats": camel_keys(Article.objects.stats()),
            "recentArticles": [serialize_article(article, detail=False) for article in recent],
        })


class ArticleDetailView(LoginRequiredMixin, ApiView):
    def get_article(self, pk, action="view"):
        article = get_or_404(Article.objects.with_relations(), "Article not found", pk=pk)
        if not article.can_be_edited_by(self.request.user):
            raise Forbidden(f"You are not allowed to {action} this article")
        return article

    def get(self, request, pk):
        return self.respond({"article": serialize_article(self.get_article(pk))})

    def put(self, request, pk):
        article = self.get_article(pk, "edit")
        data = ArticleForm(json_body(request), partial=True).validated()
        article = apply_article_data(article, data)
        return self.respond(
            {"article": serialize_article(article)},
            message="Article updated successfully",
        )

    patch = put

    def delete(self, request, pk):
        article = self.get_article(pk, "delete")
        article.delete()
        logger.info("Article %s deleted by user %s", pk, request.user.pk)
        return self.respond(message="Article deleted successfully")


class ArticleStatusView(ArticleDetailView):
    http_method_names = ["patch", "options"]

    def patch(self, request, pk):
        data = ArticleStatusForm(json_body(request)).validated()
        article = self.get_article(pk, "edit")
        article.set_status(data["status"])
        return self.respond(
            {"article": serialize_article(article)},
            message=STATUS_MESSAGES[data["status"]],
        )
