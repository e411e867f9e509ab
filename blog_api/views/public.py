"""
Public, read-only article views.

Only published articles whose publication date has passed are visible.
Authentication is optional.
"""
from ..exceptions import NotFound
from ..forms import PublicArticleQueryForm, SearchQueryForm
from ..models import Article, Category, Tag
from ..pagination import paginate
from ..serializers import (
    serialize_article,
    serialize_category,
    serialize_category_ref,
    serialize_tag,
)
from .base import ApiView, query_params


def published_articles():
    return Article.objects.published().with_relations()


def _filter_by_slugs(queryset, params):
    """Narrow by category/tag slug. Unknown slugs are ignored."""
    if params.get("category"):
        category = Category.objects.find_by_slug(params["category"])
        if category:
            queryset = queryset.filter(category=category)
    if params.get("tag"):
        tag = Tag.objects.find_by_slug(params["tag"])
        if tag:
            queryset = queryset.filter(tags=tag)
    return queryset


def _article_list(articles):
    return [serialize_article(article, detail=False) for article in articles]


class HomeView(ApiView):
    def get(self, request):
        featured = (
            published_articles().filter(is_featured=True).order_by("-published_at").first()
        )
        recent = published_articles().order_by("-published_at")[:6]
        popular = published_articles().order_by("-view_count", "-published_at")[:4]
        categories = Category.objects.popular(6)

        return self.respond({
            "featured": serialize_article(featured) if featured else None,
            "recent": _article_list(recent),
            "popular": _article_list(popular),
            "categories": [
                dict(serialize_category_ref(category), articlesCount=category.articles_count)
                for category in categories
            ],
        })


class PublishedArticleListView(ApiView):
    def get(self, request):
        form = PublicArticleQueryForm(query_params(request))
        params = form.validated()
        queryset = _filter_by_slugs(published_articles(), params)
        if params["search"]:
            queryset = queryset.search(params["search"])

        queryset = queryset.order_by(form.ordering(), "-pk")
        articles, pagination = paginate(queryset, params["page"], params["limit"])
        return self.respond({"articles": _article_list(articles), "pagination": pagination})


class SearchView(ApiView):
    def get(self, request):
        params = SearchQueryForm(query_params(request)).validated()
        queryset = _filter_by_slugs(published_articles(), params)
        queryset = queryset.search(params["q"]).order_by("-score", "-published_at")

        articles, pagination = paginate(queryset, params["page"], params["limit"])
        return self.respond({
            "articles": _article_list(articles),
            "query": params["q"],
            "pagination": pagination,
        })


class CategoryArticlesView(ApiView):
    def get(self, request, slug):
        category = Category.objects.find_by_slug(slug)
        if category is None:
            raise NotFound("Category not found")

        form = PublicArticleQueryForm(query_params(request))
        params = form.validated()
        queryset = published_articles().filter(category=category).order_by(form.ordering(), "-pk")
        articles, pagination = paginate(queryset, params["page"], params["limit"])
        return self.respond({
            "category": serialize_category(category),
            "articles": _article_list(articles),
            "pagination": pagination,
        })


class TagArticlesView(ApiView):
    def get(self, request, slug):
        tag = Tag.objects.find_by_slug(slug)
        if tag is None:
            raise NotFound("Tag not found")

        form = PublicArticleQueryForm(query_params(request))
        params = form.validated()
        queryset = published_articles().filter(tags=tag).order_by(form.ordering(), "-pk")
        articles, pagination = paginate(queryset, params["page"], params["limit"])
        return self.respond({
            "tag": serialize_tag(tag),
            "articles": _article_list(articles),
            "pagination": pagination,
        })


class ArticleBySlugView(ApiView):
    def get(self, request, slug):
        article = published_articles().filter(slug=slug).first()
        if article is None:
            raise NotFound("Article not found")

        article.increment_view_count()
        similar = published_articles().similar_to(article)

        interactions = None
        if request.user.is_authenticated:
            interactions = {"isLiked": False, "isFavorited": False}

        return self.respond({
            "article": serialize_article(article),
            "similarArticles": _article_list(similar),
            "userInteractions": interactions,
        })
