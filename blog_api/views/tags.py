"""
Tag administration views. Restricted to admins and moderators.
"""
import logging

from ..exceptions import BadRequest
from ..forms import LimitQueryForm, TagBulkForm, TagForm, TagMergeForm, TagQueryForm
from ..models import Tag
from ..pagination import paginate
from ..serializers import camel_keys, serialize_tag
from .base import ApiView, ModeratorRequiredMixin, get_or_404, json_body, query_params

logger = logging.getLogger(__name__)


def apply_tag_data(tag, data):
    name = data.get("name")
    if name and Tag.objects.filter(name__iexact=name.strip()).exclude(pk=tag.pk).exists():
        raise BadRequest("A tag with this name already exists")

    for field, value in data.items():
        setattr(tag, field, value)
    if not tag.color:
        tag.color = Tag._meta.get_field("color").get_default()

    tag.full_clean(exclude=["slug"])
    tag.save()
    return tag


def _limit(request, default):
    return LimitQueryForm(query_params(request)).validated()["limit"] or default


class TagListView(ModeratorRequiredMixin, ApiView):
    def get(self, request):
        form = TagQueryForm(query_params(request))
        params = form.validated()
        queryset = Tag.objects.all()

        if params["search"]:
            queryset = queryset.search(params["search"])
        if params["with_articles"]:
            queryset = queryset.used()

        queryset = queryset.order_by(form.ordering(), "name")
        tags, pagination = paginate(queryset, params["page"], params["limit"])
        return self.respond({
            "tags": [serialize_tag(tag) for tag in tags],
            "pagination": pagination,
        })

    def post(self, request):
        data = TagForm(json_body(request)).validated()
        tag = apply_tag_data(Tag(), data)
        return self.respond(
            {"tag": serialize_tag(tag)}, message="Tag created successfully", status=201
        )


class TagBulkCreateView(ModeratorRequiredMixin, ApiView):
    def post(self, request):
        data = TagBulkForm(json_body(request)).validated()
        tags = Tag.objects.find_or_create(data["names"])
        return self.respond(
            {"tags": [serialize_tag(tag) for tag in tags]},
            message=f"{len(tags)} tag(s) created or found successfully",
            status=201,
        )


class TagMergeView(ModeratorRequiredMixin, ApiView):
    def post(self, request):
        data = TagMergeForm(json_body(request)).validated()
        source = get_or_404(Tag.objects.all(), "Source tag not found", pk=data["source_id"])
        target = get_or_404(Tag.objects.all(), "Target tag not found", pk=data["target_id"])

        source_name = source.name
        source.merge(target)
        logger.info("Tag %r merged into %r", source_name, target.name)
        return self.respond(
            {"tag": serialize_tag(target)},
            message=f'Tag "{source_name}" merged into "{target.name}" successfully',
        )


class TagCleanupView(ModeratorRequiredMixin, ApiView):
    def post(self, request):
        deleted = Tag.objects.cleanup()
        logger.info("Removed %d unused tags", deleted)
        return self.respond(
            {"deletedCount": deleted},
            message=f"{deleted} unused tag(s) deleted successfully",
        )

    delete = post


class PopularTagsView(ModeratorRequiredMixin, ApiView):
    def get(self, request):
        tags = Tag.objects.popular(_limit(request, 20))
        return self.respond({"tags": [serialize_tag(tag) for tag in tags]})


class TagCloudView(ModeratorRequiredMixin, ApiView):
    def get(self, request):
        tags = Tag.objects.tag_cloud(_limit(request, 50))
        return self.respond({"tagCloud": [serialize_tag(tag) for tag in tags]})


class TagStatsView(ModeratorRequiredMixin, ApiView):
    def get(self, request):
        return self.respond({
            "stats": camel_keys(Tag.objects.stats()),
            "recentTags": [serialize_tag(tag) for tag in Tag.objects.recent(5)],
            "topTags": [serialize_tag(tag) for tag in Tag.objects.popular(5)],
        })


class TagDetailView(ModeratorRequiredMixin, ApiView):
    def get_tag(self, pk):
        return get_or_404(Tag.objects.all(), "Tag not found", pk=pk)

    def get(self, request, pk):
        return self.respond({"tag": serialize_tag(self.get_tag(pk))})

    def put(self, request, pk):
        tag = self.get_tag(pk)
        data = TagForm(json_body(request), partial=True).validated()
        tag = apply_tag_data(tag, data)
        return self.respond({"tag": serialize_tag(tag)}, message="Tag updated successfully")

    patch = put

    def delete(self, request, pk):
        self.get_tag(pk).delete()
        return self.respond(message="Tag deleted successfully")
