"""
Media upload and media administration views.
"""
import logging

from django.core.exceptions import ValidationError

from ..conf import api_settings
from ..exceptions import BadRequest
from ..forms import MediaQueryForm
from ..models import Media
from ..pagination import paginate
from ..serializers import camel_keys, serialize_media
from .base import (
    ApiView,
    LoginRequiredMixin,
    ModeratorRequiredMixin,
    get_or_404,
    query_params,
)

logger = logging.getLogger(__name__)

UPLOAD_PREFIXES = ("image/", "video/")


class ImageUploadView(LoginRequiredMixin, ApiView):
    """Accept a multipart ``image`` field holding an image or a video."""

    def post(self, request):
        upload = request.FILES.get("image")
        if upload is None:
            raise BadRequest("No file uploaded")

        content_type = upload.content_type or ""
        if not content_type.startswith(UPLOAD_PREFIXES):
            logger.warning(
                "Rejected upload %r (%s) from user %s",
                upload.name, content_type, request.user.pk,
            )
            raise BadRequest("Only images and videos are allowed")

        max_size = api_settings.UPLOAD_MAX_SIZE
        if upload.size > max_size:
            logger.warning(
                "Rejected upload %r (%d bytes) from user %s",
                upload.name, upload.size, request.user.pk,
            )
            raise BadRequest(f"File too large. Maximum {max_size // (1024 * 1024)}MB.")

        try:
            media, created = Media.get_or_create_from_upload(upload, request.user)
        except ValidationError as exc:
            logger.warning("Rejected upload %r: %s", upload.name, "; ".join(exc.messages))
            raise

        return self.respond(
            {
                "id": media.pk,
                "url": media.url,
                "filename": media.filename,
                "originalName": media.original_name,
                "size": media.size,
                "mimetype": media.mimetype,
                "width": media.width,
                "height": media.height,
            },
            message="File uploaded successfully" if created else "File already uploaded",
            status=201 if created else 200,
        )


class MediaListView(ModeratorRequiredMixin, ApiView):
    def get(self, request):
        form = MediaQueryForm(query_params(request))
        params = form.validated()
        queryset = Media.objects.all()

        if params["type"]:
            queryset = queryset.filter(type=params["type"])
        if params["article_id"]:
            queryset = queryset.filter(article_id=params["article_id"])

        queryset = queryset.order_by(form.ordering(), "-pk")
        items, pagination = paginate(queryset, params["page"], params["limit"])
        return self.respond({
            "media": [serialize_media(media) for media in items],
            "pagination": pagination,
        })


class MediaStatsView(ModeratorRequiredMixin, ApiView):
    def get(self, request):
        return self.respond({"stats": camel_keys(Media.objects.stats())})


class MediaDetailView(ModeratorRequiredMixin, ApiView):
    def get_media(self, pk):
        return get_or_404(Media.objects.all(), "Media not found", pk=pk)

    def get(self, request, pk):
        return self.respond({"media": serialize_media(self.get_media(pk))})

    def delete(self, request, pk):
        media = self.get_media(pk)
        media.delete()
        logger.info("Media %s deleted by user %s", pk, request.user.pk)
        return self.respond(message="Media deleted successfully")
