"""
Base classes and helpers shared by the API views.
"""
import json

from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import RequestDataTooBig
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from ..conf import api_settings
from ..exceptions import (
    BadRequest,
    Forbidden,
    NotFound,
    PayloadTooLarge,
    TokenError,
    Unauthorized,
)
from ..models import Profile, get_role
from ..responses import api_response, error_response
from ..text import snake_keys
from ..tokens import extract_token, user_for_token

BODY_METHODS = ("POST", "PUT", "PATCH")


def json_body(request):
    """
    Decode the JSON request body into a dict with snake_case keys.

    An empty body decodes to ``{}``. Bodies are capped by both
    ``MAX_JSON_BODY_SIZE`` and Django's ``DATA_UPLOAD_MAX_MEMORY_SIZE``,
    so the latter must be raised to let the full JSON limit through.
    """
    length = int(request.META.get("CONTENT_LENGTH") or 0)
    if length > api_settings.MAX_JSON_BODY_SIZE:
        raise PayloadTooLarge("Request body too large. Maximum 10MB.")

    try:
        body = request.body
    except RequestDataTooBig:
        raise PayloadTooLarge("Request body too large")
    if not body:
        return {}

    if request.method in BODY_METHODS and request.content_type != "application/json":
        raise BadRequest("Content-Type must be application/json")

    try:
        data = json.loads(body)
    except ValueError:
        raise BadRequest("Malformed JSON body")
    if not isinstance(data, dict):
        raise BadRequest("JSON body must be an object")
    return snake_keys(data)


def query_params(request):
    return snake_keys(request.GET.dict())


def get_or_404(queryset, message, **lookup):
    obj = queryset.filter(**lookup).first()
    if obj is None:
        raise NotFound(message)
    return obj


@method_decorator(csrf_exempt, name="dispatch")
class ApiView(View):
    """
    Base view for JSON endpoints.

    Authentication is token based and optional: ``request.user`` is the
    token's user or AnonymousUser. Subclasses restrict access by mixing in
    LoginRequiredMixin or RoleRequiredMixin.
    """

    auth_error = None

    def dispatch(self, request, *args, **kwargs):
        request.user = self.authenticate(request)
        self.check_permissions(request)
        return super().dispatch(request, *args, **kwargs)

    def authenticate(self, request):
        token = extract_token(request)
        if not token:
            self.auth_error = "Access denied. Token missing"
            return AnonymousUser()

        try:
            user = user_for_token(token)
        except TokenError as exc:
            self.auth_error = str(exc)
            return AnonymousUser()

        if not user.is_active:
            self.auth_error = "Account deactivated"
            return AnonymousUser()
        return user

    def check_permissions(self, request):
        """Hook for access checks. Raise an ApiError to deny."""

    @property
    def role(self):
        return get_role(self.request.user)

    def http_method_not_allowed(self, request, *args, **kwargs):
        return error_response(405, f"Method {request.method} not allowed")

    def respond(self, data=None, message=None, status=200):
        return api_response(data, message=message, status=status)


class LoginRequiredMixin:
    """Deny unauthenticated requests with 401."""

    def check_permissions(self, request):
        if not request.user.is_authenticated:
            raise Unauthorized(self.auth_error or "Authentication required")
        super().check_permissions(request)


class RoleRequiredMixin(LoginRequiredMixin):
    """Deny requests whose user lacks one of ``roles`` with 403."""

    roles = (Profile.ROLE_ADMIN,)

    def check_permissions(self, request):
        super().check_permissions(request)
        if get_role(request.user) not in self.roles:
            raise Forbidden("Access denied. Insufficient permissions")


class ModeratorRequiredMixin(RoleRequiredMixin):
    roles = (Profile.ROLE_ADMIN, Profile.ROLE_MODERATOR)
