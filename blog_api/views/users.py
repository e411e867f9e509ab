"""
User profile and user administration views.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction

from ..exceptions import BadRequest
from ..forms import AdminUserForm, ProfileForm, UserQueryForm
from ..models import Profile
from ..pagination import paginate
from ..serializers import serialize_user
from ..tokens import clear_auth_cookies
from .base import (
    ApiView,
    LoginRequiredMixin,
    RoleRequiredMixin,
    get_or_404,
    json_body,
    query_params,
)

logger = logging.getLogger(__name__)

User = get_user_model()

USER_FIELDS = ("first_name", "last_name", "email", "is_active")
PROFILE_FIELDS = ("avatar", "role", "is_verified")


def update_user(user, data):
    """Apply validated form data to a user and their profile."""
    profile = Profile.for_user(user)
    with transaction.atomic():
        user_fields = [name for name in USER_FIELDS if name in data]
        for name in user_fields:
            setattr(user, name, data[name])
        if user_fields:
            user.save(update_fields=user_fields)

        profile_fields = [name for name in PROFILE_FIELDS if name in data]
        for name in profile_fields:
            setattr(profile, name, data[name])
        if profile_fields:
            profile.save(update_fields=profile_fields + ["updated_at"])
    user.blog_profile = profile
    return user


class ProfileView(LoginRequiredMixin, ApiView):
    def get(self, request):
        return self.respond({"user": serialize_user(request.user)})

    def put(self, request):
        data = ProfileForm(json_body(request), partial=True).validated()
        user = update_user(request.user, data)
        return self.respond({"user": serialize_user(user)}, message="Profile updated successfully")

    def delete(self, request):
        user = request.user
        logger.info("User %s deleted their account", user.pk)
        user.delete()
        response = self.respond(message="Account deleted successfully")
        return clear_auth_cookies(response)


class UserListView(RoleRequiredMixin, ApiView):
    def get(self, request):
        params = UserQueryForm(query_params(request)).validated()
        queryset = User.objects.select_related("blog_profile").order_by("-date_joined", "-pk")

        users, pagination = paginate(queryset, params["page"], params["limit"])
        return self.respond({
            "users": [serialize_user(user) for user in users],
            "pagination": {
                "page": pagination["currentPage"],
                "limit": pagination["itemsPerPage"],
                "total": pagination["totalItems"],
                "pages": pagination["totalPages"],
            },
        })


class UserDetailView(RoleRequiredMixin, ApiView):
    def get_user(self, pk):
        return get_or_404(User.objects.all(), "User not found", pk=pk)

    def get(self, request, pk):
        return self.respond({"user": serialize_user(self.get_user(pk))})

    def put(self, request, pk):
        user = self.get_user(pk)
        data = AdminUserForm(json_body(request), partial=True).validated()

        email = data.get("email")
        if email and User.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
            raise BadRequest("Email already in use")

        user = update_user(user, data)
        logger.info("User %s updated by admin %s", user.pk, request.user.pk)
        return self.respond({"user": serialize_user(user)}, message="User updated successfully")

    def delete(self, request, pk):
        user = self.get_user(pk)
        user.delete()
        logger.info("User %s deleted by admin %s", pk, request.user.pk)
        return self.respond(message="User deleted successfully")
