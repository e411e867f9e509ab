"""
Authentication views: sign up, sign in, tokens and passwords.
"""
import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.tokens import default_token_generator
from django.core.mail import send_mail
from django.db.models import Q
from django.utils import timezone
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode

from ..conf import api_settings
from ..exceptions import BadRequest, NotFound, TokenError, Unauthorized
from ..forms import (
    ChangePasswordForm,
    EmailForm,
    RefreshForm,
    ResetPasswordForm,
    SigninForm,
    SignupForm,
)
from ..models import RefreshToken
from ..ratelimit import rate_limit
from ..serializers import camel_keys, serialize_user
from ..tokens import (
    clear_auth_cookies,
    cleanup_user_tokens,
    issue_tokens,
    set_auth_cookies,
    verify_refresh_token,
)
from .base import ApiView, LoginRequiredMixin, json_body

logger = logging.getLogger(__name__)

User = get_user_model()


class SignupView(ApiView):
    @rate_limit(
        "signup",
        "SIGNUP_RATE_LIMIT",
        "Too many sign-up attempts. Try again in 1 hour.",
    )
    def post(self, request):
        data = SignupForm(json_body(request)).validated()

        exists = User.objects.filter(
            Q(email__iexact=data["email"]) | Q(username__iexact=data["username"])
        ).exists()
        if exists:
            raise BadRequest("User already exists")

        user = User.objects.create_user(
            username=data["username"],
            email=data["email"],
            password=data["password"],
            first_name=data["first_name"],
            last_name=data["last_name"],
        )
        logger.info("New user signed up: %s", user.username)

        tokens = issue_tokens(user, request)
        response = self.respond(
            {"user": serialize_user(user), "tokens": camel_keys(tokens)},
            message="User created successfully",
            status=201,
        )
        return set_auth_cookies(response, tokens)


class SigninView(ApiView):
    @rate_limit(
        "signin",
        "SIGNIN_RATE_LIMIT",
        "Too many sign-in attempts. Try again in 15 minutes.",
    )
    def post(self, request):
        data = SigninForm(json_body(request)).validated()

        user = User.objects.filter(email__iexact=data["email"]).first()
        if user is None:
            logger.warning("Sign-in attempt for unknown email %s", data["email"])
            raise NotFound("User not found")

        if not user.check_password(data["password"]):
            logger.warning("Failed sign-in for user %s", user.username)
            raise Unauthorized("Incorrect password")

        if not user.is_active:
            raise Unauthorized("Account deactivated")

        user.last_login = timezone.now()
        user.save(update_fields=["last_login"])
        cleanup_user_tokens(user)

        tokens = issue_tokens(user, request)
        response = self.respond(
            {"user": serialize_user(user), "tokens": camel_keys(tokens)},
            message="Signed in successfully",
        )
        return set_auth_cookies(response, tokens)


def _refresh_token_from(request):
    token = request.COOKIES.get(api_settings.REFRESH_COOKIE_NAME)
    if token or request.content_type != "application/json":
        return token
    return RefreshForm(json_body(request)).validated().get("refresh_token")


class SignoutView(ApiView):
    def post(self, request):
        token = _refresh_token_from(request)
        if token:
            try:
                payload = verify_refresh_token(token)
            except TokenError:
                pass
            else:
                RefreshToken.remove(payload["id"], payload["jti"])

        response = self.respond(message="Signed out successfully")
        return clear_auth_cookies(response)


class RefreshView(ApiView):
    def post(self, request):
        token = _refresh_token_from(request)
        if not token:
            raise Unauthorized("Refresh token missing")

        try:
            payload = verify_refresh_token(token)
        except TokenError:
            raise Unauthorized("Invalid refresh token")

        user = User.objects.filter(pk=payload["id"]).first()
        if user is None or not user.is_active:
            raise Unauthorized("User not found or inactive")

        # Rotate: the presented token can be used exactly once
        if not RefreshToken.remove(user, payload["jti"]):
            logger.warning("Reuse of revoked refresh token for user %s", user.pk)
            raise Unauthorized("Invalid refresh token")

        tokens = issue_tokens(user, request)
        response = self.respond(
            {"tokens": camel_keys(tokens)}, message="Token refreshed successfully"
        )
        return set_auth_cookies(response, tokens)


class ForgotPasswordView(ApiView):
    def post(self, request):
        data = EmailForm(json_body(request)).validated()

        user = User.objects.filter(email__iexact=data["email"]).first()
        if user is None:
            raise NotFound("User not found")

        uid = urlsafe_base64_encode(force_bytes(user.pk))
        token = default_token_generator.make_token(user)
        link = api_settings.PASSWORD_RESET_URL.format(uid=uid, token=token)
        send_mail(
            "Reset your password",
            f"Use the following link to choose a new password:\n\n{link}\n",
            api_settings.DEFAULT_FROM_EMAIL,
            [user.email],
        )
        logger.info("Password reset email sent to user %s", user.pk)

        return self.respond(message="Password reset email sent")


class ResetPasswordView(ApiView):
    def post(self, request):
        data = ResetPasswordForm(json_body(request)).validated()

        try:
            pk = force_str(urlsafe_base64_decode(data["uid"]))
            user = User.objects.filter(pk=pk).first()
        except (TypeError, ValueError, OverflowError):
            user = None

        if user is None or not default_token_generator.check_token(user, data["token"]):
            raise BadRequest("Invalid or expired reset token")

        user.set_password(data["new_password"])
        user.save()
        RefreshToken.objects.filter(user=user).delete()

        return self.respond(message="Password reset successfully")


class ChangePasswordView(LoginRequiredMixin, ApiView):
    def put(self, request):
        data = ChangePasswordForm(json_body(request)).validated()
        user = request.user

        if not user.check_password(data["current_password"]):
            raise Unauthorized("Current password is incorrect")

        user.set_password(data["new_password"])
        user.save()

        return self.respond(message="Password changed successfully")


class CurrentUserView(LoginRequiredMixin, ApiView):
    """Return the authenticated user. Serves both auth/check and auth/profile."""

    def get(self, request):
        return self.respond({"user": serialize_user(request.user)})


class VerifyTokenView(LoginRequiredMixin, ApiView):
    def get(self, request):
        return self.respond({"user": serialize_user(request.user)}, message="Token valid")

    post = get
