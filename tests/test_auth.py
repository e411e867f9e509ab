"""
Tests for the authentication endpoints.
"""
import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.tokens import default_token_generator
from django.core import mail
from django.urls import reverse
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode

from blog_api.models import RefreshToken
from blog_api.tokens import issue_tokens, verify_refresh_token

User = get_user_model()

JSON = "application/json"


def post_json(client, url, data=None):
    return client.post(url, data or {}, content_type=JSON)


class TestSignup:
    url = "/api/auth/signup"

    def test_signup(self, client, db):
        """Signing up returns the user and tokens and sets cookies."""
        response = post_json(client, self.url, {
            "username": "newbie",
            "email": "newbie@example.com",
            "password": "secret1",
            "firstName": "New",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["user"]["username"] == "newbie"
        assert body["data"]["user"]["firstName"] == "New"
        assert body["data"]["user"]["role"] == "user"
        assert set(body["data"]["tokens"]) == {"accessToken", "refreshToken", "expiresIn"}
        assert response.cookies["access_token"]["httponly"]
        assert response.cookies["refresh_token"].value
        assert User.objects.get(username="newbie").check_password("secret1")

    def test_duplicate_user(self, client, user):
        response = post_json(client, self.url, {
            "username": "someone",
            "email": user.email.upper(),
            "password": "secret1",
        })
        assert response.status_code == 400
        assert response.json()["message"] == "User already exists"

    def test_validation_errors(self, client, db):
        response = post_json(client, self.url, {"username": "ab", "email": "nope"})
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"].startswith("Validation errors: ")
        fields = {error["field"] for error in body["errors"]}
        assert fields == {"username", "email", "password"}

    def test_rate_limited(self, client, db):
        for i in range(3):
            post_json(client, self.url, {
                "username": f"user{i}",
                "email": f"user{i}@example.com",
                "password": "secret1",
            })
        response = post_json(client, self.url, {
            "username": "user9",
            "email": "user9@example.com",
            "password": "secret1",
        })
        assert response.status_code == 429
        assert response.json()["message"] == "Too many sign-up attempts. Try again in 1 hour."


class TestSignin:
    url = "/api/auth/signin"

    def test_signin(self, client, user):
        response = post_json(client, self.url, {
            "email": "testuser@example.com",
            "password": "testpass123",
        })
        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == user.pk
        user.refresh_from_db()
        assert user.last_login is not None
        assert RefreshToken.objects.filter(user=user).count() == 1

    def test_unknown_email(self, client, db):
        response = post_json(client, self.url, {"email": "x@example.com", "password": "x"})
        assert response.status_code == 404

    def test_wrong_password(self, client, user):
        response = post_json(client, self.url, {"email": user.email, "password": "wrong"})
        assert response.status_code == 401
        assert response.json()["message"] == "Incorrect password"

    def test_inactive_user(self, client, user):
        user.is_active = False
        user.save()
        response = post_json(client, self.url, {"email": user.email, "password": "testpass123"})
        assert response.status_code == 401
        assert response.json()["message"] == "Account deactivated"

    def test_rate_limited(self, client, user):
        for _ in range(5):
            post_json(client, self.url, {"email": user.email, "password": "wrong"})
        response = post_json(client, self.url, {"email": user.email, "password": "testpass123"})
        assert response.status_code == 429

    def test_non_json_body_rejected(self, client, user):
        response = client.post(self.url, {"email": user.email, "password": "testpass123"})
        assert response.status_code == 400
        assert response.json()["message"] == "Content-Type must be application/json"

    def test_malformed_json(self, client, db):
        response = client.post(self.url, "{not json", content_type=JSON)
        assert response.status_code == 400
        assert response.json()["message"] == "Malformed JSON body"


class TestRefresh:
    url = "/api/auth/refresh"

    def test_refresh_from_body_rotates_token(self, client, user):
        tokens = issue_tokens(user)
        old_jti = verify_refresh_token(tokens["refresh_token"])["jti"]

        response = post_json(client, self.url, {"refreshToken": tokens["refresh_token"]})

        assert response.status_code == 200
        new_token = response.json()["data"]["tokens"]["refreshToken"]
        assert verify_refresh_token(new_token)["jti"] != old_jti
        assert not RefreshToken.objects.filter(jti=old_jti).exists()

    def test_reused_token_rejected(self, client, user):
        tokens = issue_tokens(user)
        post_json(client, self.url, {"refreshToken": tokens["refresh_token"]})

        client.cookies.clear()
        response = post_json(client, self.url, {"refreshToken": tokens["refresh_token"]})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid refresh token"

    def test_refresh_from_cookie(self, client, user):
        client.cookies["refresh_token"] = issue_tokens(user)["refresh_token"]
        response = client.post(self.url)
        assert response.status_code == 200

    def test_missing_token(self, client, db):
        response = post_json(client, self.url)
        assert response.status_code == 401
        assert response.json()["message"] == "Refresh token missing"

    def test_garbage_token(self, client, db):
        response = post_json(client, self.url, {"refreshToken": "garbage"})
        assert response.status_code == 401

    def test_inactive_user(self, client, user):
        tokens = issue_tokens(user)
        user.is_active = False
        user.save()
        response = post_json(client, self.url, {"refreshToken": tokens["refresh_token"]})
        assert response.status_code == 401
        assert response.json()["message"] == "User not found or inactive"


class TestSignout:
    def test_signout_revokes_refresh_token(self, client, user):
        client.cookies["refresh_token"] = issue_tokens(user)["refresh_token"]
        response = client.post(reverse("blog_api:signout"))

        assert response.status_code == 200
        assert not RefreshToken.objects.filter(user=user).exists()
        assert response.cookies["access_token"].value == ""
        assert response.cookies["refresh_token"].value == ""

    def test_signout_without_token(self, client, db):
        response = client.post(reverse("blog_api:signout"))
        assert response.status_code == 200


class TestPasswordReset:
    def test_forgot_password_sends_email(self, client, user):
        response = post_json(client, reverse("blog_api:forgot_password"), {"email": user.email})
        assert response.status_code == 200
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == [user.email]
        assert "/reset-password?uid=" in mail.outbox[0].body

    def test_forgot_password_unknown_email(self, client, db):
        response = post_json(
            client, reverse("blog_api:forgot_password"), {"email": "nobody@example.com"}
        )
        assert response.status_code == 404

    def test_reset_password(self, client, user):
        issue_tokens(user)
        response = post_json(client, reverse("blog_api:reset_password"), {
            "uid": urlsafe_base64_encode(force_bytes(user.pk)),
            "token": default_token_generator.make_token(user),
            "newPassword": "brandnew1",
        })
        assert response.status_code == 200
        user.refresh_from_db()
        assert user.check_password("brandnew1")
        assert not RefreshToken.objects.filter(user=user).exists()

    def test_reset_password_bad_token(self, client, user):
        response = post_json(client, reverse("blog_api:reset_password"), {
            "uid": urlsafe_base64_encode(force_bytes(user.pk)),
            "token": "bad-token",
            "newPassword": "brandnew1",
        })
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid or expired reset token"


class TestAuthenticatedEndpoints:
    def test_change_password(self, user_client, user):
        response = user_client.put(
            reverse("blog_api:change_password"),
            {"currentPassword": "testpass123", "newPassword": "changed1"},
            content_type=JSON,
        )
        assert response.status_code == 200
        user.refresh_from_db()
        assert user.check_password("changed1")

    def test_change_password_wrong_current(self, user_client):
        response = user_client.put(
            reverse("blog_api:change_password"),
            {"currentPassword": "wrong", "newPassword": "changed1"},
            content_type=JSON,
        )
        assert response.status_code == 401

    @pytest.mark.parametrize("name", ["check", "auth_profile", "verify"])
    def test_current_user(self, user_client, user, name):
        response = user_client.get(reverse(f"blog_api:{name}"))
        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == user.pk

    def test_cookie_authentication(self, client, user):
        client.cookies["access_token"] = issue_tokens(user)["access_token"]
        response = client.get(reverse("blog_api:check"))
        assert response.status_code == 200

    def test_missing_token(self, client, db):
        response = client.get(reverse("blog_api:check"))
        assert response.status_code == 401
        assert response.json()["message"] == "Access denied. Token missing"

    def test_invalid_token(self, client, db):
        response = client.get(reverse("blog_api:check"), HTTP_AUTHORIZATION="Bearer garbage")
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    def test_deactivated_account(self, user_client, user):
        user.is_active = False
        user.save()
        response = user_client.get(reverse("blog_api:check"))
        assert response.status_code == 401
        assert response.json()["message"] == "Account deactivated"
