"""
JWT access and refresh tokens.

Access tokens are short lived and carry the user's id, username, email and
role. Refresh tokens additionally carry a ``jti`` that must match a stored
RefreshToken row, so they can be revoked and rotated.
"""
import logging
import uuid
from datetime import datetime, timezone as dt_timezone

import jwt
from django.contrib.auth import get_user_model

from .conf import api_settings
from .exceptions import TokenError
from .models import RefreshToken, get_role

logger = logging.getLogger(__name__)


def _now():
    return datetime.now(dt_timezone.utc)


def token_payload(user):
    return {
        "id": user.pk,
        "username": user.get_username(),
        "email": user.email,
        "role": get_role(user),
    }


def generate_access_token(user):
    payload = token_payload(user)
    payload["exp"] = _now() + api_settings.ACCESS_TOKEN_LIFETIME
    payload["type"] = "access"
    return jwt.encode(
        payload, api_settings.jwt_secret, algorithm=api_settings.JWT_ALGORITHM
    )


def generate_refresh_token(user, jti=None):
    """Return ``(token, jti, expires_at)`` for a new refresh token."""
    jti = jti or uuid.uuid4().hex
    expires_at = _now() + api_settings.REFRESH_TOKEN_LIFETIME
    payload = token_payload(user)
    payload.update({"exp": expires_at, "jti": jti, "type": "refresh"})
    token = jwt.encode(
        payload, api_settings.jwt_refresh_secret, algorithm=api_settings.JWT_ALGORITHM
    )
    return token, jti, expires_at


def _decode(token, secret, token_type):
    try:
        payload = jwt.decode(token, secret, algorithms=[api_settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenError("Token expired")
    except jwt.InvalidTokenError:
        raise TokenError("Invalid token")

    if payload.get("type") != token_type or "id" not in payload:
        raise TokenError("Invalid token")
    return payload


def verify_access_token(token):
    return _decode(token, api_settings.jwt_secret, "access")


def verify_refresh_token(token):
    payload = _decode(token, api_settings.jwt_refresh_secret, "refresh")
    if not payload.get("jti"):
        raise TokenError("Invalid token")
    return payload


def issue_tokens(user, request=None):
    """
    Create an access/refresh pair for ``user`` and store the refresh token.

    Returns a dict with ``access_token``, ``refresh_token`` and
    ``expires_in`` (milliseconds until the access token expires).
    """
    refresh_token, jti, expires_at = generate_refresh_token(user)
    device_info = ""
    if request is not None:
        device_info = request.headers.get("User-Agent", "")
    RefreshToken.add(user, jti, expires_at, device_info)

    return {
        "access_token": generate_access_token(user),
        "refresh_token": refresh_token,
        "expires_in": int(api_settings.ACCESS_TOKEN_LIFETIME.total_seconds() * 1000),
    }


def _cookie_options():
    return {
        "httponly": True,
        "secure": api_settings.cookie_secure,
        "samesite": api_settings.COOKIE_SAMESITE,
        "domain": api_settings.COOKIE_DOMAIN,
    }


def set_auth_cookies(response, tokens):
    options = _cookie_options()
    response.set_cookie(
        api_settings.ACCESS_COOKIE_NAME,
        tokens["access_token"],
        max_age=int(api_settings.ACCESS_TOKEN_LIFETIME.total_seconds()),
        **options,
    )
    response.set_cookie(
        api_settings.REFRESH_COOKIE_NAME,
        tokens["refresh_token"],
        max_age=int(api_settings.REFRESH_TOKEN_LIFETIME.total_seconds()),
        **options,
    )
    return response


def clear_auth_cookies(response):
    for name in (api_settings.ACCESS_COOKIE_NAME, api_settings.REFRESH_COOKIE_NAME):
        response.delete_cookie(
            name,
            domain=api_settings.COOKIE_DOMAIN,
            samesite=api_settings.COOKIE_SAMESITE,
        )
    return response


def extract_token_from_header(header):
    if not header or not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):].strip() or None


def extract_token(request):
    """Access token from the cookie, falling back to the Authorization header."""
    return request.COOKIES.get(api_settings.ACCESS_COOKIE_NAME) or extract_token_from_header(
        request.headers.get("Authorization")
    )


def user_for_token(token):
    """
    Return the user an access token belongs to.

    Raises TokenError when the token is invalid or the user is gone.
    The caller decides what to do with deactivated accounts.
    """
    payload = verify_access_token(token)
    user = get_user_model().objects.filter(pk=payload["id"]).first()
    if user is None:
        raise TokenError("User not found")
    return user


# Maintenance

def cleanup_expired_tokens():
    """Delete every expired refresh token. Returns the count."""
    count = RefreshToken.clean_expired()
    logger.info("Token cleanup finished: %d expired refresh tokens removed", count)
    return count


def cleanup_user_tokens(user):
    """Delete the user's expired refresh tokens. Returns True if any were removed."""
    count = RefreshToken.clean_expired(user=user)
    if count:
        logger.info("Removed %d expired refresh tokens for user %s", count, user.pk)
    return count > 0


def get_cleanup_stats():
    expired = RefreshToken.objects.expired()
    return {
        "total_users": get_user_model().objects.count(),
        "users_with_expired_tokens": expired.order_by().values("user").distinct().count(),
        "total_expired_tokens": expired.count(),
    }
