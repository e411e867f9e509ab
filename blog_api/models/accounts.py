"""
Account models for django-blog-api: user profiles and refresh tokens.

The user itself is Django's AUTH_USER_MODEL; this module only adds what
the API needs on top of it.
"""
from django.conf import settings
from django.db import models
from django.utils import timezone


class Profile(models.Model):
    """
    Blog-specific data attached to a user.

    Created automatically when a user is created (see signals.py).
    """

    ROLE_USER = "user"
    ROLE_MODERATOR = "moderator"
    ROLE_ADMIN = "admin"
    ROLE_CHOICES = [
        (ROLE_USER, "User"),
        (ROLE_MODERATOR, "Moderator"),
        (ROLE_ADMIN, "Admin"),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="blog_profile",
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_USER)
    avatar = models.URLField(max_length=500, blank=True)
    is_verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["user__username"]

    def __str__(self):
        return f"{self.user} ({self.role})"

    @classmethod
    def for_user(cls, user):
        """Return the user's profile, creating it for users that predate the app."""
        profile, _ = cls.objects.get_or_create(user=user)
        return profile


def get_role(user):
    """Return the effective role of ``user`` or None for anonymous users."""
    if user is None or not user.is_authenticated:
        return None
    if user.is_superuser:
        return Profile.ROLE_ADMIN
    return Profile.for_user(user).role


class RefreshTokenQuerySet(models.QuerySet):
    def expired(self):
        return self.filter(expires_at__lte=timezone.now())

    def active(self):
        return self.filter(expires_at__gt=timezone.now())


class RefreshToken(models.Model):
    """
    A refresh token issued to a user.

    Only the token id (the JWT ``jti`` claim) is stored. A refresh JWT is
    honoured only while its row exists, so deleting the row revokes it.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="blog_refresh_tokens",
    )
    jti = models.CharField(max_length=64, unique=True)
    expires_at = models.DateTimeField(db_index=True)
    device_info = models.CharField(max_length=255, default="Unknown device")
    created_at = models.DateTimeField(auto_now_add=True)

    objects = RefreshTokenQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Refresh token for {self.user} ({self.device_info})"

    @property
    def is_expired(self):
        return self.expires_at <= timezone.now()

    @classmethod
    def add(cls, user, jti, expires_at, device_info=""):
        return cls.objects.create(
            user=user,
            jti=jti,
            expires_at=expires_at,
            device_info=(device_info or "Unknown device")[:255],
        )

    @classmethod
    def has(cls, user, jti):
        return cls.objects.active().filter(user=user, jti=jti).exists()

    @classmethod
    def remove(cls, user, jti):
        deleted, _ = cls.objects.filter(user=user, jti=jti).delete()
        return deleted > 0

    @classmethod
    def clean_expired(cls, user=None):
        """Delete expired tokens, optionally for one user. Returns the count."""
        queryset = cls.objects.expired()
        if user is not None:
            queryset = queryset.filter(user=user)
        deleted, _ = queryset.delete()
        return deleted
