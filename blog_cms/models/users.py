"""
Profile and VerificationToken models for django-blog-cms.
"""
from django.conf import settings
from django.db import models
from django.utils import timezone

from ..conf import blog_settings


class Profile(models.Model):
    """
    Blog-facing profile attached to every user.

    Holds the display name, role and public profile fields. Created by
    the post_save handler in blog_cms.signals.
    """

    ROLE_CHOICES = blog_settings.ROLE_CHOICES
    USER = "USER"
    ADMIN = "ADMIN"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    name = models.CharField(max_length=100, blank=True)
    role = models.CharField(
        max_length=10,
        choices=ROLE_CHOICES,
        default=blog_settings.DEFAULT_ROLE,
    )
    bio = models.TextField(blank=True)
    website = models.CharField(max_length=255, blank=True)
    location = models.CharField(max_length=255, blank=True)
    image = models.CharField(
        max_length=500,
        blank=True,
        help_text="Avatar URL, usually returned by the upload endpoint",
    )
    email_verified_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.display_name

    @property
    def display_name(self):
        return self.name or self.user.get_username()

    @property
    def is_admin(self):
        return self.role == self.ADMIN

    @property
    def is_email_verified(self):
        return self.email_verified_at is not None

    def mark_email_verified(self):
        """Record that the user proved ownership of their email."""
        self.email_verified_at = timezone.now()
        self.save(update_fields=["email_verified_at", "updated_at"])


def get_profile(user):
    """Return the user's profile, creating it for users that predate the app."""
    try:
        return user.profile
    except Profile.DoesNotExist:
        profile, _ = Profile.objects.get_or_create(user=user)
        return profile


def is_admin(user):
    """Check if user may manage all content."""
    if user is None or not user.is_authenticated:
        return False
    if user.is_superuser:
        return True
    return get_profile(user).is_admin


class VerificationTokenQuerySet(models.QuerySet):
    def active(self):
        return self.filter(expires_at__gt=timezone.now())

    def expired(self):
        return self.filter(expires_at__lte=timezone.now())


class VerificationToken(models.Model):
    """
    One-time numeric code emailed to a user.

    At most one token exists per email address: issuing a new code
    deletes the previous ones.
    """

    PURPOSE_CHOICES = blog_settings.OTP_PURPOSES

    identifier = models.EmailField(db_index=True)
    token = models.CharField(max_length=12)
    purpose = models.CharField(max_length=20, choices=PURPOSE_CHOICES)
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    objects = VerificationTokenQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["identifier", "token"],
                name="unique_verification_token",
            ),
        ]

    def __str__(self):
        return f"{self.purpose} code for {self.identifier}"

    @property
    def is_expired(self):
        return self.expires_at <= timezone.now()
