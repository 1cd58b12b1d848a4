"""
PageView and UserSession models for django-blog-cms analytics.
"""
from django.conf import settings
from django.db import models


class PageView(models.Model):
    """A single tracked page view."""

    path = models.CharField(max_length=500, db_index=True)
    referrer = models.CharField(max_length=500, blank=True)
    user_agent = models.TextField(blank=True)
    ip_address = models.CharField(max_length=64, default="unknown", db_index=True)
    country = models.CharField(max_length=100, default="Unknown")
    device = models.CharField(max_length=20, blank=True)
    browser = models.CharField(max_length=20, blank=True)
    os = models.CharField(max_length=20, blank=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="page_views",
    )
    post = models.ForeignKey(
        "blog_cms.Post",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="page_views",
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.path} at {self.created_at}"


class UserSession(models.Model):
    """
    A browsing session identified by a client-generated id.

    duration is in seconds and is only known once the client reports the
    end of the session.
    """

    session_id = models.CharField(max_length=100, unique=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="browsing_sessions",
    )
    page_views = models.PositiveIntegerField(default=0)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField(null=True, blank=True)
    duration = models.PositiveIntegerField(null=True, blank=True)
    # Open sessions count as bounced until they report a long enough duration
    bounced = models.BooleanField(default=True)
    user_agent = models.TextField(blank=True)
    ip_address = models.CharField(max_length=64, default="unknown")
    country = models.CharField(max_length=100, default="Unknown")
    device = models.CharField(max_length=20, blank=True)
    browser = models.CharField(max_length=20, blank=True)
    os = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.session_id
