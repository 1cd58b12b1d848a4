"""Django app configuration for blog_cms."""
from django.apps import AppConfig


class BlogCmsConfig(AppConfig):
    """Configuration for the blog CMS app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "blog_cms"
    verbose_name = "Blog CMS"

    def ready(self):
        """Connect signal handlers."""
        from . import signals  # noqa: F401
