"""
Configuration settings for django-blog-cms.

Override these in your Django settings.py:

    BLOG_CMS = {
        'OTP_EXPIRY_MINUTES': 15,
        'POSTS_PER_PAGE': 12,
        'CLOUDINARY': {
            'cloud_name': '...',
            'api_key': '...',
            'api_secret': '...',
        },
        ...
    }

When CLOUDINARY is left empty the SDK falls back to the CLOUDINARY_URL
environment variable.
"""
from django.conf import settings

DEFAULTS = {
    # Roles
    "ROLE_CHOICES": [
        ("USER", "User"),
        ("ADMIN", "Admin"),
    ],
    "DEFAULT_ROLE": "USER",

    # One-time codes
    "OTP_LENGTH": 6,
    "OTP_EXPIRY_MINUTES": 10,
    "OTP_PURPOSES": [
        ("signup", "Sign up"),
        ("signin", "Sign in"),
        ("reset-password", "Reset password"),
    ],
    "OTP_SUBJECTS": {
        "signup": "Complete Your Registration - Verify Email",
        "signin": "Sign In Verification Code",
        "reset-password": "Password Reset Verification Code",
    },
    "PASSWORD_MIN_LENGTH": 8,
    "NAME_MIN_LENGTH": 2,

    # Email
    "EMAIL_FROM": None,  # falls back to DEFAULT_FROM_EMAIL

    # Posts
    "POST_TITLE_MAX_LENGTH": 200,
    "EXCERPT_MAX_LENGTH": 500,
    "SLUG_MAX_LENGTH": 100,
    "POSTS_PER_PAGE": 10,
    "RELATED_POSTS": 5,

    # Comments
    "COMMENT_MAX_LENGTH": 1000,
    "COMMENTS_PER_PAGE": 20,

    # Taxonomy
    "CATEGORY_NAME_MAX_LENGTH": 100,
    "CATEGORIES_PER_PAGE": 50,

    # Admin listings
    "ADMIN_POSTS_PER_PAGE": 10,
    "ADMIN_COMMENTS_PER_PAGE": 50,
    "RECENT_ACTIVITY_SIZE": 5,

    # Uploads
    "UPLOAD_ALLOWED_TYPES": ["image/jpeg", "image/jpg", "image/png", "image/webp"],
    "UPLOAD_MAX_SIZE_MB": 5,
    "UPLOAD_FOLDER": "blog-profile-images",
    "UPLOAD_TRANSFORMATION": [
        {"width": 400, "height": 400, "crop": "fill", "gravity": "face"},
        {"quality": "auto", "fetch_format": "auto"},
    ],
    "CLOUDINARY": {},

    # Analytics
    "BOUNCE_THRESHOLD_SECONDS": 30,
    "ANALYTICS_DEFAULT_DAYS": 30,
    "ANALYTICS_MAX_DAYS": 365,
    "ANALYTICS_TOP_PAGES": 10,
    "ANALYTICS_POPULAR_POSTS": 10,
}


class BlogCmsSettings:
    """
    Lazy settings object that reads from Django settings.

    Access via: from blog_cms.conf import blog_settings
    """

    def __getattr__(self, name):
        if name not in DEFAULTS:
            raise AttributeError(f"Invalid blog_cms setting: {name}")

        user_settings = getattr(settings, "BLOG_CMS", {})
        return user_settings.get(name, DEFAULTS[name])

    @property
    def email_from(self):
        """Sender address for outgoing mail."""
        return self.EMAIL_FROM or settings.DEFAULT_FROM_EMAIL

    @property
    def upload_max_bytes(self):
        return self.UPLOAD_MAX_SIZE_MB * 1024 * 1024


blog_settings = BlogCmsSettings()
