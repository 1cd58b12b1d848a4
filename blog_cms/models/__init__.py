"""
Models for django-blog-cms.

All models are importable from blog_cms.models:

    from blog_cms.models import Post, Category, Tag, Comment, Like
"""
from .users import Profile, VerificationToken, get_profile, is_admin
from .posts import Category, Tag, Post, AboutPage, generate_unique_slug, slugify_name
from .comments import Comment, Like, Bookmark
from .analytics import PageView, UserSession

__all__ = [
    # Users
    "Profile",
    "VerificationToken",
    "get_profile",
    "is_admin",
    # Posts
    "Category",
    "Tag",
    "Post",
    "AboutPage",
    "generate_unique_slug",
    "slugify_name",
    # Engagement
    "Comment",
    "Like",
    "Bookmark",
    # Analytics
    "PageView",
    "UserSession",
]
