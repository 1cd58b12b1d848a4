"""
django-blog-cms - A server-rendered blog and CMS for Django.

Features:
- Posts with categories, tags and unique slugs
- Threaded comments (one level of replies)
- Likes and bookmarks
- Email one-time-code signup, signin and password reset
- Image uploads to Cloudinary
- Page view and session analytics
- Admin dashboard and editable about page
"""

__version__ = "0.1.0"
