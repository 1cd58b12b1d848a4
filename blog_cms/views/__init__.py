"""
Views for django-blog-cms.

JSON endpoints live in one module per resource; pages holds the
server-rendered HTML views.
"""
