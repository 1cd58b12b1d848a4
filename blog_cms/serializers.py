"""
Plain-dict renderings of blog_cms models for JsonResponse.
"""
from .models import get_profile


def _iso(value):
    return value.isoformat() if value else None


def user_summary(user):
    profile = get_profile(user)
    return {
        "id": user.pk,
        "name": profile.display_name,
        "email": user.email,
        "image": profile.image or None,
    }


def user_detail(user):
    profile = get_profile(user)
    return {
        **user_summary(user),
        "bio": profile.bio,
        "website": profile.website,
        "location": profile.location,
        "role": "ADMIN" if user.is_superuser else profile.role,
        "email_verified": profile.is_email_verified,
        "created_at": _iso(user.date_joined),
    }


def category_to_dict(category, post_count=None):
    data = {
        "id": category.pk,
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "created_at": _iso(category.created_at),
        "updated_at": _iso(category.updated_at),
    }
    if post_count is not None:
        data["post_count"] = post_count
    return data


def tag_to_dict(tag, post_count=None):
    data = {"id": tag.pk, "name": tag.name, "slug": tag.slug}
    if post_count is not None:
        data["post_count"] = post_count
    return data


def _count(obj, attr, related):
    value = getattr(obj, attr, None)
    if value is None:
        value = getattr(obj, related).count()
    return value


def post_to_dict(post):
    """Full post rendering; expects tags to be prefetched for lists."""
    return {
        "id": post.pk,
        "title": post.title,
        "slug": post.slug,
        "content": post.content,
        "excerpt": post.excerpt or None,
        "cover_image": post.cover_image or None,
        "status": post.status,
        "published_at": _iso(post.published_at),
        "created_at": _iso(post.created_at),
        "updated_at": _iso(post.updated_at),
        "views": post.view_count,
        "author": user_summary(post.author),
        "category": category_to_dict(post.category) if post.category else None,
        "tags": [tag_to_dict(tag) for tag in post.tags.all()],
        "counts": {
            "likes": _count(post, "like_count", "likes"),
            "comments": _count(post, "comment_count", "comments"),
        },
    }


def post_summary(post):
    data = {
        "id": post.pk,
        "title": post.title,
        "slug": post.slug,
        "published_at": _iso(post.published_at),
        "counts": {
            "likes": _count(post, "like_count", "likes"),
            "comments": _count(post, "comment_count", "comments"),
        },
    }
    if getattr(post, "author", None) is not None:
        data["author"] = {"name": get_profile(post.author).display_name}
    if post.category_id:
        data["category"] = {"name": post.category.name}
    return data


def comment_to_dict(comment, replies=None, include_post=False):
    """
    Render a comment.

    Args:
        replies: iterable of reply comments to embed, or None to omit
        include_post: embed a short summary of the commented post
    """
    data = {
        "id": comment.pk,
        "content": comment.content,
        "post_id": comment.post_id,
        "parent_id": comment.parent_id,
        "is_edited": comment.is_edited,
        "created_at": _iso(comment.created_at),
        "updated_at": _iso(comment.updated_at),
        "author": user_summary(comment.author),
        "counts": {"replies": _count(comment, "reply_count", "replies")},
    }
    if replies is not None:
        data["replies"] = [comment_to_dict(reply) for reply in replies]
    if include_post:
        data["post"] = {
            "id": comment.post.pk,
            "title": comment.post.title,
            "slug": comment.post.slug,
        }
    return data


def about_to_dict(about):
    data = {field: getattr(about, field) for field in about.EDITABLE_FIELDS}
    data["id"] = about.pk
    data["updated_at"] = _iso(about.updated_at)
    return data
