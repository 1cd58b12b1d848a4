"""
Post, like and bookmark API views.
"""
import logging

from django.db import transaction
from django.db.models import Q
from django.http import JsonResponse

from ..conf import blog_settings
from ..forms import PostForm, PostUpdateForm
from ..models import Bookmark, Category, Like, Post, Tag, is_admin
from ..serializers import post_to_dict
from .base import (
    ApiLoginRequiredMixin,
    ApiView,
    check_access,
    json_error,
    paginate,
    validation_error,
)

logger = logging.getLogger(__name__)


def post_queryset():
    return (
        Post.objects.with_counts()
        .select_related("author__profile", "category")
        .prefetch_related("tags")
    )


def filter_posts(queryset, params):
    """Apply the category/tag/search/author/published list filters."""
    published = params.get("published")
    if published == "false":
        queryset = queryset.drafts()
    elif published != "all":
        queryset = queryset.published()

    if params.get("author"):
        queryset = queryset.filter(author_id=params["author"])
    if params.get("category"):
        queryset = queryset.filter(category__slug=params["category"])
    if params.get("tag"):
        queryset = queryset.filter(tags__slug=params["tag"])
    if params.get("search"):
        search = params["search"]
        queryset = queryset.filter(
            Q(title__icontains=search)
            | Q(content__icontains=search)
            | Q(excerpt__icontains=search)
        )
    return queryset.distinct()


class PostListCreateView(ApiView):
    """GET lists posts for everyone; POST creates one (admins only)."""

    def get(self, request):
        params = request.GET
        if params.get("author") and not params["author"].isdigit():
            return json_error("Invalid author", 400)

        queryset = filter_posts(post_queryset(), params)
        posts, pagination = paginate(request, queryset, blog_settings.POSTS_PER_PAGE)
        return JsonResponse({
            "posts": [post_to_dict(post) for post in posts],
            "pagination": pagination,
        })

    def post(self, request):
        if not request.user.is_authenticated:
            return json_error("Unauthorized", 401)
        if not is_admin(request.user):
            return json_error("Forbidden - Only admins can create posts", 403)

        form = PostForm(self.get_json())
        if not form.is_valid():
            return validation_error(form)
        data = form.cleaned_data

        category = None
        if data["category_id"] is not None:
            category = Category.objects.filter(pk=data["category_id"]).first()
            if category is None:
                return json_error("Category not found", 400)

        with transaction.atomic():
            post = Post(
                title=data["title"],
                content=data["content"],
                excerpt=data["excerpt"],
                cover_image=data["featured_image"],
                author=request.user,
                category=category,
            )
            post.set_published(data["published"])
            post.save()
            post.tags.set(Tag.get_or_create_many(data["tags"]))

        logger.info("User %s created post %s (%s)", request.user.pk, post.pk, post.status)
        return JsonResponse(
            {
                "message": "Post published successfully" if post.is_published
                else "Draft saved successfully",
                "post": post_to_dict(post_queryset().get(pk=post.pk)),
            },
            status=201,
        )


class PostDetailView(ApiView):
    """Read, update or delete a single post."""

    def get(self, request, pk):
        post = post_queryset().filter(pk=pk).first()
        if post is None:
            return json_error("Post not found", 404)
        return JsonResponse({"post": post_to_dict(post)})

    def _get_editable(self, request, pk, action):
        denied = check_access(request)
        if denied:
            return None, denied
        post = Post.objects.filter(pk=pk).first()
        if post is None:
            return None, json_error("Post not found", 404)
        if not post.can_edit(request.user):
            return None, json_error(
                f"Forbidden - You can only {action} your own posts or be an admin", 403
            )
        return post, None

    def put(self, request, pk):
        post, error = self._get_editable(request, pk, "edit")
        if error:
            return error

        form = PostUpdateForm(self.get_json())
        if not form.is_valid():
            return validation_error(form)
        data = form.cleaned_data
        present = form.present_fields

        if "category_id" in present and data["category_id"] is not None:
            category = Category.objects.filter(pk=data["category_id"]).first()
            if category is None:
                return json_error("Category not found", 400)
            post.category = category
        elif "category_id" in present:
            post.category = None

        with transaction.atomic():
            if "title" in present:
                post.retitle(data["title"])
            if "content" in present:
                post.content = data["content"]
            if "excerpt" in present:
                post.excerpt = data["excerpt"]
            if "featured_image" in present:
                post.cover_image = data["featured_image"]
            if "published" in present and data["published"] is not None:
                post.set_published(data["published"])
            post.save()
            if "tags" in present:
                post.tags.set(Tag.get_or_create_many(data["tags"]))

        return JsonResponse({
            "message": "Post updated successfully",
            "post": post_to_dict(post_queryset().get(pk=post.pk)),
        })

    def delete(self, request, pk):
        post, error = self._get_editable(request, pk, "delete")
        if error:
            return error

        with transaction.atomic():
            post.tags.clear()
            post.delete()

        logger.info("User %s deleted post %s", request.user.pk, pk)
        return JsonResponse({"message": "Post deleted successfully"})


class PostMarkView(ApiLoginRequiredMixin, ApiView):
    """
    Add (POST) or remove (DELETE) the current user's mark on a post.

    Subclasses set model and the user-facing wording.
    """

    model = None
    noun = ""
    duplicate_message = ""
    added_message = ""
    removed_message = ""

    def post(self, request, pk):
        post = Post.objects.filter(pk=pk).first()
        if post is None:
            return json_error("Post not found", 404)

        _, created = self.model.add(post, request.user)
        if not created:
            return json_error(self.duplicate_message, 400)
        return JsonResponse({"message": self.added_message}, status=201)

    def delete(self, request, pk):
        if not self.model.remove(pk, request.user):
            return json_error(f"{self.noun} not found", 404)
        return JsonResponse({"message": self.removed_message})


class LikeView(PostMarkView):
    model = Like
    noun = "Like"
    duplicate_message = "Post already liked"
    added_message = "Post liked successfully"
    removed_message = "Post unliked successfully"


class BookmarkView(PostMarkView):
    model = Bookmark
    noun = "Bookmark"
    duplicate_message = "Post already bookmarked"
    added_message = "Post bookmarked successfully"
    removed_message = "Bookmark removed successfully"


class LikeCountView(ApiView):
    def get(self, request, pk):
        return JsonResponse({"count": Like.objects.filter(post_id=pk).count()})


class LikeStatusView(ApiView):
    def get(self, request, pk):
        return JsonResponse({"is_liked": Like.exists_for(pk, request.user)})


class BookmarkStatusView(ApiView):
    def get(self, request, pk):
        return JsonResponse({"is_bookmarked": Bookmark.exists_for(pk, request.user)})


class BookmarkListView(ApiLoginRequiredMixin, ApiView):
    """The current user's bookmarked posts, most recently saved first."""

    def get(self, request):
        queryset = post_queryset().filter(bookmarks__user=request.user).order_by(
            "-bookmarks__created_at"
        )
        posts, pagination = paginate(request, queryset, blog_settings.POSTS_PER_PAGE)
        return JsonResponse({
            "posts": [post_to_dict(post) for post in posts],
            "pagination": pagination,
        })
