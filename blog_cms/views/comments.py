"""
Comment API views.
"""
from django.db.models import Count, Prefetch
from django.http import JsonResponse

from ..conf import blog_settings
from ..forms import CommentForm
from ..models import Comment, Post
from ..serializers import comment_to_dict
from .base import ApiView, check_access, json_error, paginate, validation_error


def comment_queryset():
    return Comment.objects.select_related("author__profile").annotate(
        reply_count=Count("replies")
    )


def with_replies(queryset):
    return queryset.prefetch_related(
        Prefetch(
            "replies",
            queryset=comment_queryset().order_by("created_at", "pk"),
            to_attr="reply_list",
        )
    )


class PostCommentsView(ApiView):
    """List a post's comment threads or add a comment to it."""

    def get(self, request, pk):
        queryset = with_replies(
            comment_queryset()
            .filter(post_id=pk, parent__isnull=True)
            .order_by("-created_at", "-pk")
        )
        comments, pagination = paginate(request, queryset, blog_settings.COMMENTS_PER_PAGE)
        return JsonResponse({
            "comments": [comment_to_dict(c, replies=c.reply_list) for c in comments],
            "pagination": pagination,
        })

    def post(self, request, pk):
        denied = check_access(request)
        if denied:
            return denied

        form = CommentForm(self.get_json())
        if not form.is_valid():
            return validation_error(form)

        post = Post.objects.filter(pk=pk).first()
        if post is None:
            return json_error("Post not found", 404)

        parent = None
        parent_id = form.cleaned_data["parent_id"]
        if parent_id is not None:
            parent = Comment.objects.filter(pk=parent_id).first()
            if parent is None:
                return json_error("Parent comment not found", 404)
            if parent.post_id != post.pk:
                return json_error("Parent comment does not belong to this post", 400)

        comment = Comment.objects.create(
            post=post,
            author=request.user,
            parent=parent,
            content=form.cleaned_data["content"],
        )
        return JsonResponse(
            {
                "message": "Comment created successfully",
                "comment": comment_to_dict(comment_queryset().get(pk=comment.pk)),
            },
            status=201,
        )


class CommentDetailView(ApiView):
    """Read, edit or delete one comment."""

    def get(self, request, pk):
        comment = (
            with_replies(comment_queryset().select_related("post")).filter(pk=pk).first()
        )
        if comment is None:
            return json_error("Comment not found", 404)
        return JsonResponse({
            "comment": comment_to_dict(comment, replies=comment.reply_list, include_post=True),
        })

    def _get_editable(self, request, pk, action):
        denied = check_access(request)
        if denied:
            return None, denied
        comment = Comment.objects.filter(pk=pk).first()
        if comment is None:
            return None, json_error("Comment not found", 404)
        if not comment.can_edit(request.user):
            return None, json_error(
                f"Forbidden - You can only {action} your own comments or be an admin", 403
            )
        return comment, None

    def put(self, request, pk):
        comment, error = self._get_editable(request, pk, "edit")
        if error:
            return error

        form = CommentForm(self.get_json())
        if not form.is_valid():
            return validation_error(form)

        comment.edit(form.cleaned_data["content"])
        return JsonResponse({
            "message": "Comment updated successfully",
            "comment": comment_to_dict(comment_queryset().get(pk=comment.pk)),
        })

    def delete(self, request, pk):
        comment, error = self._get_editable(request, pk, "delete")
        if error:
            return error

        # Replies go with their parent through the CASCADE on Comment.parent.
        comment.delete()
        return JsonResponse({"message": "Comment deleted successfully"})
