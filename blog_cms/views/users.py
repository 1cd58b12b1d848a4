"""
User profile API views.
"""
from django.contrib.auth import get_user_model
from django.db.models import Count, Sum
from django.http import JsonResponse

from ..forms import ProfileForm
from ..models import Post, get_profile, is_admin
from ..serializers import post_summary, user_detail
from .base import ApiLoginRequiredMixin, ApiView, json_error, query_flag, validation_error

User = get_user_model()


def user_stats(user):
    """Totals over the user's published posts."""
    posts = Post.objects.published().filter(author=user)
    totals = posts.aggregate(total_views=Sum("view_count"))
    return {
        "total_posts": posts.count(),
        "total_likes": posts.aggregate(n=Count("likes"))["n"],
        "total_comments": posts.aggregate(n=Count("comments"))["n"],
        "total_views": totals["total_views"] or 0,
    }


class UserDetailView(ApiLoginRequiredMixin, ApiView):
    """Self or admin may read and edit a profile."""

    def _get_user(self, request, pk):
        if request.user.pk != pk and not is_admin(request.user):
            return None, json_error("Forbidden", 403)
        user = User.objects.filter(pk=pk).first()
        if user is None:
            return None, json_error("User not found", 404)
        return user, None

    def get(self, request, pk):
        user, error = self._get_user(request, pk)
        if error:
            return error

        data = user_detail(user)
        if query_flag(request, "include_stats"):
            data["stats"] = user_stats(user)
        if query_flag(request, "include_posts"):
            posts = (
                Post.objects.published()
                .filter(author=user)
                .with_counts()
                .select_related("category")
            )
            data["posts"] = [post_summary(post) for post in posts]
        return JsonResponse({"user": data})

    def put(self, request, pk):
        user, error = self._get_user(request, pk)
        if error:
            return error

        form = ProfileForm(self.get_json())
        if not form.is_valid():
            return validation_error(form)

        profile = get_profile(user)
        changed = []
        for name in form.present_fields:
            setattr(profile, name, form.cleaned_data[name])
            changed.append(name)
        if changed:
            profile.save(update_fields=changed + ["updated_at"])

        return JsonResponse({
            "message": "Profile updated successfully",
            "user": user_detail(user),
        })
