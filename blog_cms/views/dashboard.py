"""
Admin dashboard API views.
"""
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db.models import Count, Q, Sum
from django.http import JsonResponse
from django.utils import timezone

from ..conf import blog_settings
from ..forms import AboutPageForm
from ..models import AboutPage, Comment, Like, Post
from ..serializers import about_to_dict, comment_to_dict, post_summary, post_to_dict, user_summary
from .base import ApiAdminRequiredMixin, ApiView, json_error, paginate, validation_error
from .posts import post_queryset

User = get_user_model()


def dashboard_stats():
    """
    Site-wide totals, growth over the last month and recent activity.

    Shared by the JSON endpoint and the HTML dashboard.
    """
    month_ago = timezone.now() - timedelta(days=30)
    published = Post.objects.published()
    recent_size = blog_settings.RECENT_ACTIVITY_SIZE

    recent_users = User.objects.order_by("-date_joined")[:recent_size]
    recent_posts = (
        published.with_counts()
        .select_related("author__profile", "category")
        .order_by("-published_at")[:recent_size]
    )

    return {
        "overview": {
            "total_users": User.objects.count(),
            "total_posts": published.count(),
            "total_comments": Comment.objects.count(),
            "total_views": published.aggregate(total=Sum("view_count"))["total"] or 0,
            "total_likes": Like.objects.count(),
        },
        "growth": {
            "new_users": User.objects.filter(date_joined__gte=month_ago).count(),
            "new_posts": published.filter(published_at__gte=month_ago).count(),
            "new_comments": Comment.objects.filter(created_at__gte=month_ago).count(),
        },
        "recent_activity": {
            "users": [
                {**user_summary(user), "created_at": user.date_joined.isoformat()}
                for user in recent_users
            ],
            "posts": [post_summary(post) for post in recent_posts],
        },
    }


class AdminStatsView(ApiAdminRequiredMixin, ApiView):
    def get(self, request):
        return JsonResponse(dashboard_stats())


class AdminPostListView(ApiAdminRequiredMixin, ApiView):
    def get(self, request):
        queryset = post_queryset().order_by("-created_at")

        status = request.GET.get("status", "all")
        if status == "published":
            queryset = queryset.published()
        elif status == "draft":
            queryset = queryset.drafts()

        search = request.GET.get("search")
        if search:
            queryset = queryset.filter(
                Q(title__icontains=search)
                | Q(content__icontains=search)
                | Q(author__profile__name__icontains=search)
            )

        posts, pagination = paginate(
            request, queryset.distinct(), blog_settings.ADMIN_POSTS_PER_PAGE
        )
        return JsonResponse({
            "posts": [post_to_dict(post) for post in posts],
            "pagination": pagination,
        })


class AdminCommentListView(ApiAdminRequiredMixin, ApiView):
    def get(self, request):
        queryset = (
            Comment.objects.select_related("author__profile", "post")
            .annotate(reply_count=Count("replies"))
            .order_by("-created_at")
        )
        comments, pagination = paginate(
            request, queryset, blog_settings.ADMIN_COMMENTS_PER_PAGE
        )
        return JsonResponse({
            "comments": [comment_to_dict(c, include_post=True) for c in comments],
            "pagination": pagination,
        })


class AdminAboutView(ApiAdminRequiredMixin, ApiView):
    def get(self, request):
        about = AboutPage.current()
        if about is None:
            return json_error("No about page content found", 404)
        return JsonResponse({"about": about_to_dict(about)})

    def put(self, request):
        about = AboutPage.current()
        data = self.get_json()
        if about is not None:
            # Keep stored values for keys the client did not send.
            data = {
                **{field: getattr(about, field) for field in AboutPage.EDITABLE_FIELDS},
                **data,
            }
        data = {key: ("" if value is None else value) for key, value in data.items()}

        form = AboutPageForm(data, instance=about)
        if not form.is_valid():
            return validation_error(form)
        about = form.save()
        return JsonResponse({
            "message": "About page updated successfully",
            "about": about_to_dict(about),
        })
