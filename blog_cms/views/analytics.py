"""
Analytics collection and dashboard endpoints.

Collection endpoints are called with navigator.sendBeacon from every page
and therefore skip CSRF checks.
"""
from django.contrib.auth import get_user_model
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt

from .. import analytics
from ..conf import blog_settings
from ..forms import SessionEndForm, TrackForm
from ..models import Post
from .base import ApiAdminRequiredMixin, ApiView, json_error, validation_error

User = get_user_model()


@method_decorator(csrf_exempt, name="dispatch")
class TrackView(ApiView):
    def post(self, request):
        form = TrackForm(self.get_json())
        if not form.is_valid():
            return validation_error(form)
        data = form.cleaned_data

        user = request.user if request.user.is_authenticated else None
        if user is None and data["user_id"] is not None:
            user = User.objects.filter(pk=data["user_id"]).first()
        post = None
        if data["post_id"] is not None:
            post = Post.objects.filter(pk=data["post_id"]).first()

        page_view = analytics.track_page_view(
            path=data["path"],
            ip_address=analytics.get_client_ip(request),
            user_agent=data["user_agent"] or request.META.get("HTTP_USER_AGENT", ""),
            referrer=data["referrer"],
            session_id=data["session_id"],
            user=user,
            post=post,
        )
        return JsonResponse({"success": True, "id": page_view.pk})


@method_decorator(csrf_exempt, name="dispatch")
class SessionEndView(ApiView):
    def post(self, request):
        form = SessionEndForm(self.get_json())
        if not form.is_valid():
            return validation_error(form)

        updated = analytics.end_session(
            form.cleaned_data["session_id"], form.cleaned_data["duration"]
        )
        if not updated:
            return json_error("Session not found", 404)
        return JsonResponse({"success": True})


class AnalyticsDashboardView(ApiAdminRequiredMixin, ApiView):
    def get(self, request):
        try:
            days = int(request.GET.get("days", blog_settings.ANALYTICS_DEFAULT_DAYS))
        except ValueError:
            days = blog_settings.ANALYTICS_DEFAULT_DAYS
        if days < 1:
            days = blog_settings.ANALYTICS_DEFAULT_DAYS
        days = min(days, blog_settings.ANALYTICS_MAX_DAYS)

        return JsonResponse(analytics.get_dashboard(days))
