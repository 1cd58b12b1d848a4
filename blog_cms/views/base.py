"""
Shared plumbing for the JSON API views.
"""
import json
import math

from django.http import JsonResponse
from django.views import View

from ..models import is_admin


def json_error(message, status, **extra):
    return JsonResponse({"error": message, **extra}, status=status)


def validation_error(form):
    return json_error("Validation failed", 400, details=form.errors.get_json_data())


class InvalidJSON(ValueError):
    pass


def _positive_int(value, default):
    try:
        value = int(value)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def paginate(request, queryset, default_limit):
    """
    Slice queryset by the page/limit query parameters.

    Returns:
        (items, pagination dict)
    """
    page = _positive_int(request.GET.get("page"), 1)
    limit = _positive_int(request.GET.get("limit"), default_limit)
    total = queryset.count()
    total_pages = math.ceil(total / limit)
    offset = (page - 1) * limit
    items = list(queryset[offset:offset + limit])
    return items, {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


def query_flag(request, name):
    return request.GET.get(name) == "true"


class ApiView(View):
    """Base view for JSON endpoints."""

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except InvalidJSON:
            return json_error("Invalid JSON body", 400)

    def get_json(self):
        """Decode the request body as a JSON object."""
        if not self.request.body:
            return {}
        try:
            data = json.loads(self.request.body)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise InvalidJSON(str(exc)) from exc
        if not isinstance(data, dict):
            raise InvalidJSON("Expected a JSON object")
        return data


def check_access(request, admin=False):
    """
    Return an error response if the user may not proceed, else None.

    For views whose methods differ in who may call them.
    """
    if not request.user.is_authenticated:
        return json_error("Unauthorized", 401)
    if admin and not is_admin(request.user):
        return json_error("Forbidden - Admin access required", 403)
    return None


class ApiLoginRequiredMixin:
    """Answer 401 instead of redirecting anonymous users."""

    def dispatch(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return json_error("Unauthorized", 401)
        return super().dispatch(request, *args, **kwargs)


class ApiAdminRequiredMixin(ApiLoginRequiredMixin):
    """Only admins get past dispatch."""

    def dispatch(self, request, *args, **kwargs):
        if request.user.is_authenticated and not is_admin(request.user):
            return json_error("Forbidden - Admin access required", 403)
        return super().dispatch(request, *args, **kwargs)
