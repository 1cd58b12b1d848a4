"""
Middleware for django-blog-cms.

Add after the auth middleware:

    MIDDLEWARE = [
        ...
        'blog_cms.middleware.ApiErrorMiddleware',
    ]
"""
import logging

from django.http import JsonResponse

logger = logging.getLogger(__name__)


class ApiErrorMiddleware:
    """
    Answer unhandled exceptions raised by the JSON API with a JSON 500.

    API routes are recognised by their ``api_`` url name, so the check holds
    wherever the app's urls are included.
    """

    url_name_prefix = "api_"

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def is_api_request(self, request):
        match = getattr(request, "resolver_match", None)
        if match is None or not match.url_name:
            return False
        return match.url_name.startswith(self.url_name_prefix)

    def process_exception(self, request, exception):
        if not self.is_api_request(request):
            return None
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return JsonResponse({"error": "Internal server error"}, status=500)
