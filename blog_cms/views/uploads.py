"""
Image upload endpoint.
"""
from django.http import JsonResponse

from ..uploads import InvalidUpload, UploadFailed, upload_image
from .base import ApiLoginRequiredMixin, ApiView, json_error


class UploadView(ApiLoginRequiredMixin, ApiView):
    """Accept a multipart ``file`` and store it on Cloudinary."""

    def post(self, request):
        upload = request.FILES.get("file")
        if upload is None:
            return json_error("No file provided", 400)

        try:
            result = upload_image(upload)
        except InvalidUpload as exc:
            return json_error(str(exc), 400)
        except UploadFailed:
            return json_error("Failed to upload image", 500)

        return JsonResponse(result)
