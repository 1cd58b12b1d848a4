"""
Image uploads proxied to Cloudinary.

Files are checked locally (content type, size, decodable image) before
anything is sent to the provider.
"""
import logging

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from PIL import Image, UnidentifiedImageError

from .conf import blog_settings

logger = logging.getLogger(__name__)


class InvalidUpload(Exception):
    """The file was rejected before upload. str(exc) is user-facing."""


class UploadFailed(Exception):
    """The storage provider did not accept the file."""


def configure():
    """Apply BLOG_CMS['CLOUDINARY'] credentials, if any, to the SDK."""
    credentials = blog_settings.CLOUDINARY
    if credentials:
        cloudinary.config(secure=True, **credentials)


def validate_image(upload):
    """
    Check an UploadedFile is an allowed image within the size limit.

    Returns:
        (width, height) of the decoded image

    Raises:
        InvalidUpload
    """
    if upload.content_type not in blog_settings.UPLOAD_ALLOWED_TYPES:
        raise InvalidUpload("Invalid file type. Only JPEG, PNG, and WebP are allowed.")

    if upload.size > blog_settings.upload_max_bytes:
        raise InvalidUpload(
            f"File too large. Maximum size is {blog_settings.UPLOAD_MAX_SIZE_MB}MB."
        )

    try:
        with Image.open(upload) as img:
            img.verify()
            size = img.size
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise InvalidUpload("File is not a valid image.") from exc
    finally:
        upload.seek(0)

    return size


def upload_image(upload):
    """
    Validate and upload an image.

    Returns:
        dict with ``url`` (HTTPS URL) and ``public_id``

    Raises:
        InvalidUpload: the file was rejected locally
        UploadFailed: Cloudinary returned an error
    """
    validate_image(upload)
    configure()

    try:
        result = cloudinary.uploader.upload(
            upload,
            resource_type="image",
            folder=blog_settings.UPLOAD_FOLDER,
            transformation=blog_settings.UPLOAD_TRANSFORMATION,
        )
    except CloudinaryError as exc:
        logger.exception("Cloudinary upload of %s failed", upload.name)
        raise UploadFailed(str(exc)) from exc

    logger.info("Uploaded %s as %s", upload.name, result.get("public_id"))
    return {
        "url": result["secure_url"],
        "public_id": result["public_id"],
    }
