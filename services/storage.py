"""Product image storage on Cloudinary."""
import logging
import re
import uuid

import cloudinary
import cloudinary.uploader
from flask import current_app
from werkzeug.utils import secure_filename

from core.errors import ErrorType
from core.exceptions import AppException, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}
CLOUDINARY_URL_RE = re.compile(r"/image/upload/(?:v\d+/)?(?P<public_id>.+?)(?:\.[a-zA-Z0-9]+)?$")


def allowed_file(filename):
    """Checks if a filename has an allowed extension."""
    return '.' in filename and \
           filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def _configure():
    config = current_app.config
    if not all([config.get("CLOUDINARY_CLOUD_NAME"), config.get("CLOUDINARY_API_KEY"), config.get("CLOUDINARY_API_SECRET")]):
        raise AppException(ErrorType.NOT_CONFIGURED, "Image storage is not configured")
    cloudinary.config(
        cloud_name=config["CLOUDINARY_CLOUD_NAME"],
        api_key=config["CLOUDINARY_API_KEY"],
        api_secret=config["CLOUDINARY_API_SECRET"],
        secure=True,
    )


def upload_image(file):
    """Upload a werkzeug ``FileStorage`` and return its public URL."""
    if not file or file.filename == '':
        raise ValidationError("No file selected for upload")
    if not allowed_file(file.filename):
        raise ValidationError(f"File type not allowed for '{secure_filename(file.filename)}'")

    _configure()
    stem = secure_filename(file.filename.rsplit('.', 1)[0]) or "product"
    result = cloudinary.uploader.upload(
        file,
        folder=current_app.config.get("CLOUDINARY_FOLDER", "products"),
        public_id=f"{stem}_{uuid.uuid4().hex[:8]}",
        resource_type="image",
    )
    return result.get("secure_url") or result.get("url")


def public_id_from_url(url):
    if not url or "res.cloudinary.com" not in url:
        return None
    match = CLOUDINARY_URL_RE.search(url)
    return match.group("public_id") if match else None


def delete_image(url):
    """Best-effort removal; failures are logged and never raised."""
    public_id = public_id_from_url(url)
    if not public_id:
        return False
    try:
        _configure()
        result = cloudinary.uploader.destroy(public_id, resource_type="image")
        return result.get("result") == "ok"
    except Exception:
        logger.exception(f"Failed to delete image {public_id}")
        return False
