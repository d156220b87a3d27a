"""Unsigned image upload to Cloudinary.

The returned ``secure_url`` is what the admin submits as an event's coverUrl.
"""

import httpx
import structlog

from nomadisch.core.exceptions import ConfigurationError, ServiceUnavailableError, UploadError
from nomadisch.main_config import CloudinaryConfig

logger = structlog.get_logger(__name__)


def upload_url(config: CloudinaryConfig) -> str:
    if not config.cloud_name:
        raise ConfigurationError("CLOUDINARY_CLOUD_NAME")
    if not config.upload_preset:
        raise ConfigurationError("CLOUDINARY_UPLOAD_PRESET")
    return f"{config.api_url.rstrip('/')}/{config.cloud_name}/image/upload"


async def upload_image(
    client: httpx.AsyncClient,
    config: CloudinaryConfig,
    filename: str,
    content: bytes,
    content_type: str | None = None,
) -> str:
    """Upload one image and return its secure_url.

    Raises:
        ConfigurationError: cloud name or upload preset missing
        UploadError: Cloudinary rejected the upload or returned no secure_url
        ServiceUnavailableError: Cloudinary could not be reached
    """
    url = upload_url(config)
    files = {"file": (filename, content, content_type or "application/octet-stream")}
    data = {"upload_preset": config.upload_preset, "folder": config.folder}

    try:
        response = await client.post(url, data=data, files=files)
    except httpx.TransportError as exc:
        raise ServiceUnavailableError(
            "Cloudinary upload network error", detail={"error": type(exc).__name__}
        ) from exc

    try:
        payload = response.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}

    secure_url = payload.get("secure_url")
    if response.is_success and secure_url:
        logger.info("cover_uploaded", filename=filename, bytes=len(content), url=secure_url)
        return secure_url

    error = payload.get("error")
    message = error.get("message") if isinstance(error, dict) else None
    raise UploadError(
        message or f"Cloudinary upload failed: {response.status_code} {response.text}",
        detail={"status": response.status_code},
    )
