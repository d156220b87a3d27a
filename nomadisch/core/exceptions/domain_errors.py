"""Domain errors raised by the store client, the cover-image precheck and the admin gate.

Hierarchy:
    ServerError
    ├── ConfigurationError (500)          required credential/config missing
    └── BadGatewayError
        ├── StoreRequestError (502)       non-2xx from Airtable
        ├── AttachmentNotPersistedError   write accepted, attachment missing
        └── UploadError (502)             Cloudinary rejected the upload
    UnauthorizedError
    └── AuthorizationError (401)          admin password missing or wrong
    UnprocessableEntityError
    └── CoverImageError (422)
        ├── ValidationError               not an http(s) URL
        ├── UnreachableError              final probe response not 2xx
        └── NotAnImageError               content-type is not image/*

Cover-image messages are operator diagnostics and are surfaced verbatim.
"""

from typing import Any

from .http_exceptions import (
    BadGatewayError,
    ServerError,
    UnauthorizedError,
    UnprocessableEntityError,
)


class ConfigurationError(ServerError):
    """A required setting is missing. Raised before any network call."""

    def __init__(self, setting: str) -> None:
        self.setting = setting
        super().__init__(f"Missing {setting}", detail={"setting": setting})


class AuthorizationError(UnauthorizedError):
    """Admin password missing or mismatched. The message never says which."""

    def __init__(self) -> None:
        super().__init__("Invalid admin password")


class StoreRequestError(BadGatewayError):
    """Airtable answered with a non-2xx status."""

    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(
            f"Airtable request failed: {status} {body or '(no body)'}",
            detail={"status": status, "body": body},
        )


class AttachmentNotPersistedError(BadGatewayError):
    """The write returned 2xx but Airtable did not materialize the cover attachment."""

    def __init__(self, mode: str, record_id: str | None = None) -> None:
        self.mode = mode
        self.record_id = record_id
        super().__init__(
            f"Airtable {mode} succeeded but did NOT attach the image. "
            "This usually means Airtable could not fetch the URL "
            "(not public / blocked / not a direct image).",
            detail={"mode": mode, "record_id": record_id},
        )


class UploadError(BadGatewayError):
    """Cloudinary upload failed."""

    def __init__(self, message: str, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message, detail=detail)


class CoverImageError(UnprocessableEntityError):
    """Base for cover URL precheck failures. Blocks the write entirely."""

    def __init__(self, message: str, url: str, **extra: Any) -> None:
        self.url = url
        super().__init__(message, detail={"url": url, **extra})


class ValidationError(CoverImageError):
    def __init__(self, url: str) -> None:
        super().__init__(f"[Airtable attach] coverUrl is not http/https: {url[:80]}", url)


class UnreachableError(CoverImageError):
    def __init__(self, url: str, status: int | None = None, reason: str = "") -> None:
        self.status = status
        if status is None:
            message = f"[Airtable attach] coverUrl not reachable. {reason}. URL: {url}"
        else:
            message = f"[Airtable attach] coverUrl not reachable. HTTP {status} {reason}. URL: {url}"
        super().__init__(message, url, status=status)


class NotAnImageError(CoverImageError):
    def __init__(self, url: str, content_type: str, snippet: str = "") -> None:
        self.content_type = content_type
        self.snippet = snippet
        message = f'[Airtable attach] coverUrl is not an image. content-type="{content_type}". URL: {url}.'
        if snippet:
            message += f" Body starts with: {snippet!r}"
        super().__init__(message, url, content_type=content_type, snippet=snippet or None)
