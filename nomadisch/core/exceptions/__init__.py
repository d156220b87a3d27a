"""Exception handling package for the Nomadisch API.

Provides the HTTP exception hierarchy, the domain errors built on it and the
handlers that render both as standardized error responses.
"""

from .domain_errors import (
    AttachmentNotPersistedError,
    AuthorizationError,
    ConfigurationError,
    CoverImageError,
    NotAnImageError,
    StoreRequestError,
    UnreachableError,
    UploadError,
    ValidationError,
)
from .handlers import register_exception_handlers
from .http_exceptions import (
    AppError,
    BadGatewayError,
    BadRequestError,
    ClientError,
    ErrorResponse,
    InternalServerError,
    NotFoundError,
    ServerError,
    ServiceUnavailableError,
    UnauthorizedError,
    UnprocessableEntityError,
)

__all__ = [
    # Base exceptions
    "AppError",
    # Client exceptions (4xx)
    "BadRequestError",
    "ClientError",
    "NotFoundError",
    "UnauthorizedError",
    "UnprocessableEntityError",
    # Server exceptions (5xx)
    "BadGatewayError",
    "InternalServerError",
    "ServerError",
    "ServiceUnavailableError",
    # Domain
    "AttachmentNotPersistedError",
    "AuthorizationError",
    "ConfigurationError",
    "CoverImageError",
    "NotAnImageError",
    "StoreRequestError",
    "UnreachableError",
    "UploadError",
    "ValidationError",
    # Models
    "ErrorResponse",
    # Handlers
    "register_exception_handlers",
]
