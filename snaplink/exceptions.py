"""Application-level exceptions.

The `LinkServiceError` family is what `LinkService` raises to its caller. Each
error carries a `kind` and an HTTP `status_code` so the transport layer can map
it to a response without knowing about storage details:

    >>> try:
    ...     service.redirect('nope')
    ... except LinkServiceError as error:
    ...     kind, message = error.as_pair()
    ...     status = error.status_code
    >>> kind, status
    ('NotFound', 404)
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    INVALID_INPUT = 'InvalidInput'
    CONFLICT = 'Conflict'
    NOT_FOUND = 'NotFound'
    GONE = 'Gone'
    RATE_LIMITED = 'RateLimited'
    ALLOCATION_FAILURE = 'AllocationFailure'
    STORAGE_ERROR = 'StorageError'


class SnapLinkError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:snaplink_error'


class ConfigurationError(SnapLinkError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class LinkServiceError(SnapLinkError):
    """Base exception for errors surfaced by LinkService operations."""

    error_code = 'link:link_service_error'
    kind: ErrorKind = ErrorKind.STORAGE_ERROR
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def as_pair(self) -> tuple[str, str]:
        return str(self.kind), self.message


class InvalidInputError(LinkServiceError):
    """Raised on a malformed target URL, custom code or TTL."""

    error_code = 'link:invalid_input'
    kind = ErrorKind.INVALID_INPUT
    status_code = 400


class ConflictError(LinkServiceError):
    """Raised when a custom code is already taken."""

    error_code = 'link:conflict'
    kind = ErrorKind.CONFLICT
    status_code = 409


class NotFoundError(LinkServiceError):
    """Raised when a code doesn't exist."""

    error_code = 'link:not_found'
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class GoneError(LinkServiceError):
    """Raised when a code exists but its TTL has elapsed."""

    error_code = 'link:gone'
    kind = ErrorKind.GONE
    status_code = 410


class RateLimitedError(LinkServiceError):
    """Raised when a client exceeds its admission window."""

    error_code = 'link:rate_limited'
    kind = ErrorKind.RATE_LIMITED
    status_code = 429

    def __init__(self, message: str, retry_after: int = 0):
        super().__init__(message)
        self.retry_after = retry_after


class AllocationFailureError(LinkServiceError):
    """Raised when a new short code can't be allocated or stored."""

    error_code = 'link:allocation_failure'
    kind = ErrorKind.ALLOCATION_FAILURE
    status_code = 500


class StorageError(LinkServiceError):
    """Raised when the link store fails outside of code allocation."""

    error_code = 'link:storage_error'
    kind = ErrorKind.STORAGE_ERROR
    status_code = 500
