"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all catalogspot exceptions."""

    # Hey future me, message is stored as an attribute so callers can inspect it without parsing
    # str(exception). Never raise this directly, always a subclass so callers can catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationError(DomainException):
    """Input validation failed.

    Raised synchronously, before any network I/O, when arguments are out of
    range (bulk id count outside 1..50, limit outside 1..50, empty query).

    Example:
        raise ValidationError("get_bulk requires at least 1 id")
    """

    pass


class InvalidStateException(DomainException):
    """Raised when an object is in an invalid state for the requested operation.

    Example: upgrading a stub entity that was built without a fetcher, or
    issuing a request on a client that has already been closed.
    """

    pass


class NotSupportedError(DomainException):
    """Raised when a capability is advertised but has no implementation yet.

    Example:
        raise NotSupportedError("Authorization code flow is not implemented")
    """

    pass


class AuthenticationError(DomainException):
    """The accounts service did not issue a usable token.

    Covers an unreachable token endpoint, a non-success status and a token
    payload without ``access_token`` or ``expires_in``.
    """

    def __init__(
        self,
        message: str = "Spotify authorization failed.",
        error_code: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code  # e.g., "invalid_client"
        self.http_status = http_status  # e.g., 400, 401

    @property
    def is_credential_problem(self) -> bool:
        """Check if the accounts service rejected the credentials themselves."""
        return self.error_code == "invalid_client" or self.http_status in (400, 401)


class CatalogHttpError(DomainException):
    """A catalog endpoint answered with a non-success status.

    Status code and raw body are kept so callers can diagnose (and decide to
    retry) without parsing the message.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        body: str = "",
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.url = url


class EntityNotFoundException(CatalogHttpError):
    """Raised when a catalog lookup by id answers 404."""

    # entity_type and entity_id are kept separately for structured logging.
    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        body: str = "",
        url: str | None = None,
    ) -> None:
        super().__init__(
            f"{entity_type} with id {entity_id} not found",
            status_code=404,
            body=body,
            url=url,
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class DecodeError(DomainException):
    """Response body is not valid JSON or lacks a field required for its shape."""

    pass


__all__ = [
    "AuthenticationError",
    "CatalogHttpError",
    "DecodeError",
    "DomainException",
    "EntityNotFoundException",
    "InvalidStateException",
    "NotSupportedError",
    "ValidationError",
]
