"""Service exceptions for the ordering API.

Services raise these to signal expected failures. The FastAPI application maps
each one to an HTTP response using its ``status_code``; anything else is an
unexpected error and surfaces as a 500.
"""


class OrderingServiceError(Exception):
    """Base class for all expected service failures."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(OrderingServiceError):
    """Malformed or missing input, or a reference to an unusable menu item."""

    status_code = 400


class BusinessRuleViolation(OrderingServiceError):
    """The entity's current state does not allow the requested change."""

    status_code = 400


class AuthenticationError(OrderingServiceError):
    """Credentials were rejected."""

    status_code = 401


class NotFoundError(OrderingServiceError):
    """Entity is absent, or is not owned by the caller."""

    status_code = 404


class ConflictError(OrderingServiceError):
    """Write conflicts with existing state (e.g. duplicate email)."""

    status_code = 409


class ConcurrentModificationError(ConflictError):
    """Another request updated the document since it was read."""


class PersistenceError(OrderingServiceError):
    """The document store is unavailable or rejected the request."""

    status_code = 500
