"""Service error taxonomy.

Every error carries a client-safe ``message``. The HTTP layer renders any
``ServiceError`` as ``{"error": message}``.
"""


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    """A length or format constraint was violated."""

    default_message = "Invalid input"


class ConflictError(ServiceError):
    """A uniqueness constraint was violated."""

    default_message = "Already in use"


class NotFoundError(ServiceError):
    """The record does not exist or has expired."""

    default_message = "Not found"


class AuthError(ServiceError):
    """Bad credentials, missing session or insufficient permission."""

    default_message = "Not logged in"


class CapacityError(ServiceError):
    """A per-record limit has been reached."""

    default_message = "Limit reached"


class InternalError(ServiceError):
    """Hashing or storage failure. The original cause is only logged."""

    default_message = "Internal server error"
