"""Custom exceptions for the InvoiceDesk application."""


class InvoiceDeskError(Exception):
    """Base exception for InvoiceDesk application."""

    pass


class ValidationError(InvoiceDeskError):
    """Raised when input is malformed or out of range."""

    pass


class InvalidTransitionError(ValidationError):
    """Raised when a disallowed invoice status transition is attempted."""

    pass


class NotFoundError(InvoiceDeskError):
    """Raised when a resource is not found."""

    pass


class ConflictError(InvoiceDeskError):
    """Raised when a uniqueness or reference constraint would be violated."""

    pass


class DatabaseError(InvoiceDeskError):
    """Raised when a database operation fails."""

    pass


class ConfigurationError(InvoiceDeskError):
    """Raised when configuration is invalid."""

    pass


class AuthenticationError(InvoiceDeskError):
    """Raised when authentication fails.

    ``reason`` is one of ``authentication_required`` (no usable credentials
    were presented) or ``invalid_token``. The message is the same for every cause.
    """

    def __init__(self, message: str = "Invalid or expired token.", reason: str = "invalid_token") -> None:
        super().__init__(message)
        self.reason = reason


class AuthorizationError(InvoiceDeskError):
    """Raised when an authenticated principal may not perform an action."""

    pass
