"""Custom exceptions raised by the service layer."""


class ServiceError(Exception):
    """Base class for errors the API layer turns into a client response."""
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(ServiceError):
    """Raised when input is missing, malformed or out of range."""
    status_code = 400
    default_message = "Invalid input"


class ResourceNotFound(ServiceError):
    """Raised when a referenced user, post, friendship or request does not exist."""
    status_code = 404
    default_message = "Not found"


class ConflictError(ServiceError):
    """Raised when a write would duplicate an existing record."""
    status_code = 409
    default_message = "Already exists"


class DependencyFailure(ServiceError):
    """Raised when a downstream side effect fails after the primary write."""
    status_code = 502
    default_message = "Downstream dependency failed"
