class ConfigError(RuntimeError):
    """Raised when the environment does not describe a usable configuration."""


class DomainError(Exception):
    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    status_code = 404
    error = "Not found"


class ConflictError(DomainError):
    status_code = 409
    error = "Conflict"


class DomainValidationError(DomainError):
    status_code = 400
    error = "Validation Error"


class ServiceError(DomainError):
    """Unexpected persistence failure; the message is safe to show to clients."""
