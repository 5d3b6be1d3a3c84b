class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when an actor may not perform an action (role or feature flag)."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class DuplicateRecordError(DomainError):
    """Raised by repositories when an insert hits a unique key."""


class DeviceError(DomainError):
    """Raised when a terminal cannot be reached or answers with an error."""


class SalaryConfigurationError(DomainError):
    """Raised when an employee cannot be paid because salary data is missing."""
