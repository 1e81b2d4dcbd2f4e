class DomainError(Exception):
    """Base class for discipline and catalogue rule failures."""


class ValidationError(DomainError):
    """Request data is missing, malformed, or breaks a corrective-action rule."""


class AuthenticationError(DomainError):
    """Unknown username, wrong password, or inactive account."""


class AuthorizationError(DomainError):
    pass


class NotFoundError(DomainError):
    """Employee, category, or corrective action id does not exist."""


class InvalidRecordError(DomainError):
    """Stored violation date cannot be read, so the record cannot be scored."""
