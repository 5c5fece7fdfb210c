class DomainError(Exception):
    """Base class for business rule failures reported back as ``success: False``."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Input passed schema validation but breaks a business rule."""


class PermissionDenied(DomainError):
    """The signed-in profile may not act on this resource."""


class NotFound(DomainError):
    """The referenced row does not exist (or is not visible to the caller)."""
