"""
Error taxonomy for the user management server.

Business-level absence is not an exception for tools (it is an outcome
value); resource readers raise ResourceNotFound for it instead.
"""

from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError


def format_errors(exc: PydanticValidationError) -> List[str]:
    """Flatten pydantic errors into "<field>: <message>" lines."""
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "input"
        errors.append(f"{location}: {error.get('msg', 'invalid value')}")
    return errors


class UserManagementError(Exception):
    """Base class for all project errors."""


class ConfigError(UserManagementError):
    """Configuration could not be loaded or validated."""


class ValidationError(UserManagementError):
    """Input failed schema constraints."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.errors = errors or []
        if self.errors:
            message = f"{message}: {'; '.join(self.errors)}"
        super().__init__(message)

    @classmethod
    def from_pydantic(cls, message: str, exc: PydanticValidationError) -> "ValidationError":
        return cls(message, format_errors(exc))


class StorageError(UserManagementError):
    """Backing file access failed."""


class StorageReadError(StorageError):
    """Backing file could not be read or parsed."""


class MalformedRecordError(StorageReadError):
    """A stored record no longer satisfies the user schema."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.errors = errors or []
        if self.errors:
            message = f"{message}: {'; '.join(self.errors)}"
        super().__init__(message)


class StorageWriteError(StorageError):
    """Backing file could not be written."""


class ResourceError(UserManagementError):
    """A resource read failed."""


class ResourceParameterMissing(ResourceError):
    """A required resource URI parameter is absent."""


class ResourceParameterInvalid(ResourceError):
    """A resource URI parameter has the wrong shape."""


class ResourceNotFound(ResourceError):
    """The requested resource does not exist."""


class UnknownOperationError(UserManagementError):
    """No tool, prompt or resource is registered under the requested name."""
