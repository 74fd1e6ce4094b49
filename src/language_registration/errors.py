"""Error classes for the language registration processor.

This module provides:
- RegistrationError: Base exception class for all processor errors
- ProcessorConfigError: Invalid processor configuration
- ProcessorStateError: Operation not allowed in the current run state
- ResourceWriteError, ResourceAlreadyCreatedError: Resource sink exceptions
- ParserError: Source parsing exception
"""


class RegistrationError(Exception):
    """Base exception for all language registration errors."""

    pass


class ProcessorConfigError(RegistrationError):
    """Raised when processor configuration is invalid."""

    pass


class ProcessorStateError(RegistrationError):
    """Raised when an operation is attempted after the run was finalised."""

    pass


class ResourceWriteError(RegistrationError):
    """Raised when a generated resource cannot be written."""

    pass


class ResourceAlreadyCreatedError(ResourceWriteError):
    """Raised when a resource was already produced in the current run."""

    pass


class ParserError(RegistrationError):
    """Raised when source code cannot be parsed."""

    pass
