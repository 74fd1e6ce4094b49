"""Protocols for the host collaborators of the registration processor.

The processor never inspects the host directly. Everything it needs from
the surrounding build (type assignability, diagnostic output, expected
error fixtures and resource writing) is expressed here as narrow protocols.
"""

from collections.abc import Sequence
from contextlib import AbstractContextManager
from typing import BinaryIO, Protocol, runtime_checkable

from language_registration.models import CandidateDeclaration, Diagnostic, FieldFacts


@runtime_checkable
class TypeResolver(Protocol):
    """Answers subtype questions about named types."""

    def is_assignable(self, type_name: str, base_type: str) -> bool:
        """Return True if values of ``type_name`` are assignable to ``base_type``."""
        ...


@runtime_checkable
class Messager(Protocol):
    """Receives diagnostics produced during processing."""

    def print_message(self, diagnostic: Diagnostic) -> None:
        """Report a single diagnostic."""
        ...


@runtime_checkable
class ExpectedErrors(Protocol):
    """Test fixture hook that silences diagnostics a declaration expects."""

    def is_expected_error(
        self,
        target: CandidateDeclaration,
        message: str,
        member: FieldFacts | None = None,
    ) -> bool:
        """Return True if ``message`` was declared as expected on the target."""
        ...

    def assert_no_error_expected(self, target: CandidateDeclaration) -> None:
        """Fail the build if the target declared an error that never happened."""
        ...


@runtime_checkable
class ResourceSink(Protocol):
    """Creates generated resources."""

    def create_resource(
        self, relative_path: str, originating: Sequence[CandidateDeclaration]
    ) -> AbstractContextManager[BinaryIO]:
        """Open a new resource for writing.

        Args:
            relative_path: Resource path relative to the output root
            originating: Declarations the resource is derived from

        Returns:
            Context manager yielding a binary stream, closed on exit

        Raises:
            ResourceAlreadyCreatedError: If the path was already produced in this run
            ResourceWriteError: If the resource cannot be created

        """
        ...


class NoExpectedErrors:
    """ExpectedErrors implementation for builds without test fixtures."""

    def is_expected_error(
        self,
        target: CandidateDeclaration,
        message: str,
        member: FieldFacts | None = None,
    ) -> bool:
        return False

    def assert_no_error_expected(self, target: CandidateDeclaration) -> None:
        return None
