"""Resource sink implementations.

Both sinks remember which paths were produced in the current run and
refuse to create the same resource twice.
"""

import io
import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

from language_registration.errors import ResourceAlreadyCreatedError, ResourceWriteError
from language_registration.models import CandidateDeclaration

logger = logging.getLogger(__name__)


def _validate_relative_path(relative_path: str) -> None:
    """Validate that a resource path is safe to place under an output root.

    Raises:
        ResourceWriteError: If the path is absolute or contains '..'

    """
    if relative_path.startswith("/"):
        raise ResourceWriteError(
            f"Invalid resource path '{relative_path}': absolute paths are not allowed."
        )
    if ".." in relative_path.split("/"):
        raise ResourceWriteError(
            f"Invalid resource path '{relative_path}': "
            "path traversal sequences (..) are not allowed."
        )


class InMemoryResourceSink:
    """In-memory resource sink for testing.

    Content becomes visible in ``resources`` once the stream is closed.
    """

    def __init__(self) -> None:
        self.resources: dict[str, bytes] = {}
        self.originating: dict[str, tuple[CandidateDeclaration, ...]] = {}
        self._created: set[str] = set()

    @contextmanager
    def create_resource(
        self, relative_path: str, originating: Sequence[CandidateDeclaration]
    ) -> Iterator[BinaryIO]:
        _validate_relative_path(relative_path)
        if relative_path in self._created:
            raise ResourceAlreadyCreatedError(
                f"Resource already created: {relative_path}"
            )
        self._created.add(relative_path)
        buffer = io.BytesIO()
        try:
            yield buffer
            self.resources[relative_path] = buffer.getvalue()
            self.originating[relative_path] = tuple(originating)
        finally:
            buffer.close()

    def read_text(self, relative_path: str) -> str:
        return self.resources[relative_path].decode("iso-8859-1")


class FilesystemResourceSink:
    """Writes resources below an output directory (e.g. a class output root)."""

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = output_dir
        self._created: set[str] = set()

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def path_for(self, relative_path: str) -> Path:
        _validate_relative_path(relative_path)
        return self._output_dir / relative_path

    @contextmanager
    def create_resource(
        self, relative_path: str, originating: Sequence[CandidateDeclaration]
    ) -> Iterator[BinaryIO]:
        file_path = self.path_for(relative_path)
        if relative_path in self._created:
            raise ResourceAlreadyCreatedError(
                f"Resource already created: {relative_path}"
            )
        self._created.add(relative_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug(
            "Creating %s from %d declaration(s)", file_path, len(originating)
        )
        with open(file_path, "wb") as stream:
            yield stream
