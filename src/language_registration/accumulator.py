"""Run-scoped accumulation of accepted registrations."""

import threading
import uuid

from language_registration.errors import ProcessorStateError
from language_registration.models import CandidateDeclaration


class RegistrationAccumulator:
    """Ordered collection of accepted declarations for one compilation run.

    Grows across analysis rounds and is drained exactly once when the run
    is finalised. Declarations are held by reference and never deduplicated.
    """

    def __init__(self, run_id: str | None = None) -> None:
        self._run_id = run_id or uuid.uuid4().hex
        self._lock = threading.Lock()
        self._declarations: list[CandidateDeclaration] = []
        self._drained = False

    @property
    def run_id(self) -> str:
        return self._run_id

    @property
    def drained(self) -> bool:
        return self._drained

    def add(self, declaration: CandidateDeclaration) -> None:
        """Append an accepted declaration.

        Raises:
            ProcessorStateError: If the accumulator was already drained

        """
        with self._lock:
            self._ensure_open("add")
            self._declarations.append(declaration)

    def drain_all(self) -> list[CandidateDeclaration]:
        """Return every declaration in accumulation order and clear.

        Raises:
            ProcessorStateError: If the accumulator was already drained

        """
        with self._lock:
            self._ensure_open("drain")
            drained = self._declarations
            self._declarations = []
            self._drained = True
            return drained

    def snapshot(self) -> tuple[CandidateDeclaration, ...]:
        """Current contents without draining."""
        with self._lock:
            return tuple(self._declarations)

    def __len__(self) -> int:
        with self._lock:
            return len(self._declarations)

    def _ensure_open(self, operation: str) -> None:
        if self._drained:
            raise ProcessorStateError(
                f"Cannot {operation} registrations: run '{self._run_id}' was already finalised"
            )
