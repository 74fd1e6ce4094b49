"""Diagnostic emission and messager implementations."""

import logging

from language_registration.models import CandidateDeclaration, Diagnostic, Severity
from language_registration.protocols import ExpectedErrors, Messager

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    Severity.ERROR: logging.ERROR,
    Severity.WARNING: logging.WARNING,
}


class DiagnosticReporter:
    """Routes diagnostics through the expected-error hook to the messager.

    Diagnostics the hook reports as expected are dropped. Dropping a
    diagnostic never changes whether its declaration was accepted.
    """

    def __init__(self, messager: Messager, expected_errors: ExpectedErrors) -> None:
        self._messager = messager
        self._expected_errors = expected_errors

    def emit(self, diagnostic: Diagnostic) -> bool:
        """Emit a diagnostic unless it is expected.

        Returns:
            True if the diagnostic reached the messager

        """
        if self._expected_errors.is_expected_error(
            diagnostic.target, diagnostic.message, diagnostic.member
        ):
            logger.debug("Suppressed expected diagnostic: %s", diagnostic.format())
            return False
        self._messager.print_message(diagnostic)
        return True

    def emit_unchecked(self, diagnostic: Diagnostic) -> None:
        """Emit a diagnostic without consulting the expected-error hook."""
        self._messager.print_message(diagnostic)

    def assert_no_error_expected(self, target: CandidateDeclaration) -> None:
        self._expected_errors.assert_no_error_expected(target)


class LoggingMessager:
    """Messager that writes every diagnostic to the log."""

    def print_message(self, diagnostic: Diagnostic) -> None:
        logger.log(_LOG_LEVELS[diagnostic.severity], "%s", diagnostic.format())


class CollectingMessager(LoggingMessager):
    """Messager that records diagnostics in emission order (and logs them)."""

    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []

    def print_message(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        super().print_message(diagnostic)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    def has_errors(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self.diagnostics)
