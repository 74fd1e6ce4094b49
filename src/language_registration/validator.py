"""Structural validation of registration candidates."""

import logging
from dataclasses import dataclass, field
from enum import Enum

from language_registration.config import ProcessorConfig
from language_registration.models import (
    CandidateDeclaration,
    DeclarationKind,
    Diagnostic,
    FieldFacts,
    Severity,
)
from language_registration.protocols import TypeResolver

logger = logging.getLogger(__name__)

MUST_BE_PUBLIC = "Registered language class must be public"
INNER_CLASS_MUST_BE_STATIC = "Registered language inner-class must be static"
SINGLETON_DEPRECATED = (
    "Using a singleton field is deprecated. "
    "Please provide a public no-argument constructor instead."
)


class Verdict(Enum):
    """Outcome of validating one candidate."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ValidationResult:
    """Verdict for a candidate plus the diagnostics it produced."""

    verdict: Verdict
    diagnostics: tuple[Diagnostic, ...] = field(default=())

    @property
    def accepted(self) -> bool:
        return self.verdict is Verdict.ACCEPTED


class RegistrationValidator:
    """Applies the registration rules to candidate declarations.

    Rules run in a fixed order and stop at the first error, so a rejected
    declaration carries exactly one error. The deprecated singleton pattern
    only warns and still accepts the declaration.
    """

    def __init__(self, types: TypeResolver, config: ProcessorConfig | None = None) -> None:
        self._types = types
        self._config = config or ProcessorConfig()

    @property
    def must_subclass_message(self) -> str:
        return f"Registered language class must subclass {self._config.base_type_simple_name}"

    @property
    def missing_constructor_message(self) -> str:
        return (
            f"A {self._config.base_type_simple_name} subclass must have "
            "a public no argument constructor."
        )

    def validate(self, candidate: CandidateDeclaration) -> ValidationResult:
        """Validate a single candidate.

        Args:
            candidate: Declaration bearing the registration marker

        Returns:
            ValidationResult; only class declarations are ever accepted or
            rejected, every other kind is skipped without diagnostics

        """
        if candidate.kind is not DeclarationKind.CLASS:
            logger.debug(
                "Skipping %s: %s is not a class", candidate.qualified_name, candidate.kind.value
            )
            return ValidationResult(Verdict.SKIPPED)

        if not candidate.is_public:
            return self._reject(candidate, MUST_BE_PUBLIC)

        if candidate.is_nested and not candidate.is_static:
            return self._reject(candidate, INNER_CLASS_MUST_BE_STATIC)

        if not self._types.is_assignable(candidate.qualified_name, self._config.base_type):
            return self._reject(candidate, self.must_subclass_message)

        singleton = self._find_singleton_field(candidate)
        if singleton is not None:
            warning = Diagnostic(
                severity=Severity.WARNING,
                message=SINGLETON_DEPRECATED,
                target=candidate,
                member=singleton,
            )
            return ValidationResult(Verdict.ACCEPTED, (warning,))

        if not self._has_usable_constructor(candidate):
            return self._reject(candidate, self.missing_constructor_message)

        return ValidationResult(Verdict.ACCEPTED)

    def _has_usable_constructor(self, candidate: CandidateDeclaration) -> bool:
        return any(
            constructor.is_public and constructor.parameter_count == 0
            for constructor in candidate.constructors
        )

    def _find_singleton_field(self, candidate: CandidateDeclaration) -> FieldFacts | None:
        for member in candidate.fields:
            if not member.is_public or not member.is_final:
                continue
            if member.name != self._config.singleton_field:
                continue
            if self._types.is_assignable(member.type_name, self._config.base_type):
                return member
        return None

    def _reject(self, candidate: CandidateDeclaration, message: str) -> ValidationResult:
        logger.debug("Rejecting %s: %s", candidate.qualified_name, message)
        error = Diagnostic(severity=Severity.ERROR, message=message, target=candidate)
        return ValidationResult(Verdict.REJECTED, (error,))
