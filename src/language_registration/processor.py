"""Round-driven registration processor."""

import logging
from dataclasses import dataclass, field
from enum import Enum

from language_registration.accumulator import RegistrationAccumulator
from language_registration.config import ProcessorConfig
from language_registration.diagnostics import DiagnosticReporter
from language_registration.models import CandidateDeclaration, RoundEnvironment
from language_registration.protocols import (
    ExpectedErrors,
    Messager,
    NoExpectedErrors,
    ResourceSink,
    TypeResolver,
)
from language_registration.serializer import RegistrationSerializer
from language_registration.validator import RegistrationValidator, Verdict

logger = logging.getLogger(__name__)


class ProcessorState(Enum):
    """Lifecycle of a processor within one compilation run."""

    COLLECTING = "collecting"
    FINALIZING = "finalizing"
    DONE = "done"


@dataclass
class ProcessingEnvironment:
    """Host collaborators available to the processor for one run."""

    types: TypeResolver
    messager: Messager
    sink: ResourceSink
    expected_errors: ExpectedErrors = field(default_factory=NoExpectedErrors)


class LanguageRegistrationProcessor:
    """Collects language registrations across rounds and writes the resource.

    Each regular round validates the new candidates and keeps the accepted
    ones. The round flagged ``processing_over`` serializes everything kept
    so far exactly once; rounds after that are ignored.
    """

    def __init__(
        self,
        env: ProcessingEnvironment,
        config: ProcessorConfig | None = None,
        accumulator: RegistrationAccumulator | None = None,
    ) -> None:
        self._env = env
        self._config = config or ProcessorConfig()
        self._accumulator = (
            accumulator if accumulator is not None else RegistrationAccumulator()
        )
        self._validator = RegistrationValidator(env.types, self._config)
        self._serializer = RegistrationSerializer(
            self._config, comment=f"Generated by {self.generator_name()}"
        )
        self._reporter = DiagnosticReporter(env.messager, env.expected_errors)
        self._state = ProcessorState.COLLECTING
        self._resource_written = False

    @classmethod
    def generator_name(cls) -> str:
        return f"{cls.__module__}.{cls.__qualname__}"

    @property
    def state(self) -> ProcessorState:
        return self._state

    @property
    def resource_written(self) -> bool:
        return self._resource_written

    @property
    def accumulator(self) -> RegistrationAccumulator:
        return self._accumulator

    def process(self, round_env: RoundEnvironment) -> bool:
        """Handle one analysis round.

        Args:
            round_env: Candidates of this round, or the processing-over signal

        Returns:
            True; the registration marker is always claimed by this processor

        """
        if self._state is not ProcessorState.COLLECTING:
            logger.debug("Ignoring round delivered in state %s", self._state.value)
            return True

        if round_env.processing_over:
            self._finalize()
            return True

        for candidate in round_env.candidates:
            self._process_candidate(candidate)
        return True

    def _process_candidate(self, candidate: CandidateDeclaration) -> None:
        result = self._validator.validate(candidate)
        if result.verdict is Verdict.SKIPPED:
            return

        for diagnostic in result.diagnostics:
            self._reporter.emit(diagnostic)

        if not result.accepted:
            return

        if not result.diagnostics:
            self._reporter.assert_no_error_expected(candidate)
        self._accumulator.add(candidate)
        logger.debug(
            "Accepted %s (run %s)", candidate.binary_name, self._accumulator.run_id
        )

    def _finalize(self) -> None:
        self._state = ProcessorState.FINALIZING
        try:
            declarations = self._accumulator.drain_all()
            if declarations:
                self._resource_written = self._serializer.write(
                    declarations, self._env.sink, self._reporter
                )
            else:
                logger.debug("No registrations accepted in run %s", self._accumulator.run_id)
        finally:
            self._state = ProcessorState.DONE
