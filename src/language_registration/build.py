"""Entry point running one registration pass over Java sources."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from language_registration.accumulator import RegistrationAccumulator
from language_registration.config import ProcessorConfig
from language_registration.diagnostics import CollectingMessager
from language_registration.java.environment import JavaSource, JavaSourceEnvironment
from language_registration.models import Diagnostic, Severity
from language_registration.processor import (
    LanguageRegistrationProcessor,
    ProcessingEnvironment,
)
from language_registration.protocols import ResourceSink

logger = logging.getLogger(__name__)


@dataclass
class ProcessingSummary:
    """Outcome of one compilation run."""

    run_id: str
    accepted: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    resource_written: bool = False

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    @property
    def succeeded(self) -> bool:
        return not self.errors


def process_sources(
    batches: Sequence[Sequence[JavaSource]],
    sink: ResourceSink,
    messager: CollectingMessager | None = None,
    config: ProcessorConfig | None = None,
    run_id: str | None = None,
) -> ProcessingSummary:
    """Run the registration processor over batches of Java sources.

    Each batch is delivered as one analysis round, followed by the final
    round that writes the registration resource through ``sink``.

    Args:
        batches: Source batches, one per round
        sink: Destination of the generated resource
        messager: Receives diagnostics (a fresh collecting messager by default)
        config: Processor configuration
        run_id: Identifier of this compilation run

    Returns:
        ProcessingSummary with accepted binary names and all diagnostics

    """
    config = config or ProcessorConfig()
    messager = messager if messager is not None else CollectingMessager()
    host = JavaSourceEnvironment(batches, messager, config)
    accumulator = RegistrationAccumulator(run_id)
    processor = LanguageRegistrationProcessor(
        ProcessingEnvironment(
            types=host.types,
            messager=messager,
            sink=sink,
            expected_errors=host.expected_errors,
        ),
        config,
        accumulator,
    )

    summary = ProcessingSummary(run_id=accumulator.run_id)
    for round_env in host.rounds():
        if not round_env.processing_over:
            before = len(accumulator)
            processor.process(round_env)
            summary.accepted.extend(
                d.binary_name for d in accumulator.snapshot()[before:]
            )
        else:
            processor.process(round_env)

    summary.diagnostics = list(messager.diagnostics)
    summary.resource_written = processor.resource_written
    logger.info(
        "Run %s: %d registration(s) accepted, %d error(s), %d warning(s)",
        summary.run_id,
        len(summary.accepted),
        len(summary.errors),
        len(summary.warnings),
    )
    return summary
