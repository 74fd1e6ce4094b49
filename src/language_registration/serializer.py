"""Deterministic serialization of accumulated registrations."""

import logging
from collections.abc import Sequence

from language_registration.config import ProcessorConfig
from language_registration.diagnostics import DiagnosticReporter
from language_registration.errors import ResourceAlreadyCreatedError, ResourceWriteError
from language_registration.models import (
    CandidateDeclaration,
    Diagnostic,
    RegistrationMetadata,
    Severity,
)
from language_registration.properties import dump_properties
from language_registration.protocols import ResourceSink

logger = logging.getLogger(__name__)


def _bool_text(value: bool) -> str:
    return "true" if value else "false"


class RegistrationSerializer:
    """Turns accepted declarations into the registration resource.

    Output depends only on the declarations and their order: keys are
    sorted as plain strings (so ``entry10.*`` precedes ``entry2.*``),
    dependency names are sorted, and no timestamp is written.
    """

    def __init__(self, config: ProcessorConfig | None = None, comment: str | None = None) -> None:
        self._config = config or ProcessorConfig()
        self._comment = self._config.comment or comment

    def to_properties(self, declarations: Sequence[CandidateDeclaration]) -> dict[str, str]:
        """Flatten declarations into a key-sorted mapping.

        Declarations without registration metadata are skipped and do not
        consume an entry number.
        """
        properties: dict[str, str] = {}
        count = 0
        for declaration in declarations:
            metadata = declaration.registration
            if metadata is None:
                logger.debug("No registration metadata on %s", declaration.binary_name)
                continue
            count += 1
            prefix = f"{self._config.entry_prefix}{count}."
            properties.update(self._entry(prefix, declaration.binary_name, metadata))
        return dict(sorted(properties.items()))

    def _entry(
        self, prefix: str, class_name: str, metadata: RegistrationMetadata
    ) -> dict[str, str]:
        entry: dict[str, str] = {}
        if metadata.id:
            entry[prefix + "id"] = metadata.id
        entry[prefix + "name"] = metadata.name
        entry[prefix + "implementationName"] = metadata.implementation_name
        entry[prefix + "version"] = metadata.version
        entry[prefix + "className"] = class_name
        for i, mime_type in enumerate(metadata.mime_types):
            entry[f"{prefix}mimeType.{i}"] = mime_type
        for i, dependency in enumerate(sorted(metadata.dependent_languages)):
            entry[f"{prefix}dependentLanguage.{i}"] = dependency
        entry[prefix + "interactive"] = _bool_text(metadata.interactive)
        entry[prefix + "internal"] = _bool_text(metadata.internal)
        return entry

    def serialize(self, declarations: Sequence[CandidateDeclaration]) -> bytes | None:
        """Render the resource content.

        Returns:
            Encoded resource, or None when no declaration carries metadata

        """
        properties = self.to_properties(declarations)
        if not properties:
            return None
        return dump_properties(properties, self._comment)

    def write(
        self,
        declarations: Sequence[CandidateDeclaration],
        sink: ResourceSink,
        reporter: DiagnosticReporter,
    ) -> bool:
        """Write the resource through the sink, at most once.

        A resource already produced in this run by another writer is left
        alone. Any other failure is reported as an error on the first
        declaration; expected-error fixtures never silence it.

        Returns:
            True if the resource was written

        """
        content = self.serialize(declarations)
        if content is None:
            logger.debug("No registrations to write")
            return False

        path = self._config.resource_path
        try:
            with sink.create_resource(path, declarations) as stream:
                stream.write(content)
        except ResourceAlreadyCreatedError as e:
            logger.debug("Resource %s already created: %s", path, e)
            return False
        except (OSError, ResourceWriteError) as e:
            reporter.emit_unchecked(
                Diagnostic(
                    severity=Severity.ERROR,
                    message=str(e),
                    target=declarations[0],
                )
            )
            return False

        logger.info("Wrote %s (%d bytes)", path, len(content))
        return True
