"""Language registration processor.

Collects classes marked with a language registration annotation across
analysis rounds, validates them, and writes a deterministic properties
resource (``META-INF/truffle/language``) listing every valid registration,
so languages can be discovered without scanning the runtime classpath.
"""

from language_registration.accumulator import RegistrationAccumulator
from language_registration.build import ProcessingSummary, process_sources
from language_registration.config import ProcessorConfig
from language_registration.diagnostics import (
    CollectingMessager,
    DiagnosticReporter,
    LoggingMessager,
)
from language_registration.errors import (
    ParserError,
    ProcessorConfigError,
    ProcessorStateError,
    RegistrationError,
    ResourceAlreadyCreatedError,
    ResourceWriteError,
)
from language_registration.models import (
    CandidateDeclaration,
    ConstructorFacts,
    DeclarationKind,
    Diagnostic,
    EnclosingKind,
    FieldFacts,
    Modifier,
    RegistrationMetadata,
    RoundEnvironment,
    Severity,
    SourceLocation,
)
from language_registration.processor import (
    LanguageRegistrationProcessor,
    ProcessingEnvironment,
    ProcessorState,
)
from language_registration.protocols import (
    ExpectedErrors,
    Messager,
    NoExpectedErrors,
    ResourceSink,
    TypeResolver,
)
from language_registration.serializer import RegistrationSerializer
from language_registration.sinks import FilesystemResourceSink, InMemoryResourceSink
from language_registration.validator import (
    RegistrationValidator,
    ValidationResult,
    Verdict,
)

__all__ = [
    # Processor
    "LanguageRegistrationProcessor",
    "ProcessingEnvironment",
    "ProcessorConfig",
    "ProcessorState",
    "ProcessingSummary",
    "process_sources",
    # Components
    "RegistrationAccumulator",
    "RegistrationSerializer",
    "RegistrationValidator",
    "ValidationResult",
    "Verdict",
    # Models
    "CandidateDeclaration",
    "ConstructorFacts",
    "DeclarationKind",
    "Diagnostic",
    "EnclosingKind",
    "FieldFacts",
    "Modifier",
    "RegistrationMetadata",
    "RoundEnvironment",
    "Severity",
    "SourceLocation",
    # Host protocols and implementations
    "CollectingMessager",
    "DiagnosticReporter",
    "ExpectedErrors",
    "FilesystemResourceSink",
    "InMemoryResourceSink",
    "LoggingMessager",
    "Messager",
    "NoExpectedErrors",
    "ResourceSink",
    "TypeResolver",
    # Errors
    "ParserError",
    "ProcessorConfigError",
    "ProcessorStateError",
    "RegistrationError",
    "ResourceAlreadyCreatedError",
    "ResourceWriteError",
]
