"""Host environment backed by Java sources.

Turns parsed Java sources into analysis rounds of registration candidates
and provides the type resolution and expected-error hooks the processor
needs.
"""

import functools
import logging
from collections.abc import Iterator, Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError

from language_registration.config import ProcessorConfig
from language_registration.errors import ParserError
from language_registration.java.index import IndexedType, JavaTypeIndex
from language_registration.java.models import (
    AnnotationModel,
    ConstantReference,
    ConstantSum,
    JavaFieldModel,
    UnsupportedConstant,
)
from language_registration.java.parser import JavaSourceParser, add_constants
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
from language_registration.protocols import Messager

logger = logging.getLogger(__name__)

EXPECT_ERROR_ANNOTATION = "ExpectError"
NO_ERROR_FOUND = "Expected an error, but none found!"

_KNOWN_MODIFIERS = {m.value: m for m in Modifier}

# Annotation element name -> RegistrationMetadata field
_REGISTRATION_ELEMENTS = {
    "id": "id",
    "name": "name",
    "implementationName": "implementation_name",
    "version": "version",
    "mimeType": "mime_types",
    "dependentLanguages": "dependent_languages",
    "interactive": "interactive",
    "internal": "internal",
}
_FIELD_ELEMENTS = {field: element for element, field in _REGISTRATION_ELEMENTS.items()}
_ARRAY_ELEMENTS = frozenset({"mimeType", "dependentLanguages"})

JAVA_EXTENSIONS = (".java",)


class JavaSource(BaseModel):
    """A Java source file's path and content."""

    model_config = ConfigDict(frozen=True)

    path: str
    content: str

    @classmethod
    def from_path(cls, path: Path) -> "JavaSource":
        """Read a source file.

        Raises:
            ParserError: If the file cannot be read or is not valid UTF-8

        """
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ParserError(f"Failed to read source: {path}: {e}") from e
        return cls(path=str(path), content=content)

    @classmethod
    def from_directory(cls, root: Path) -> list["JavaSource"]:
        """Read every Java file below ``root``, in path order."""
        return [
            cls.from_path(path)
            for path in sorted(root.rglob("*"))
            if path.is_file() and path.suffix.lower() in JAVA_EXTENSIONS
        ]


def _modifiers(names: Sequence[str]) -> frozenset[Modifier]:
    return frozenset(_KNOWN_MODIFIERS[n] for n in names if n in _KNOWN_MODIFIERS)


def _as_tuple(value: object) -> tuple[object, ...]:
    return value if isinstance(value, tuple) else (value,)


def _is_constant(field: JavaFieldModel) -> bool:
    return field.initializer is not None and {"static", "final"} <= set(field.modifiers)


def _expected_messages(annotations: Sequence[AnnotationModel]) -> tuple[str, ...]:
    messages: list[str] = []
    for annotation in annotations:
        if annotation.simple_name != EXPECT_ERROR_ANNOTATION:
            continue
        for message in _as_tuple(annotation.values.get("value", ())):
            if isinstance(message, str):
                messages.append(message)
    return tuple(messages)


def message_matches(expected: str, actual: str) -> bool:
    """Exact match, or prefix match when ``expected`` ends with ``%``."""
    if expected.endswith("%"):
        return actual.startswith(expected[:-1])
    return actual == expected


class JavaExpectedErrors:
    """Expected-error hook driven by ``@ExpectError`` annotations in sources."""

    def __init__(self, messager: Messager) -> None:
        self._messager = messager
        self._expected: dict[tuple[str, str | None], tuple[str, ...]] = {}

    def expect(self, binary_name: str, member: str | None, messages: tuple[str, ...]) -> None:
        if messages:
            self._expected[(binary_name, member)] = messages

    def expected_for(self, binary_name: str, member: str | None = None) -> tuple[str, ...]:
        return self._expected.get((binary_name, member), ())

    def is_expected_error(
        self,
        target: CandidateDeclaration,
        message: str,
        member: FieldFacts | None = None,
    ) -> bool:
        expected = self.expected_for(target.binary_name, member.name if member else None)
        return any(message_matches(e, message) for e in expected)

    def assert_no_error_expected(self, target: CandidateDeclaration) -> None:
        if self.expected_for(target.binary_name):
            self._messager.print_message(
                Diagnostic(severity=Severity.ERROR, message=NO_ERROR_FOUND, target=target)
            )


class JavaSourceEnvironment:
    """Analysis host over batches of Java sources.

    Every batch becomes one round; a final round signals that processing
    is over. All batches are indexed up front so supertypes declared in a
    later batch still resolve.
    """

    def __init__(
        self,
        batches: Sequence[Sequence[JavaSource]],
        messager: Messager,
        config: ProcessorConfig | None = None,
        parser: JavaSourceParser | None = None,
    ) -> None:
        self._config = config or ProcessorConfig()
        self._parser = parser or JavaSourceParser()
        self._index = JavaTypeIndex(known_types={self._config.base_type})
        self._messager = messager
        self._expected_errors = JavaExpectedErrors(messager)
        self._rounds: list[list[IndexedType]] = []
        for batch in batches:
            round_types: list[IndexedType] = []
            for source in batch:
                unit = self._parser.parse(source.content, source.path)
                round_types.extend(self._index.add_unit(unit))
            self._rounds.append(round_types)

    @property
    def types(self) -> JavaTypeIndex:
        return self._index

    @property
    def expected_errors(self) -> JavaExpectedErrors:
        return self._expected_errors

    def rounds(self) -> Iterator[RoundEnvironment]:
        """Yield one round per batch, then the processing-over round."""
        for number, round_types in enumerate(self._rounds, start=1):
            candidates = tuple(
                self._to_candidate(t)
                for t in round_types
                if self._registration_of(t) is not None
            )
            logger.debug("Round %d: %d candidate(s)", number, len(candidates))
            yield RoundEnvironment(candidates=candidates)
        yield RoundEnvironment(processing_over=True)

    def _registration_of(self, indexed: IndexedType) -> AnnotationModel | None:
        """The registration annotation on a type, if it carries one.

        The written name is resolved through the enclosing types and the
        imports of the unit. Names nothing introduces (e.g. a member type
        inherited from a class outside the sources) are matched by dotted
        suffix of the configured annotation instead.
        """
        target = self._config.registration_annotation
        for annotation in indexed.model.annotations:
            resolved = self._index.lookup(annotation.name, indexed.unit, indexed.enclosing)
            if resolved == target or (resolved is None and annotation.matches(target)):
                return annotation
        return None

    def _to_candidate(self, indexed: IndexedType) -> CandidateDeclaration:
        model = indexed.model
        unit = indexed.unit
        fields = tuple(
            FieldFacts(
                name=f.name,
                type_name=self._index.resolve(f.type_name, unit, indexed),
                modifiers=_modifiers(f.modifiers),
                line=f.line,
            )
            for f in model.fields
        )
        for f in model.fields:
            self._expected_errors.expect(
                indexed.binary_name, f.name, _expected_messages(f.annotations)
            )
        self._expected_errors.expect(
            indexed.binary_name, None, _expected_messages(model.annotations)
        )

        registration: RegistrationMetadata | None = None
        problem: str | None = None
        annotation = self._registration_of(indexed)
        if annotation is not None:
            registration, problem = self._metadata(annotation, indexed)

        candidate = CandidateDeclaration(
            qualified_name=indexed.qualified_name,
            binary_name=indexed.binary_name,
            kind=DeclarationKind(model.kind),
            modifiers=_modifiers(model.modifiers),
            enclosing_kind=EnclosingKind(model.enclosing_kind),
            supertypes=self._index.supertypes(indexed.qualified_name),
            constructors=tuple(
                ConstructorFacts(
                    modifiers=_modifiers(c.modifiers),
                    parameter_count=c.parameter_count,
                    implicit=c.implicit,
                )
                for c in model.constructors
            ),
            fields=fields,
            registration=registration,
            location=SourceLocation(path=unit.path, line=model.line_start),
        )
        if problem is not None:
            self._messager.print_message(
                Diagnostic(severity=Severity.ERROR, message=problem, target=candidate)
            )
        return candidate

    def _metadata(
        self, annotation: AnnotationModel, indexed: IndexedType
    ) -> tuple[RegistrationMetadata | None, str | None]:
        """Build metadata from the annotation's element values.

        Returns:
            The metadata and None, or None and the reason the values cannot
            be used (an element that is not a resolvable constant, or a value
            of the wrong type)

        """
        values: dict[str, object] = {}
        for element, value in annotation.values.items():
            field_name = _REGISTRATION_ELEMENTS.get(element)
            if field_name is None:
                logger.debug("Ignoring unknown registration element '%s'", element)
                continue
            try:
                resolved = self._constant_value(value, indexed, frozenset())
            except ValueError as e:
                return None, (
                    f"Cannot evaluate @{annotation.simple_name} element '{element}': {e}"
                )
            values[field_name] = _as_tuple(resolved) if element in _ARRAY_ELEMENTS else resolved
        try:
            return RegistrationMetadata.model_validate(values), None
        except ValidationError as e:
            details = "; ".join(
                f"{_FIELD_ELEMENTS.get(str(err['loc'][0]), err['loc'][0])}: {err['msg']}"
                for err in e.errors()
            )
            return None, f"Invalid @{annotation.simple_name} values: {details}"

    def _constant_value(
        self, value: object, scope: IndexedType, seen: frozenset[tuple[str, str]]
    ) -> object:
        """Replace constant references in ``value`` by what they evaluate to.

        Raises:
            ValueError: If a name is not a static final field with a constant
                initializer in the indexed sources, or the value is not a
                constant expression

        """
        if isinstance(value, tuple):
            return tuple(self._constant_value(v, scope, seen) for v in value)
        if isinstance(value, UnsupportedConstant):
            raise ValueError(value.reason)
        if isinstance(value, ConstantSum):
            operands = [self._constant_value(v, scope, seen) for v in value.operands]
            return functools.reduce(add_constants, operands)
        if isinstance(value, ConstantReference):
            owner, field = self._find_constant(value.name, scope)
            key = (owner.qualified_name, field.name)
            if key in seen:
                raise ValueError(f"circular definition of constant '{value.name}'")
            return self._constant_value(field.initializer, owner, seen | {key})
        return value

    def _find_constant(
        self, name: str, scope: IndexedType
    ) -> tuple[IndexedType, JavaFieldModel]:
        type_text, _, field_name = name.rpartition(".")
        if type_text:
            owner = self._index.get(self._index.resolve(type_text, scope.unit, scope))
            owners = self._with_supertypes(owner) if owner is not None else []
        else:
            owners = []
            current: IndexedType | None = scope
            while current is not None:
                owners.extend(self._with_supertypes(current))
                current = current.enclosing
            owners.extend(self._static_import_owners(field_name, scope))

        for owner in owners:
            for field in owner.model.fields:
                if field.name == field_name and _is_constant(field):
                    return owner, field
        raise ValueError(f"'{name}' is not a constant declared in the analysed sources")

    def _with_supertypes(self, indexed: IndexedType) -> list[IndexedType]:
        """The type followed by its indexed supertypes, breadth first."""
        found: list[IndexedType] = []
        visited: set[str] = set()
        pending = [indexed.qualified_name]
        while pending:
            qualified = pending.pop(0)
            current = self._index.get(qualified)
            if qualified in visited or current is None:
                continue
            visited.add(qualified)
            found.append(current)
            pending.extend(self._index.supertypes(qualified))
        return found

    def _static_import_owners(self, field_name: str, scope: IndexedType) -> list[IndexedType]:
        unit = scope.unit
        type_names = [
            imported.rpartition(".")[0]
            for imported in unit.static_imports
            if imported.rpartition(".")[2] == field_name
        ]
        type_names.extend(unit.static_on_demand_imports)
        return [t for t in (self._index.get(name) for name in type_names) if t is not None]
