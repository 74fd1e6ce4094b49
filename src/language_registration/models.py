"""Data models for registration candidates and their metadata."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class DeclarationKind(str, Enum):
    """Kind of a type declaration."""

    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    RECORD = "record"
    ANNOTATION_TYPE = "annotation_type"


class EnclosingKind(str, Enum):
    """Kind of the scope a declaration is declared in."""

    PACKAGE = "package"
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    RECORD = "record"
    ANNOTATION_TYPE = "annotation_type"
    METHOD = "method"


class Modifier(str, Enum):
    """Declaration modifiers relevant to registration checks."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"
    STATIC = "static"
    FINAL = "final"
    ABSTRACT = "abstract"


class SourceLocation(BaseModel):
    """Position of a declaration in its source file."""

    model_config = ConfigDict(frozen=True)

    path: str
    line: int


class ConstructorFacts(BaseModel):
    """A declared (or implicit) constructor."""

    model_config = ConfigDict(frozen=True)

    modifiers: frozenset[Modifier] = frozenset()
    parameter_count: int = 0
    implicit: bool = False

    @property
    def is_public(self) -> bool:
        return Modifier.PUBLIC in self.modifiers


class FieldFacts(BaseModel):
    """A declared field."""

    model_config = ConfigDict(frozen=True)

    name: str
    type_name: str
    modifiers: frozenset[Modifier] = frozenset()
    line: int | None = None

    @property
    def is_public(self) -> bool:
        return Modifier.PUBLIC in self.modifiers

    @property
    def is_final(self) -> bool:
        return Modifier.FINAL in self.modifiers


class RegistrationMetadata(BaseModel):
    """Payload of a registration marker.

    Defaults follow the registration annotation: an empty id is omitted
    from the generated resource, the version defaults to ``inherit``.
    """

    model_config = ConfigDict(frozen=True)

    id: str = ""
    name: str = ""
    implementation_name: str = ""
    version: str = "inherit"
    mime_types: tuple[str, ...] = ()
    dependent_languages: tuple[str, ...] = ()
    interactive: bool = True
    internal: bool = False


class CandidateDeclaration(BaseModel):
    """A type declaration found bearing the registration marker.

    Instances are immutable; the accumulator holds references to them and
    never copies or mutates them.
    """

    model_config = ConfigDict(frozen=True)

    qualified_name: str
    binary_name: str
    kind: DeclarationKind = DeclarationKind.CLASS
    modifiers: frozenset[Modifier] = frozenset()
    enclosing_kind: EnclosingKind = EnclosingKind.PACKAGE
    supertypes: tuple[str, ...] = ()
    constructors: tuple[ConstructorFacts, ...] = ()
    fields: tuple[FieldFacts, ...] = ()
    registration: RegistrationMetadata | None = None
    location: SourceLocation | None = None

    @property
    def simple_name(self) -> str:
        return self.qualified_name.rsplit(".", 1)[-1]

    @property
    def is_public(self) -> bool:
        return Modifier.PUBLIC in self.modifiers

    @property
    def is_static(self) -> bool:
        return Modifier.STATIC in self.modifiers

    @property
    def is_nested(self) -> bool:
        """True when declared anywhere other than directly in a package."""
        return self.enclosing_kind is not EnclosingKind.PACKAGE


class RoundEnvironment(BaseModel):
    """One analysis round delivered by the host."""

    model_config = ConfigDict(frozen=True)

    processing_over: bool = False
    candidates: tuple[CandidateDeclaration, ...] = ()


class Severity(str, Enum):
    """Severity of a diagnostic."""

    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    """A message anchored at a declaration or one of its fields."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    message: str
    target: CandidateDeclaration
    member: FieldFacts | None = None

    def format(self) -> str:
        """Render as ``path:line: severity: message`` for logs and reports."""
        anchor = self.target.qualified_name
        if self.member is not None:
            anchor = f"{anchor}.{self.member.name}"
        location = self.target.location
        if location is None:
            return f"{anchor}: {self.severity.value}: {self.message}"
        line = location.line
        if self.member is not None and self.member.line is not None:
            line = self.member.line
        return f"{location.path}:{line}: {self.severity.value}: {self.message} ({anchor})"
