"""Data models for Java source extraction results."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class AnnotationModel(BaseModel):
    """An annotation use with its evaluated element values."""

    name: str
    values: dict[str, Any] = {}  # constants, tuples or unresolved expressions
    line: int

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    def matches(self, qualified_name: str) -> bool:
        """True if the written name is a dotted suffix of ``qualified_name``."""
        return qualified_name == self.name or qualified_name.endswith(f".{self.name}")


class JavaFieldModel(BaseModel):
    """A field declared in a type body."""

    name: str
    type_name: str
    modifiers: list[str] = []
    annotations: list[AnnotationModel] = []
    line: int
    initializer: Any = None  # evaluated constant of a final field, if any


class JavaConstructorModel(BaseModel):
    """A declared or implicit constructor."""

    modifiers: list[str] = []
    parameter_count: int = 0
    implicit: bool = False
    line: int


class JavaTypeModel(BaseModel):
    """A type declaration and everything declared inside it."""

    name: str
    kind: str  # "class", "interface", "enum", "record", "annotation_type"
    enclosing_kind: str = "package"
    modifiers: list[str] = []
    annotations: list[AnnotationModel] = []
    superclass: str | None = None
    interfaces: list[str] = []
    fields: list[JavaFieldModel] = []
    constructors: list[JavaConstructorModel] = []
    nested: list["JavaTypeModel"] = []
    local_index: int | None = None  # per-name count of local classes in the outer type
    line_start: int
    line_end: int


class JavaCompilationUnit(BaseModel):
    """One parsed ``.java`` file."""

    path: str
    package: str = ""
    imports: list[str] = []
    on_demand_imports: list[str] = []
    static_imports: list[str] = []
    static_on_demand_imports: list[str] = []
    types: list[JavaTypeModel] = []


class ConstantReference(BaseModel):
    """A name in a constant expression, e.g. ``ID`` or ``SLLanguage.ID``."""

    model_config = ConfigDict(frozen=True)

    name: str


class ConstantSum(BaseModel):
    """A ``+`` chain with at least one operand that still needs resolving.

    Operands are folded left to right once every reference is resolved.
    """

    model_config = ConfigDict(frozen=True)

    operands: tuple[Any, ...]


class UnsupportedConstant(BaseModel):
    """An element value that is not a constant this parser can evaluate."""

    model_config = ConfigDict(frozen=True)

    text: str
    reason: str
