"""Name resolution and subtype checks over parsed Java sources."""

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass

from language_registration.java.models import JavaCompilationUnit, JavaTypeModel

logger = logging.getLogger(__name__)

_TYPE_ARGUMENTS = re.compile(r"<[^<>]*>")
_ANNOTATION_PREFIX = re.compile(r"@[\w.]+\s*")
_PRIMITIVES = frozenset(
    {"boolean", "byte", "char", "short", "int", "long", "float", "double", "void"}
)
_OBJECT = "java.lang.Object"


def erase(type_text: str) -> str:
    """Strip type arguments, type annotations and whitespace from a type."""
    text = _ANNOTATION_PREFIX.sub("", type_text)
    previous = None
    while previous != text:
        previous = text
        text = _TYPE_ARGUMENTS.sub("", text)
    return "".join(text.split())


@dataclass(frozen=True)
class IndexedType:
    """A type declaration placed in its compilation unit and enclosing type."""

    qualified_name: str
    binary_name: str
    model: JavaTypeModel
    unit: JavaCompilationUnit
    enclosing: "IndexedType | None" = None


class JavaTypeIndex:
    """Index of every type declared in a set of compilation units.

    Resolves type names as written in source to qualified names, following
    Java scoping (enclosing and member types, the compilation unit,
    single-type imports, the package, on-demand imports) and answers
    assignability questions by walking declared supertypes. Types outside
    the indexed sources are only known by name, so an external type is
    assignable to nothing but itself.
    """

    def __init__(self, known_types: set[str] | None = None) -> None:
        self._types: dict[str, IndexedType] = {}
        self._known_types: set[str] = set(known_types or ())
        self._supertypes: dict[str, tuple[str, ...]] = {}

    def add_unit(self, unit: JavaCompilationUnit) -> list[IndexedType]:
        """Index all types of a compilation unit.

        Returns:
            The indexed types in declaration order (outer before nested)

        """
        added: list[IndexedType] = []
        prefix = f"{unit.package}." if unit.package else ""
        for model in unit.types:
            qualified = f"{prefix}{model.name}"
            added.extend(self._add_type(model, unit, qualified, qualified, None))
        self._supertypes.clear()
        return added

    def _add_type(
        self,
        model: JavaTypeModel,
        unit: JavaCompilationUnit,
        qualified: str,
        binary: str,
        enclosing: IndexedType | None,
    ) -> Iterator[IndexedType]:
        indexed = IndexedType(qualified, binary, model, unit, enclosing)
        if qualified in self._types:
            logger.warning("Duplicate type %s in %s", qualified, unit.path)
        self._types[qualified] = indexed
        yield indexed
        for nested in model.nested:
            separator = f"${nested.local_index}" if nested.local_index is not None else "$"
            yield from self._add_type(
                nested,
                unit,
                f"{qualified}.{nested.name}",
                f"{binary}{separator}{nested.name}",
                indexed,
            )

    def get(self, qualified_name: str) -> IndexedType | None:
        return self._types.get(qualified_name)

    def __contains__(self, qualified_name: str) -> bool:
        return qualified_name in self._types or qualified_name in self._known_types

    def __len__(self) -> int:
        return len(self._types)

    def resolve(
        self, type_text: str, unit: JavaCompilationUnit, scope: IndexedType | None = None
    ) -> str:
        """Resolve a type as written inside ``scope`` to a qualified name.

        Args:
            type_text: Type as written in source, possibly generic
            unit: Compilation unit the text appears in
            scope: Innermost type declaration whose body contains the text

        Returns:
            Qualified, erased type name; unresolvable names are returned
            as written (qualified) or placed in the scope's package (simple)

        """
        name = erase(type_text)
        if not name or name.endswith("]") or name in _PRIMITIVES:
            return name
        found = self.lookup(name, unit, scope)
        if found is not None:
            return found
        if "." in name:
            return name
        return f"{unit.package}.{name}" if unit.package else name

    def lookup(
        self, type_text: str, unit: JavaCompilationUnit, scope: IndexedType | None = None
    ) -> str | None:
        """Resolve a type name through scopes and imports only.

        Unlike ``resolve`` there is no fallback: None means no enclosing type,
        import, package member or known type introduces the first segment.
        """
        name = erase(type_text)
        first, _, rest = name.partition(".")
        head = self._resolve_simple(first, unit, scope)
        if head is None:
            return None
        return f"{head}.{rest}" if rest else head

    def _resolve_simple(
        self, simple: str, unit: JavaCompilationUnit, scope: IndexedType | None
    ) -> str | None:
        current = scope
        while current is not None:
            if current.model.name == simple:
                return current.qualified_name
            member = f"{current.qualified_name}.{simple}"
            if member in self._types:
                return member
            current = current.enclosing

        package_prefix = f"{unit.package}." if unit.package else ""
        for model in unit.types:
            if model.name == simple:
                return f"{package_prefix}{model.name}"
        for imported in unit.imports:
            if imported.rsplit(".", 1)[-1] == simple:
                return imported
        if f"{package_prefix}{simple}" in self._types:
            return f"{package_prefix}{simple}"
        for on_demand in unit.on_demand_imports:
            candidate = f"{on_demand}.{simple}"
            if candidate in self:
                return candidate
        if f"java.lang.{simple}" == _OBJECT:
            return _OBJECT
        return None

    def supertypes(self, qualified_name: str) -> tuple[str, ...]:
        """Direct supertypes of an indexed type, resolved and erased."""
        if qualified_name in self._supertypes:
            return self._supertypes[qualified_name]
        indexed = self._types.get(qualified_name)
        if indexed is None:
            return ()
        model = indexed.model
        written = ([model.superclass] if model.superclass else []) + model.interfaces
        resolved = tuple(self.resolve(t, indexed.unit, indexed.enclosing) for t in written)
        self._supertypes[qualified_name] = resolved
        return resolved

    def is_assignable(self, type_name: str, base_type: str) -> bool:
        """Return True if ``type_name`` is ``base_type`` or one of its subtypes."""
        type_name = erase(type_name)
        base_type = erase(base_type)
        if not type_name or type_name.endswith("]") or type_name in _PRIMITIVES:
            return False
        if base_type == _OBJECT:
            return True

        visited: set[str] = set()
        pending = [type_name]
        while pending:
            current = pending.pop()
            if current == base_type:
                return True
            if current in visited:
                continue
            visited.add(current)
            pending.extend(self.supertypes(current))
        return False
