"""Java source parser using tree-sitter.

Extracts the declaration structure the registration checks rely on:
packages, imports, type declarations (including nested and local ones),
their modifiers, annotations, supertypes, constructors and fields.
Implicit language rules (default constructors, implicit modifiers of
interface members and nested types) are applied during extraction.
"""

import logging
import re
import textwrap

import tree_sitter_java as tsjava
from tree_sitter import Language, Node, Parser

from language_registration.java.base import (
    LINE_INDEX_OFFSET,
    find_child_by_type,
    find_children_by_type,
    find_outermost_by_types,
    get_line,
    get_node_text,
)
from language_registration.java.models import (
    AnnotationModel,
    ConstantReference,
    ConstantSum,
    JavaCompilationUnit,
    JavaConstructorModel,
    JavaFieldModel,
    JavaTypeModel,
    UnsupportedConstant,
)

logger = logging.getLogger(__name__)

_DEFAULT_ENCODING = "utf-8"

# tree-sitter-java node types
_TYPE_DECLARATIONS = {
    "class_declaration": "class",
    "interface_declaration": "interface",
    "enum_declaration": "enum",
    "record_declaration": "record",
    "annotation_type_declaration": "annotation_type",
}
_TYPE_NODE_TYPES = frozenset(_TYPE_DECLARATIONS)
_ANNOTATION_TYPES = frozenset({"annotation", "marker_annotation"})
_FIELD_TYPES = frozenset({"field_declaration", "constant_declaration"})
_CONSTRUCTOR_TYPES = frozenset({"constructor_declaration", "compact_constructor_declaration"})
_PARAMETER_TYPES = frozenset({"formal_parameter", "spread_parameter"})
_COMMENT_TYPES = frozenset({"line_comment", "block_comment"})
_NAME_TYPES = frozenset({"identifier", "field_access", "scoped_identifier"})
_MODIFIER_KEYWORDS = frozenset(
    {
        "public",
        "protected",
        "private",
        "static",
        "final",
        "abstract",
        "default",
        "sealed",
        "non-sealed",
        "strictfp",
        "transient",
        "volatile",
        "synchronized",
        "native",
    }
)
_ACCESS_MODIFIERS = ("public", "protected", "private")

# Members of these are implicitly public static (fields also final)
_INTERFACE_LIKE = frozenset({"interface", "annotation_type"})
# Nested declarations of these kinds are implicitly static
_IMPLICITLY_STATIC = frozenset({"interface", "enum", "record", "annotation_type"})

_ESCAPE_PATTERN = re.compile(r"\\(u+[0-9a-fA-F]{4}|[0-3][0-7]{2}|[0-7]{1,2}|.)", re.DOTALL)
_SIMPLE_ESCAPES = {
    "b": "\b",
    "t": "\t",
    "n": "\n",
    "f": "\f",
    "r": "\r",
    "s": " ",
    "\n": "",
    '"': '"',
    "'": "'",
    "\\": "\\",
}


def decode_java_string(body: str) -> str:
    """Decode the escape sequences of a Java string literal body.

    Surrogate pairs written as two ``\\u`` escapes are combined into one
    character.
    """

    def _replace(match: re.Match[str]) -> str:
        escape = match.group(1)
        if escape[0] == "u":
            return chr(int(escape.lstrip("u"), 16))
        if escape[0] in "01234567":
            return chr(int(escape, 8))
        return _SIMPLE_ESCAPES.get(escape, escape)

    decoded = _ESCAPE_PATTERN.sub(_replace, body)
    return decoded.encode("utf-16", "surrogatepass").decode("utf-16")


def _java_string_of(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def add_constants(lhs: object, rhs: object) -> object:
    """Apply Java's ``+`` to two constant values.

    Raises:
        ValueError: If an operand is not a string, integer or boolean, or
            neither operand is a string and they are not both integers

    """
    for operand in (lhs, rhs):
        if not isinstance(operand, str | int):
            raise ValueError(f"cannot add {operand!r}")
    if isinstance(lhs, str) or isinstance(rhs, str):
        return _java_string_of(lhs) + _java_string_of(rhs)
    if isinstance(lhs, bool) or isinstance(rhs, bool):
        raise ValueError(f"cannot add {lhs!r} and {rhs!r}")
    return lhs + rhs


def _is_deferred(value: object) -> bool:
    return isinstance(value, ConstantReference | ConstantSum)


class JavaSourceParser:
    """Parser for Java source code using tree-sitter-java."""

    def __init__(self) -> None:
        self._parser = Parser()
        self._parser.language = Language(tsjava.language())

    def parse(self, source_code: str, path: str = "<memory>") -> JavaCompilationUnit:
        """Parse Java source code into a compilation unit model.

        Args:
            source_code: Java source text
            path: Path recorded on the unit for diagnostics

        Returns:
            JavaCompilationUnit with all type declarations

        """
        source_bytes = source_code.encode(_DEFAULT_ENCODING)
        root = self._parser.parse(source_bytes).root_node
        if root.has_error:
            logger.warning("Syntax errors in %s; extraction may be incomplete", path)

        unit = JavaCompilationUnit(path=path)
        for child in root.children:
            if child.type == "package_declaration":
                unit.package = self._qualified_name_in(child, source_bytes) or ""
            elif child.type == "import_declaration":
                imported = self._qualified_name_in(child, source_bytes)
                if imported is None:
                    continue
                on_demand = find_child_by_type(child, "asterisk") is not None
                if find_child_by_type(child, "static") is not None:
                    target = (
                        unit.static_on_demand_imports if on_demand else unit.static_imports
                    )
                else:
                    target = unit.on_demand_imports if on_demand else unit.imports
                target.append(imported)
            elif child.type in _TYPE_DECLARATIONS:
                unit.types.append(
                    self._extract_type(child, _TYPE_DECLARATIONS[child.type], "package", source_bytes)
                )
        return unit

    def _qualified_name_in(self, node: Node, source_bytes: bytes) -> str | None:
        for child in node.named_children:
            if child.type in ("scoped_identifier", "identifier"):
                return get_node_text(child, source_bytes)
        return None

    def _extract_type(
        self,
        node: Node,
        kind: str,
        enclosing_kind: str,
        source_bytes: bytes,
        local_index: int | None = None,
    ) -> JavaTypeModel:
        """Extract a type declaration and its members."""
        name = self._declared_name(node, source_bytes)
        modifiers, annotations = self._get_modifiers(node, source_bytes)
        if enclosing_kind in _INTERFACE_LIKE:
            modifiers = self._with_modifiers(modifiers, "public", "static")
        elif enclosing_kind != "package" and kind in _IMPLICITLY_STATIC:
            modifiers = self._with_modifiers(modifiers, "static")

        type_model = JavaTypeModel(
            name=name,
            kind=kind,
            enclosing_kind=enclosing_kind,
            modifiers=modifiers,
            annotations=annotations,
            superclass=self._get_superclass(node, source_bytes),
            interfaces=self._get_interfaces(node, source_bytes),
            local_index=local_index,
            line_start=get_line(node),
            line_end=node.end_point[0] + LINE_INDEX_OFFSET,
        )

        record_components = self._count_parameters(node.child_by_field_name("parameters"))
        local_counts: dict[str, int] = {}
        for member in self._body_members(node):
            if member.type in _FIELD_TYPES:
                type_model.fields.extend(self._get_fields(member, kind, source_bytes))
            elif member.type in _TYPE_DECLARATIONS:
                type_model.nested.append(
                    self._extract_type(member, _TYPE_DECLARATIONS[member.type], kind, source_bytes)
                )
            else:
                if member.type in _CONSTRUCTOR_TYPES:
                    type_model.constructors.append(
                        self._get_constructor(member, record_components, source_bytes)
                    )
                for local in find_outermost_by_types(member, _TYPE_NODE_TYPES):
                    local_name = self._declared_name(local, source_bytes)
                    local_counts[local_name] = local_counts.get(local_name, 0) + 1
                    type_model.nested.append(
                        self._extract_type(
                            local,
                            _TYPE_DECLARATIONS[local.type],
                            "method",
                            source_bytes,
                            local_index=local_counts[local_name],
                        )
                    )

        if kind == "class" and not type_model.constructors:
            type_model.constructors.append(self._implicit_constructor(node, modifiers, 0))
        elif kind == "record" and not any(
            c.parameter_count == record_components for c in type_model.constructors
        ):
            type_model.constructors.append(
                self._implicit_constructor(node, modifiers, record_components)
            )
        return type_model

    def _declared_name(self, node: Node, source_bytes: bytes) -> str:
        name_node = node.child_by_field_name("name")
        return get_node_text(name_node, source_bytes) if name_node else "<anonymous>"

    def _implicit_constructor(
        self, node: Node, type_modifiers: list[str], parameter_count: int
    ) -> JavaConstructorModel:
        """Default (or canonical record) constructor with the access of its type."""
        return JavaConstructorModel(
            modifiers=[m for m in type_modifiers if m in _ACCESS_MODIFIERS],
            parameter_count=parameter_count,
            implicit=True,
            line=get_line(node),
        )

    def _body_members(self, node: Node) -> list[Node]:
        body = node.child_by_field_name("body")
        if body is None:
            return []
        members: list[Node] = []
        for child in body.children:
            if child.type == "enum_body_declarations":
                members.extend(child.children)
            else:
                members.append(child)
        return members

    def _with_modifiers(self, modifiers: list[str], *implicit: str) -> list[str]:
        return modifiers + [m for m in implicit if m not in modifiers]

    def _get_modifiers(
        self, node: Node, source_bytes: bytes
    ) -> tuple[list[str], list[AnnotationModel]]:
        """Extract modifier keywords and annotations."""
        modifiers: list[str] = []
        annotations: list[AnnotationModel] = []
        modifiers_node = find_child_by_type(node, "modifiers")
        if modifiers_node is None:
            return modifiers, annotations
        for child in modifiers_node.children:
            if child.type in _ANNOTATION_TYPES:
                annotations.append(self._get_annotation(child, source_bytes))
            elif child.type in _MODIFIER_KEYWORDS:
                modifiers.append(child.type)
        return modifiers, annotations

    def _get_superclass(self, node: Node, source_bytes: bytes) -> str | None:
        superclass = node.child_by_field_name("superclass")
        if superclass is None or not superclass.named_children:
            return None
        return get_node_text(superclass.named_children[0], source_bytes)

    def _get_interfaces(self, node: Node, source_bytes: bytes) -> list[str]:
        interfaces: list[str] = []
        for clause_type in ("super_interfaces", "extends_interfaces"):
            clause = find_child_by_type(node, clause_type)
            if clause is None:
                continue
            type_list = find_child_by_type(clause, "type_list")
            if type_list is None:
                continue
            interfaces.extend(get_node_text(t, source_bytes) for t in type_list.named_children)
        return interfaces

    def _get_fields(
        self, node: Node, owner_kind: str, source_bytes: bytes
    ) -> list[JavaFieldModel]:
        type_node = node.child_by_field_name("type")
        type_name = get_node_text(type_node, source_bytes) if type_node else ""
        modifiers, annotations = self._get_modifiers(node, source_bytes)
        if owner_kind in _INTERFACE_LIKE:
            modifiers = self._with_modifiers(modifiers, "public", "static", "final")

        fields: list[JavaFieldModel] = []
        for declarator in find_children_by_type(node, "variable_declarator"):
            name_node = declarator.child_by_field_name("name")
            if name_node is None:
                continue
            fields.append(
                JavaFieldModel(
                    name=get_node_text(name_node, source_bytes),
                    type_name=type_name,
                    modifiers=modifiers,
                    annotations=annotations,
                    line=get_line(declarator),
                    initializer=self._field_initializer(declarator, modifiers, source_bytes),
                )
            )
        return fields

    def _field_initializer(
        self, declarator: Node, modifiers: list[str], source_bytes: bytes
    ) -> object:
        """Constant initializer of a final field; None when there is none."""
        value_node = declarator.child_by_field_name("value")
        if value_node is None or "final" not in modifiers:
            return None
        try:
            return self._evaluate(value_node, source_bytes)
        except ValueError:
            return None

    def _get_constructor(
        self, node: Node, record_components: int, source_bytes: bytes
    ) -> JavaConstructorModel:
        modifiers, _ = self._get_modifiers(node, source_bytes)
        if node.type == "compact_constructor_declaration":
            parameter_count = record_components
        else:
            parameter_count = self._count_parameters(node.child_by_field_name("parameters"))
        return JavaConstructorModel(
            modifiers=modifiers,
            parameter_count=parameter_count,
            line=get_line(node),
        )

    def _count_parameters(self, parameters: Node | None) -> int:
        if parameters is None:
            return 0
        return sum(1 for p in parameters.named_children if p.type in _PARAMETER_TYPES)

    def _get_annotation(self, node: Node, source_bytes: bytes) -> AnnotationModel:
        """Extract an annotation and evaluate its constant element values.

        Names of constants are kept as references for the host to resolve.
        Values this parser cannot evaluate are kept as ``UnsupportedConstant``
        so a consumer can report them instead of falling back to a default.
        """
        name_node = node.child_by_field_name("name")
        name = get_node_text(name_node, source_bytes) if name_node else ""
        annotation = AnnotationModel(name=name, line=get_line(node))
        arguments = node.child_by_field_name("arguments")
        if arguments is None:
            return annotation

        for child in arguments.named_children:
            if child.type in _COMMENT_TYPES:
                continue
            if child.type == "element_value_pair":
                key_node = child.child_by_field_name("key")
                value_node = child.child_by_field_name("value")
                key = get_node_text(key_node, source_bytes) if key_node else "value"
            else:
                key, value_node = "value", child
            if value_node is None:
                continue
            try:
                annotation.values[key] = self._evaluate(value_node, source_bytes)
            except ValueError as e:
                logger.debug(
                    "Element '%s' of @%s at line %d is not a constant: %s",
                    key,
                    name,
                    get_line(child),
                    e,
                )
                annotation.values[key] = UnsupportedConstant(
                    text=get_node_text(value_node, source_bytes), reason=str(e)
                )
        return annotation

    def _evaluate(self, node: Node, source_bytes: bytes) -> object:
        """Evaluate a constant expression.

        Names are returned as ``ConstantReference`` and ``+`` chains that
        involve one as ``ConstantSum``; everything else is folded here.

        Raises:
            ValueError: If the expression is not a supported constant

        """
        node_type = node.type
        if node_type == "string_literal":
            return self._string_literal(get_node_text(node, source_bytes))
        if node_type == "true":
            return True
        if node_type == "false":
            return False
        if node_type == "decimal_integer_literal":
            return int(get_node_text(node, source_bytes).rstrip("lL").replace("_", ""))
        if node_type in _NAME_TYPES:
            return ConstantReference(name="".join(get_node_text(node, source_bytes).split()))
        if node_type == "element_value_array_initializer":
            return tuple(
                self._evaluate(child, source_bytes)
                for child in node.named_children
                if child.type not in _COMMENT_TYPES
            )
        if node_type == "parenthesized_expression" and node.named_children:
            return self._evaluate(node.named_children[0], source_bytes)
        if node_type == "binary_expression":
            operator = node.child_by_field_name("operator")
            left = node.child_by_field_name("left")
            right = node.child_by_field_name("right")
            if operator is not None and left is not None and right is not None:
                if get_node_text(operator, source_bytes) == "+":
                    lhs = self._evaluate(left, source_bytes)
                    rhs = self._evaluate(right, source_bytes)
                    if isinstance(lhs, ConstantSum):
                        return ConstantSum(operands=(*lhs.operands, rhs))
                    if _is_deferred(lhs) or _is_deferred(rhs):
                        return ConstantSum(operands=(lhs, rhs))
                    return add_constants(lhs, rhs)
        raise ValueError(f"unsupported constant '{get_node_text(node, source_bytes)}'")

    def _string_literal(self, text: str) -> str:
        if text.startswith('"""'):
            body = text[3:-3]
            _, _, body = body.partition("\n")
            return decode_java_string(textwrap.dedent(body))
        return decode_java_string(text[1:-1])
