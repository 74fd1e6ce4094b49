"""Tests for JavaSourceParser."""

import pytest

from language_registration.java.models import (
    ConstantReference,
    ConstantSum,
    JavaTypeModel,
    UnsupportedConstant,
)
from language_registration.java.parser import (
    JavaSourceParser,
    add_constants,
    decode_java_string,
)

SL_LANGUAGE = """\
package com.example.sl;

import com.oracle.truffle.api.TruffleLanguage;
import com.oracle.truffle.api.nodes.*;

@TruffleLanguage.Registration(
    id = "sl",
    name = "SL",
    version = "0." + 33,
    mimeType = {"application/x-sl", "text/x-sl"},
    dependentLanguages = {},
    interactive = false)
public final class SLLanguage extends TruffleLanguage<SLContext> implements Cloneable {
    public static final String MIME = "application/x-sl";
    private int a, b;

    public SLLanguage() {
    }

    SLLanguage(String name, int... flags) {
    }

    public static class Nested {
    }

    interface Callback {
        SLLanguage DEFAULT = null;

        class Holder {
        }
    }

    enum Mode { ON, OFF }

    void run() {
        class LocalHelper {
        }
        Runnable r = () -> {
            class SecondHelper {
            }
        };
    }
}
"""


@pytest.fixture(scope="module")
def parser() -> JavaSourceParser:
    return JavaSourceParser()


@pytest.fixture(scope="module")
def sl_language(parser: JavaSourceParser) -> JavaTypeModel:
    unit = parser.parse(SL_LANGUAGE, "SLLanguage.java")
    return unit.types[0]


def _nested(model: JavaTypeModel, name: str) -> JavaTypeModel:
    return next(n for n in model.nested if n.name == name)


class TestCompilationUnit:
    """Tests for package, imports and top-level types."""

    def test_package_and_imports(self, parser: JavaSourceParser) -> None:
        unit = parser.parse(SL_LANGUAGE, "SLLanguage.java")

        assert unit.path == "SLLanguage.java"
        assert unit.package == "com.example.sl"
        assert unit.imports == ["com.oracle.truffle.api.TruffleLanguage"]
        assert unit.on_demand_imports == ["com.oracle.truffle.api.nodes"]
        assert [t.name for t in unit.types] == ["SLLanguage"]

    def test_default_package(self, parser: JavaSourceParser) -> None:
        unit = parser.parse("class A {}\ninterface B {}\n")

        assert unit.package == ""
        kinds = [(t.name, t.kind) for t in unit.types]
        assert kinds == [("A", "class"), ("B", "interface")]

    def test_static_imports(self, parser: JavaSourceParser) -> None:
        unit = parser.parse(
            "import static p.Constants.ID;\nimport static p.Names.*;\nclass A {}\n"
        )

        assert unit.static_imports == ["p.Constants.ID"]
        assert unit.static_on_demand_imports == ["p.Names"]
        assert unit.imports == []
        assert unit.on_demand_imports == []


class TestTypeDeclarations:
    """Tests for type-level extraction."""

    def test_class_header(self, sl_language: JavaTypeModel) -> None:
        assert sl_language.kind == "class"
        assert sl_language.enclosing_kind == "package"
        assert sl_language.modifiers == ["public", "final"]
        assert sl_language.superclass == "TruffleLanguage<SLContext>"
        assert sl_language.interfaces == ["Cloneable"]
        assert sl_language.line_start == 6

    def test_registration_annotation_values(
        self, sl_language: JavaTypeModel
    ) -> None:
        [annotation] = sl_language.annotations

        assert annotation.name == "TruffleLanguage.Registration"
        assert annotation.matches("com.oracle.truffle.api.TruffleLanguage.Registration")
        assert annotation.values == {
            "id": "sl",
            "name": "SL",
            "version": "0.33",
            "mimeType": ("application/x-sl", "text/x-sl"),
            "dependentLanguages": (),
            "interactive": False,
        }

    def test_fields_with_multiple_declarators(
        self, sl_language: JavaTypeModel
    ) -> None:
        fields = [(f.name, f.type_name, f.modifiers) for f in sl_language.fields]

        assert fields == [
            ("MIME", "String", ["public", "static", "final"]),
            ("a", "int", ["private"]),
            ("b", "int", ["private"]),
        ]

    def test_declared_constructors(self, sl_language: JavaTypeModel) -> None:
        constructors = [
            (c.modifiers, c.parameter_count, c.implicit)
            for c in sl_language.constructors
        ]

        assert constructors == [(["public"], 0, False), ([], 2, False)]

    def test_nested_types_and_implicit_modifiers(
        self, sl_language: JavaTypeModel
    ) -> None:
        nested = _nested(sl_language, "Nested")
        callback = _nested(sl_language, "Callback")
        mode = _nested(sl_language, "Mode")
        holder = _nested(callback, "Holder")

        assert nested.enclosing_kind == "class"
        assert nested.modifiers == ["public", "static"]
        assert callback.kind == "interface"
        assert callback.modifiers == ["static"]
        assert mode.kind == "enum"
        assert "static" in mode.modifiers
        assert holder.enclosing_kind == "interface"
        assert holder.modifiers == ["public", "static"]

    def test_interface_fields_are_public_static_final(
        self, sl_language: JavaTypeModel
    ) -> None:
        [default] = _nested(sl_language, "Callback").fields

        assert default.name == "DEFAULT"
        assert default.type_name == "SLLanguage"
        assert default.modifiers == ["public", "static", "final"]

    def test_implicit_default_constructor_follows_class_access(
        self, sl_language: JavaTypeModel
    ) -> None:
        [constructor] = _nested(sl_language, "Nested").constructors

        assert constructor.implicit
        assert constructor.parameter_count == 0
        assert constructor.modifiers == ["public"]

    def test_final_fields_keep_their_constant_initializer(self, parser: JavaSourceParser) -> None:
        unit = parser.parse(
            "class A {\n"
            "    static final String ID = \"sl\";\n"
            "    static final String FULL = ID + \"-lang\";\n"
            "    static String mutable = \"m\";\n"
            "    static final Object OTHER = compute();\n"
            "}\n"
        )

        initializers = {f.name: f.initializer for f in unit.types[0].fields}
        assert initializers == {
            "ID": "sl",
            "FULL": ConstantSum(operands=(ConstantReference(name="ID"), "-lang")),
            "mutable": None,
            "OTHER": None,
        }

    def test_local_classes_with_the_same_name_are_numbered_separately(
        self, parser: JavaSourceParser
    ) -> None:
        unit = parser.parse(
            "class Outer {\n"
            "    void a() { class Helper {} class Other {} }\n"
            "    void b() { class Helper {} }\n"
            "}\n"
        )

        locals_ = [(n.name, n.local_index) for n in unit.types[0].nested]
        assert locals_ == [("Helper", 1), ("Other", 1), ("Helper", 2)]

    def test_local_classes_are_numbered(
        self, sl_language: JavaTypeModel
    ) -> None:
        locals_ = [
            (n.name, n.local_index, n.enclosing_kind)
            for n in sl_language.nested
            if n.local_index
        ]

        assert locals_ == [("LocalHelper", 1, "method"), ("SecondHelper", 1, "method")]


class TestAnnotationValues:
    """Tests for constant evaluation of annotation elements."""

    def _values(self, parser: JavaSourceParser, arguments: str) -> dict[str, object]:
        unit = parser.parse(f"@Registration({arguments})\npublic class A {{}}\n")
        return unit.types[0].annotations[0].values

    def test_single_value_shorthand(self, parser: JavaSourceParser) -> None:
        assert self._values(parser, '"only"') == {"value": "only"}

    def test_string_escapes(self, parser: JavaSourceParser) -> None:
        values = self._values(parser, r'name = "café \"q\"\t1"')

        assert values == {"name": 'café "q"\t1'}

    def test_parenthesised_concatenation(self, parser: JavaSourceParser) -> None:
        assert self._values(parser, 'version = ("1." + 2) + "-" + true') == {
            "version": "1.2-true"
        }

    def test_names_are_kept_as_references(self, parser: JavaSourceParser) -> None:
        values = self._values(parser, 'name = Constants.NAME, id = ID, version = "v" + V + 1')

        assert values == {
            "name": ConstantReference(name="Constants.NAME"),
            "id": ConstantReference(name="ID"),
            "version": ConstantSum(operands=("v", ConstantReference(name="V"), 1)),
        }

    def test_unsupported_expressions_are_kept_with_a_reason(
        self, parser: JavaSourceParser
    ) -> None:
        values = self._values(parser, 'name = compute(), id = "x"')

        assert values["id"] == "x"
        unsupported = values["name"]
        assert isinstance(unsupported, UnsupportedConstant)
        assert unsupported.text == "compute()"
        assert "unsupported constant" in unsupported.reason

    def test_marker_annotation_has_no_values(self, parser: JavaSourceParser) -> None:
        unit = parser.parse("@Deprecated public class A {}\n")

        [annotation] = unit.types[0].annotations
        assert annotation.name == "Deprecated"
        assert annotation.values == {}


class TestDecodeJavaString:
    """Tests for escape decoding."""

    @pytest.mark.parametrize(
        ("body", "decoded"),
        [
            ("plain", "plain"),
            (r"a\nb", "a\nb"),
            (r"\\", "\\"),
            (r"\101", "A"),
            (r"\uuu0041", "A"),
            (r"\uD83D\uDE00", "\U0001F600"),
        ],
    )
    def test_decode(self, body: str, decoded: str) -> None:
        assert decode_java_string(body) == decoded


class TestAddConstants:
    """Tests for Java ``+`` on constant values."""

    @pytest.mark.parametrize(
        ("lhs", "rhs", "result"),
        [
            ("a", "b", "ab"),
            ("v", 1, "v1"),
            (1, "-rc", "1-rc"),
            ("x", True, "xtrue"),
            (2, 3, 5),
        ],
    )
    def test_add(self, lhs: object, rhs: object, result: object) -> None:
        assert add_constants(lhs, rhs) == result

    @pytest.mark.parametrize(("lhs", "rhs"), [(True, False), (1, True), ("a", ("b",))])
    def test_invalid_operands(self, lhs: object, rhs: object) -> None:
        with pytest.raises(ValueError):
            add_constants(lhs, rhs)
