# tests/test_declarations.py
"""
Tests for reading response declarations off method attributes.
"""

from producescheck.config import AnalyzerOptions
from producescheck.declarations import (
    Declaration,
    extract_declarations,
    is_response_declaration,
    to_declaration,
)
from producescheck.symbols import (
    Attribute,
    Constant,
    ConstantKind,
    NamedType,
    SourceSpan,
    produces,
)

from tests.conftest import INT32, MVC_NAMESPACE, OBJECT, STRING, make_method, span


class TestIsResponseDeclaration:

    def test_default_attribute(self):
        assert is_response_declaration(produces(200), AnalyzerOptions())

    def test_same_name_other_namespace(self):
        cls = NamedType("ProducesResponseTypeAttribute", "Other.Mvc", OBJECT)
        assert not is_response_declaration(produces(200, attribute_class=cls), AnalyzerOptions())

    def test_other_attribute(self):
        cls = NamedType("HttpGetAttribute", MVC_NAMESPACE, OBJECT)
        assert not is_response_declaration(Attribute(cls), AnalyzerOptions())

    def test_unresolved_attribute_class(self):
        assert not is_response_declaration(Attribute(None), AnalyzerOptions())

    def test_configured_attribute(self):
        cls = NamedType("ResponseAttribute", "My.Web", OBJECT)
        opts = AnalyzerOptions(attribute_name="ResponseAttribute", attribute_namespace="My.Web")
        assert is_response_declaration(produces(200, attribute_class=cls), opts)


class TestToDeclaration:

    def test_status_only(self):
        d = to_declaration(produces(404, location=span(9)))
        assert d == Declaration(
            status_code=404,
            payload_type=None,
            location=span(9),
            attribute_name="ProducesResponseTypeAttribute",
            status_kind=ConstantKind.PRIMITIVE,
        )

    def test_type_and_status(self):
        d = to_declaration(produces(200, STRING))
        assert d.status_code == 200
        assert d.payload_type is STRING

    def test_enum_status(self, t):
        d = to_declaration(produces(Constant.enum(t["HttpStatusCode"], 403)))
        assert d.status_code == 403
        assert d.status_kind is ConstantKind.ENUM

    def test_no_status_argument(self):
        cls = NamedType("ProducesResponseTypeAttribute", MVC_NAMESPACE, OBJECT)
        assert to_declaration(Attribute(cls)) is None
        assert to_declaration(Attribute(cls, (Constant.of_type(STRING),))) is None

    def test_bool_is_not_a_status(self):
        cls = NamedType("ProducesResponseTypeAttribute", MVC_NAMESPACE, OBJECT)
        attr = Attribute(cls, (Constant(ConstantKind.PRIMITIVE, True),))
        assert to_declaration(attr) is None

    def test_payload_needs_two_parameter_constructor(self):
        cls = NamedType("ProducesResponseTypeAttribute", MVC_NAMESPACE, OBJECT)
        args = (Constant.of_type(STRING), Constant.integer(200),
                Constant(ConstantKind.PRIMITIVE, "application/json"))
        d = to_declaration(Attribute(cls, args))
        assert d.status_code == 200
        assert d.payload_type is None

    def test_two_parameters_without_type_argument(self):
        cls = NamedType("ProducesResponseTypeAttribute", MVC_NAMESPACE, OBJECT)
        args = (Constant.integer(200), Constant(ConstantKind.PRIMITIVE, "text/plain"))
        d = to_declaration(Attribute(cls, args))
        assert d.payload_type is None

    def test_params_array_argument_ignored(self):
        cls = NamedType("ProducesResponseTypeAttribute", MVC_NAMESPACE, OBJECT)
        args = (Constant.of_type(STRING), Constant.integer(200),
                Constant(ConstantKind.PRIMITIVE, "application/json"),
                Constant(ConstantKind.ARRAY, ("text/plain",)))
        d = to_declaration(Attribute(cls, args))
        assert d.status_code == 200
        assert d.payload_type is None

    def test_array_constant_is_not_a_status(self):
        cls = NamedType("ProducesResponseTypeAttribute", MVC_NAMESPACE, OBJECT)
        assert to_declaration(Attribute(cls, (Constant(ConstantKind.ARRAY, 200),))) is None

    def test_missing_location(self):
        assert to_declaration(produces(200)).location == SourceSpan()


class TestExtractDeclarations:

    def test_attribute_order_kept(self):
        other = Attribute(NamedType("HttpGetAttribute", MVC_NAMESPACE, OBJECT))
        method = make_method("Get", [produces(200, STRING), other, produces(200, INT32),
                                     produces(400)])
        decls = extract_declarations(method)
        assert [(d.status_code, d.payload_type) for d in decls] == [
            (200, STRING), (200, INT32), (400, None),
        ]

    def test_declarations_without_status_dropped(self):
        cls = NamedType("ProducesResponseTypeAttribute", MVC_NAMESPACE, OBJECT)
        method = make_method("Get", [Attribute(cls), produces(404)])
        assert [d.status_code for d in extract_declarations(method)] == [404]

    def test_no_attributes(self):
        assert extract_declarations(make_method("Get", [])) == []
