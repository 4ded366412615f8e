# tests/test_analyzer.py
"""
Tests for redundant response-declaration detection, from the pure
decision function up to the per-method callback.
"""

import logging
from dataclasses import replace

import pytest

from producescheck.analyzer import (
    analyze_method,
    find_orphans,
    find_redundant,
    site_satisfies,
)
from producescheck.config import AnalyzerOptions
from producescheck.declarations import Declaration
from producescheck.diagnostics import DiagnosticSeverity
from producescheck.return_sites import ReturnSite
from producescheck.rules import ALL_RULES, REDUNDANT_RESPONSE_DECLARATION_RULE
from producescheck.symbols import (
    CancellationToken,
    Constant,
    ConstantKind,
    InMemoryModel,
    NamedType,
    ValueExpr,
    produces,
)

from tests.conftest import (
    INT32,
    OBJECT,
    STRING,
    custom_result,
    literal,
    make_method,
    ok_call,
    result_call,
    ret,
    sample_controller,
    span,
)


@pytest.fixture
def model():
    return InMemoryModel()


class TestFindRedundant:

    def test_matching_status_only(self, t):
        decl = Declaration(404)
        assert find_redundant([decl], [ReturnSite(t["NotFoundResult"])]) == []

    def test_no_sites_flags_everything(self):
        decls = [Declaration(200), Declaration(404)]
        assert find_redundant(decls, []) == decls

    def test_declaration_order_kept(self, t):
        decls = [Declaration(404), Declaration(200), Declaration(400)]
        orphans = find_redundant(decls, [ReturnSite(t["OkResult"])])
        assert [d.status_code for d in orphans] == [404, 400]

    def test_payload_must_match(self, t):
        decl = Declaration(200, STRING)
        assert find_redundant([decl], [ReturnSite(t["OkObjectResult"], INT32)]) == [decl]
        assert find_redundant([decl], [ReturnSite(t["OkObjectResult"], STRING)]) == []

    def test_declared_payload_with_payloadless_site(self, t):
        decl = Declaration(200, STRING)
        assert find_redundant([decl], [ReturnSite(t["OkResult"])]) == [decl]

    def test_subtype_payload_satisfies(self, t):
        decl = Declaration(200, OBJECT)
        assert find_redundant([decl], [ReturnSite(t["OkObjectResult"], STRING)]) == []

    def test_site_payload_ignored_without_declared_payload(self, t):
        decl = Declaration(200)
        assert site_satisfies(ReturnSite(t["OkObjectResult"], INT32), decl)


class TestScenarios:
    """Whole methods run through ``analyze_method``."""

    def test_every_declaration_produced(self, t, model):
        method = make_method(
            "Get",
            [produces(200), produces(404)],
            ret(ok_call(t)),
            ret(result_call(t, "NotFoundResult")),
        )
        assert analyze_method(method, model) == []

    def test_undelivered_status_flagged(self, t, model):
        method = make_method(
            "Get",
            [produces(200, STRING, location=span(8)), produces(404, location=span(9))],
            ret(ok_call(t, "result")),
        )
        diags = analyze_method(method, model)
        assert len(diags) == 1
        d = diags[0]
        assert d.rule_id == "PC0001"
        assert d.severity is DiagnosticSeverity.WARNING
        assert d.message == "Redundant response-declaration attribute"
        assert d.args == ("ProducesResponseTypeAttribute", 404)
        assert d.location == span(9)

    def test_payload_type_mismatch_flagged(self, t, model):
        method = make_method(
            "Get",
            [produces(200, STRING, location=span(8)), produces(200, INT32, location=span(9))],
            ret(ok_call(t, "result")),
        )
        diags = analyze_method(method, model)
        assert [d.location.line for d in diags] == [9]
        assert diags[0].args == ("ProducesResponseTypeAttribute", 200)

    def test_status_declared_without_payload(self, t, model):
        method = make_method(
            "Get",
            [produces(200, location=span(8)), produces(400, location=span(9))],
            ret(ok_call(t)),
        )
        assert [d.args[1] for d in analyze_method(method, model)] == [400]

    def test_declared_payload_but_site_has_none(self, t, model):
        method = make_method("Get", [produces(200, STRING)], ret(ok_call(t)))
        assert [d.args[1] for d in analyze_method(method, model)] == [200]

    def test_method_without_declarations(self, t, model):
        method = make_method("Get", [], ret(ok_call(t)))
        assert analyze_method(method, model) == []

    def test_method_without_returns(self, model):
        method = make_method("Get", [produces(200), produces(404)])
        assert [d.args[1] for d in analyze_method(method, model)] == [200, 404]

    def test_plain_object_result_produces_nothing(self, t, model):
        method = make_method(
            "Post", [produces(200)],
            ret(literal(t["ObjectResult"], 'new ObjectResult("x")')),
        )
        assert len(analyze_method(method, model)) == 1

    def test_unresolved_return_type(self, t, model):
        method = make_method("Get", [produces(200)], ret(ValueExpr(None, "Mystery()")))
        assert len(analyze_method(method, model)) == 1

    def test_custom_result_resolved_by_keyword(self, t, model):
        result = custom_result(t, "CustomNotFoundResult")
        method = make_method(
            "Get", [produces(404)],
            ret(literal(result, "new CustomNotFoundResult()")),
        )
        assert analyze_method(method, model) == []

    def test_enum_status_constant(self, t, model):
        forbid = custom_result(t, "ForbidResult")
        status = Constant.enum(t["HttpStatusCode"], 403)
        method = make_method("Get", [produces(status)], ret(literal(forbid)))
        assert analyze_method(method, model) == []

    def test_plain_integer_forbid_is_flagged(self, t, model):
        forbid = custom_result(t, "ForbidResult")
        method = make_method("Get", [produces(403)], ret(literal(forbid)))
        assert len(analyze_method(method, model)) == 1

    def test_partial_method_declarations_combined(self, t, model):
        method = make_method(
            "Get", [produces(200), produces(404)],
            parts=[[ret(ok_call(t))], [ret(result_call(t, "NotFoundResult"))]],
        )
        assert analyze_method(method, model) == []


class TestSampleController:

    def test_get_flags_only_int_payload(self, t, model):
        get, _post = sample_controller(t)
        diags = analyze_method(get, model)
        assert [(d.location.line, d.args[1]) for d in diags] == [(10, 200)]

    def test_post_flags_both_declarations(self, t, model):
        _get, post = sample_controller(t)
        diags = analyze_method(post, model)
        assert [(d.location.line, d.args[1]) for d in diags] == [(19, 200), (20, 400)]


class TestFindOrphansGates:

    def test_generated_code_skipped_by_default(self, t, model):
        method = make_method("Get", [produces(404)], ret(ok_call(t)), generated=True)
        assert find_orphans(method, model, AnalyzerOptions()) == []

    def test_generated_code_when_enabled(self, t, model):
        method = make_method("Get", [produces(404)], ret(ok_call(t)), generated=True)
        opts = AnalyzerOptions(analyze_generated_code=True)
        assert [d.status_code for d in find_orphans(method, model, opts)] == [404]

    def test_disabled_rule(self, t, model):
        method = make_method("Get", [produces(404)], ret(ok_call(t)))
        opts = AnalyzerOptions(disabled_rules=("PC0001",))
        assert find_orphans(method, model, opts) == []

    def test_cancellation_yields_nothing(self, t, model):
        token = CancellationToken()
        token.cancel()
        method = make_method("Get", [produces(404)], ret(ok_call(t)))
        assert analyze_method(method, model, cancellation=token) == []

    def test_cancellation_logged(self, t, model, caplog):
        token = CancellationToken()
        token.cancel()
        method = make_method("Get", [produces(404)], ret(ok_call(t)))
        with caplog.at_level(logging.DEBUG, logger="producescheck"):
            find_orphans(method, model, AnalyzerOptions(), token)
        assert "analysis cancelled" in caplog.text

    def test_severity_override(self, t, model):
        method = make_method("Get", [produces(404)], ret(ok_call(t)))
        opts = AnalyzerOptions(severity=DiagnosticSeverity.ERROR)
        assert analyze_method(method, model, opts)[0].severity is DiagnosticSeverity.ERROR

    def test_severity_from_rule_descriptor(self, t, model, monkeypatch):
        quiet = replace(REDUNDANT_RESPONSE_DECLARATION_RULE,
                        default_severity=DiagnosticSeverity.HIDDEN)
        monkeypatch.setitem(ALL_RULES, "PC0001", quiet)
        method = make_method("Get", [produces(404)], ret(ok_call(t)))
        assert analyze_method(method, model)[0].severity is DiagnosticSeverity.HIDDEN

    def test_rule_off_by_default(self, t, model, monkeypatch):
        opt_in = replace(REDUNDANT_RESPONSE_DECLARATION_RULE, enabled_by_default=False)
        monkeypatch.setitem(ALL_RULES, "PC0001", opt_in)
        method = make_method("Get", [produces(404)], ret(ok_call(t)))
        assert analyze_method(method, model) == []
        opts = AnalyzerOptions(enabled_rules=("PC0001",))
        assert [d.args[1] for d in analyze_method(method, model, opts)] == [404]

    def test_configured_markers(self, t, model):
        method = make_method("Get", [produces(200)], ret(ok_call(t)))
        opts = AnalyzerOptions(status_markers=("ObjectResult",))
        assert len(analyze_method(method, model, opts)) == 1


class TestDiagnosticShape:

    def test_checker_and_category(self, t, model):
        method = make_method("Get", [produces(404)], ret(ok_call(t)))
        d = analyze_method(method, model)[0]
        assert d.checker_name == "redundant-response-declaration"
        assert d.category == "Design"

    def test_status_kind_does_not_leak_into_args(self, t, model):
        status = Constant.enum(t["HttpStatusCode"], 404)
        method = make_method("Get", [produces(status)], ret(ok_call(t)))
        d = analyze_method(method, model)[0]
        assert d.args == ("ProducesResponseTypeAttribute", 404)
        assert ConstantKind.ENUM not in d.args


class TestProperties:

    @pytest.mark.parametrize("object_result,flagged", [
        ("ok", []),
        ("plain", [200]),
    ])
    def test_bad_request_plus_string_object_result(self, t, model, object_result, flagged):
        # Ok("result") carries a string and implies 200; a bare
        # new ObjectResult("result") implies no status code at all
        if object_result == "ok":
            second = ok_call(t, "result")
        else:
            second = literal(t["ObjectResult"], 'new ObjectResult("result")')
        method = make_method(
            "Get", [produces(200), produces(400)],
            ret(result_call(t, "BadRequestResult")),
            ret(second),
        )
        assert [d.args[1] for d in analyze_method(method, model)] == flagged

    def test_orphan_reported_once(self, t, model):
        method = make_method(
            "Get",
            [produces(200), produces(201), produces(404, location=span(4)), produces(409)],
            ret(ok_call(t)),
            ret(result_call(t, "CreatedResult", name="Created")),
            ret(result_call(t, "ConflictResult")),
        )
        diags = analyze_method(method, model)
        assert [d.args[1] for d in diags] == [404]

    def test_sibling_payload_rejected(self, t, model):
        animal = NamedType("Animal", "Zoo", OBJECT)
        cat = NamedType("Cat", "Zoo", animal)
        dog = NamedType("Dog", "Zoo", animal)
        method = make_method(
            "Get", [produces(200, cat), produces(200, animal)],
            ret(ok_call(t, literal(dog, "new Dog()"))),
        )
        diags = analyze_method(method, model)
        assert len(diags) == 1
        assert find_orphans(method, model, AnalyzerOptions())[0].payload_type is cat

    def test_duplicate_returns_do_not_change_outcome(self, t, model):
        attrs = [produces(200, STRING), produces(404)]
        once = make_method("Get", attrs, ret(ok_call(t, "a")))
        thrice = make_method("Get", attrs, ret(ok_call(t, "a")), ret(ok_call(t, "b")),
                             ret(ok_call(t, "c")))
        assert analyze_method(once, model) == analyze_method(thrice, model)

    def test_rerun_is_identical(self, t, model):
        get, post = sample_controller(t)
        first = analyze_method(get, model) + analyze_method(post, model)
        second = analyze_method(get, model) + analyze_method(post, model)
        assert first == second
