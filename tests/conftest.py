# tests/conftest.py
"""
Shared helpers: small builders for in-memory controllers.

The helpers mirror how a handler reads in source, e.g.::

    [ProducesResponseType(typeof(string), 200)]
    [ProducesResponseType(404)]
    public IActionResult Get() { return Ok("result"); }

becomes::

    make_method("Get",
                [produces(200, STRING), produces(404)],
                ret(ok_call(t, "result")))
"""

import pytest

from producescheck.symbols import (
    INT32,
    MVC_NAMESPACE,
    OBJECT,
    STRING,
    Call,
    Method,
    MethodDeclaration,
    NamedType,
    Return,
    SourceSpan,
    ValueExpr,
    mvc_types,
    produces,
)

CONTROLLER_FILE = "TestController.cs"


@pytest.fixture
def t():
    """A fresh MVC type catalogue."""
    return mvc_types()


def span(line, column=6, end_column=0):
    return SourceSpan(CONTROLLER_FILE, line, column, line, end_column)


def literal(type_ref, text=""):
    return ValueExpr(type_ref, text)


def string_literal(text="result"):
    return ValueExpr(STRING, f'"{text}"')


def int_literal(value=0):
    return ValueExpr(INT32, str(value))


def ret(expression=None, line=0):
    return Return(expression, line)


def result_call(t, result_name, *args, name=None):
    """``return <Helper>(args)`` producing ``t[result_name]``."""
    helper = name or result_name.replace("ObjectResult", "").replace("Result", "")
    return Call(helper, t[result_name], tuple(args))


def ok_call(t, payload=None):
    if payload is None:
        return result_call(t, "OkResult")
    if isinstance(payload, str):
        payload = string_literal(payload)
    return result_call(t, "OkObjectResult", payload, name="Ok")


def make_method(name, attributes, *returns, generated=False, parts=None):
    """
    A method with one declaration holding *returns*.

    *parts* (a list of return lists) models a partial method with several
    syntactic declarations and overrides *returns*.
    """
    if parts is None:
        parts = [list(returns)]
    declarations = tuple(MethodDeclaration(tuple(p)) for p in parts)
    return Method(
        name=name,
        attributes=tuple(attributes),
        declarations=declarations,
        is_generated=generated,
    )


def custom_result(t, name, base="StatusCodeResult"):
    return NamedType(name, "Sample.Results", t[base])


def sample_controller(t):
    """The two actions of the sample project's ``ControllerExample``."""
    get = make_method(
        "Get",
        [
            produces(200, STRING, location=span(9)),
            produces(200, INT32, location=span(10)),
            produces(400, location=span(11)),
        ],
        ret(result_call(t, "BadRequestResult"), line=14),
        ret(ok_call(t, "result"), line=15),
    )
    post = make_method(
        "Post",
        [
            produces(200, STRING, location=span(19)),
            produces(400, location=span(20)),
        ],
        ret(literal(t["ObjectResult"], 'new ObjectResult("result")'), line=23),
    )
    return [get, post]
