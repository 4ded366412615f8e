"""
producescheck/symbols.py
════════════════════════

Contracts for the host's symbol model, plus an in-memory implementation.

The analyzer never parses source text.  Everything it knows about a
handler method comes through the protocols in PART 2: a method symbol with
its attributes, the syntactic declarations holding its return statements,
and a semantic model answering "what is the static type of this
expression" and "is this expression a resolved call".

PART 4 implements those protocols with plain frozen dataclasses so that
the rule can be driven from tests, samples, or any front end that can
describe its types by name, base type and interfaces.

Quick start
───────────
>>> t = mvc_types()
>>> get = Method(
...     name="Get",
...     attributes=(produces(200), produces(404)),
...     declarations=(MethodDeclaration(returns=(
...         Return(Call("Ok", t["OkResult"])),
...         Return(Call("NotFound", t["NotFoundResult"])),
...     )),),
... )
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    runtime_checkable,
)

from producescheck.errors import OperationCancelled


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — LOCATIONS AND CANCELLATION
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SourceSpan:
    """A span of source text; ``line``/``column`` are 1-based."""
    file: str = ""
    line: int = 0
    column: int = 0
    end_line: int = 0
    end_column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


class CancellationToken:
    """
    Cooperative cancellation signal shared between a host and the analyzer.

    The host calls :meth:`cancel`; traversal code calls
    :meth:`throw_if_cancelled` at regular points and unwinds with
    :class:`OperationCancelled`.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()

    def throw_if_cancelled(self, where: str = "") -> None:
        if self._event.is_set():
            raise OperationCancelled(where)


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — HOST PROTOCOLS
# ═════════════════════════════════════════════════════════════════════════

class ConstantKind(Enum):
    """Kind of an attribute constructor argument."""
    PRIMITIVE = auto()
    ENUM = auto()
    TYPE = auto()
    ARRAY = auto()


@runtime_checkable
class TypeRef(Protocol):
    """
    A resolved type.  Compared by identity; the analyzer only reads its
    name, namespace, base type and directly implemented interfaces.
    """

    @property
    def name(self) -> str: ...

    @property
    def namespace(self) -> str: ...

    @property
    def base_type(self) -> Optional[TypeRef]: ...

    @property
    def interfaces(self) -> Sequence[TypeRef]: ...


@runtime_checkable
class TypedConstant(Protocol):
    """A constructor argument value as the compiler sees it."""

    @property
    def kind(self) -> ConstantKind: ...

    @property
    def type(self) -> Optional[TypeRef]: ...

    @property
    def value(self) -> Any: ...


@runtime_checkable
class AttributeData(Protocol):
    """An attribute applied to a method symbol."""

    @property
    def attribute_class(self) -> Optional[TypeRef]: ...

    @property
    def constructor_arguments(self) -> Sequence[TypedConstant]: ...

    @property
    def constructor_parameter_count(self) -> int: ...

    @property
    def location(self) -> Optional[SourceSpan]: ...


@runtime_checkable
class ReturnStatement(Protocol):
    @property
    def expression(self) -> Optional[Any]: ...


@runtime_checkable
class MethodSyntax(Protocol):
    """One syntactic declaration of a method (partial methods have several)."""

    def return_statements(self) -> Iterable[ReturnStatement]: ...


@runtime_checkable
class MethodSymbol(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def attributes(self) -> Sequence[AttributeData]: ...

    @property
    def declarations(self) -> Sequence[MethodSyntax]: ...

    @property
    def is_generated(self) -> bool: ...


@runtime_checkable
class SemanticModel(Protocol):
    """Type and call-target queries over expression nodes."""

    def type_of(self, expression: Any) -> Optional[TypeRef]:
        """Static type of *expression*, or ``None`` if unresolvable."""
        ...

    def call_target(self, expression: Any) -> Optional[Any]:
        """Method symbol invoked by *expression*; ``None`` if it is not a
        call or the call does not bind."""
        ...

    def call_arguments(self, expression: Any) -> Sequence[Any]:
        """Argument expressions of a call, in source order."""
        ...


def qualified_name(type_ref: Optional[TypeRef]) -> str:
    if type_ref is None:
        return "<unresolved>"
    ns = getattr(type_ref, "namespace", "") or ""
    return f"{ns}.{type_ref.name}" if ns else type_ref.name


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — TYPE CHAIN TRAVERSAL
# ═════════════════════════════════════════════════════════════════════════

# Upper bound on inheritance depth; a host reporting a cyclic base chain
# must not hang the analysis.
MAX_BASE_CHAIN_DEPTH = 256


def iter_base_chain(type_ref: Optional[TypeRef]) -> Iterator[TypeRef]:
    """
    Yield *type_ref* followed by each of its base types, root last.

    Stops at an absent base type, on a repeated type, or after
    ``MAX_BASE_CHAIN_DEPTH`` steps.
    """
    seen = set()
    current = type_ref
    depth = 0
    while current is not None and depth < MAX_BASE_CHAIN_DEPTH:
        key = id(current)
        if key in seen:
            return
        seen.add(key)
        yield current
        current = current.base_type
        depth += 1


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — IN-MEMORY MODEL
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, eq=False)
class NamedType:
    """A type in the in-memory model.  Equality is object identity."""
    name: str
    namespace: str = ""
    base_type: Optional["NamedType"] = None
    interfaces: Tuple["NamedType", ...] = ()

    def __repr__(self) -> str:
        return f"NamedType({qualified_name(self)!r})"


@dataclass(frozen=True)
class Constant:
    kind: ConstantKind
    value: Any
    type: Optional[NamedType] = None

    @classmethod
    def integer(cls, value: int) -> Constant:
        return cls(ConstantKind.PRIMITIVE, value, INT32)

    @classmethod
    def enum(cls, enum_type: NamedType, value: int) -> Constant:
        return cls(ConstantKind.ENUM, value, enum_type)

    @classmethod
    def of_type(cls, type_ref: NamedType) -> Constant:
        return cls(ConstantKind.TYPE, type_ref, SYSTEM_TYPE)


@dataclass(frozen=True)
class Attribute:
    attribute_class: Optional[NamedType]
    constructor_arguments: Tuple[Constant, ...] = ()
    parameter_count: Optional[int] = None
    location: Optional[SourceSpan] = None

    @property
    def constructor_parameter_count(self) -> int:
        if self.parameter_count is not None:
            return self.parameter_count
        return len(self.constructor_arguments)


@dataclass(frozen=True, eq=False)
class ValueExpr:
    """Any non-call expression: literal, identifier, object creation."""
    type: Optional[NamedType]
    text: str = ""


@dataclass(frozen=True, eq=False)
class Call:
    """An invocation such as ``Ok(value)``.

    ``resolved=False`` models a call the compiler could not bind.
    """
    name: str
    result_type: Optional[NamedType]
    arguments: Tuple[Any, ...] = ()
    resolved: bool = True


@dataclass(frozen=True)
class Return:
    expression: Optional[Any] = None
    line: int = 0


@dataclass(frozen=True)
class MethodDeclaration:
    returns: Tuple[Return, ...] = ()

    def return_statements(self) -> Iterator[Return]:
        return iter(self.returns)


@dataclass(frozen=True)
class Method:
    name: str
    attributes: Tuple[Attribute, ...] = ()
    declarations: Tuple[MethodDeclaration, ...] = ()
    is_generated: bool = False
    location: Optional[SourceSpan] = None


class InMemoryModel:
    """:class:`SemanticModel` over the PART 4 node classes."""

    def type_of(self, expression: Any) -> Optional[NamedType]:
        if isinstance(expression, Call):
            return expression.result_type
        if isinstance(expression, ValueExpr):
            return expression.type
        return None

    def call_target(self, expression: Any) -> Optional[str]:
        if isinstance(expression, Call) and expression.resolved:
            return expression.name
        return None

    def call_arguments(self, expression: Any) -> Sequence[Any]:
        if isinstance(expression, Call):
            return expression.arguments
        return ()


# ── Well-known types ────────────────────────────────────────────────────

OBJECT = NamedType("Object", "System")
SYSTEM_TYPE = NamedType("Type", "System", OBJECT)
VALUE_TYPE = NamedType("ValueType", "System", OBJECT)
ICOMPARABLE = NamedType("IComparable", "System")
INT32 = NamedType("Int32", "System", VALUE_TYPE, (ICOMPARABLE,))
STRING = NamedType("String", "System", OBJECT, (ICOMPARABLE,))

MVC_NAMESPACE = "Microsoft.AspNetCore.Mvc"


def mvc_types() -> Dict[str, NamedType]:
    """
    Build the ASP.NET Core MVC result hierarchy.

    A fresh set of objects is returned on each call; types from two
    different calls never compare equal.
    """
    ns = MVC_NAMESPACE
    infra = ns + ".Infrastructure"
    t: Dict[str, NamedType] = {
        "Object": OBJECT,
        "String": STRING,
        "Int32": INT32,
        "IComparable": ICOMPARABLE,
    }
    t["IActionResult"] = NamedType("IActionResult", ns)
    t["IStatusCodeActionResult"] = NamedType("IStatusCodeActionResult", infra)
    t["ActionResult"] = NamedType("ActionResult", ns, OBJECT, (t["IActionResult"],))
    t["StatusCodeResult"] = NamedType(
        "StatusCodeResult", ns, t["ActionResult"], (t["IStatusCodeActionResult"],)
    )
    t["ObjectResult"] = NamedType(
        "ObjectResult", ns, t["ActionResult"], (t["IStatusCodeActionResult"],)
    )
    for name in ("OkResult", "NoContentResult", "BadRequestResult",
                 "UnauthorizedResult", "NotFoundResult", "ConflictResult"):
        t[name] = NamedType(name, ns, t["StatusCodeResult"])
    for name in ("OkObjectResult", "CreatedResult", "CreatedAtActionResult",
                 "CreatedAtRouteResult", "AcceptedResult",
                 "BadRequestObjectResult", "NotFoundObjectResult"):
        t[name] = NamedType(name, ns, t["ObjectResult"])
    t["ForbidResult"] = NamedType("ForbidResult", ns, t["ActionResult"])
    t["ProducesResponseTypeAttribute"] = NamedType("ProducesResponseTypeAttribute", ns, OBJECT)
    t["HttpStatusCode"] = NamedType("HttpStatusCode", "System.Net", VALUE_TYPE)
    return t


def produces(
    status: Any,
    payload_type: Optional[NamedType] = None,
    *,
    attribute_class: Optional[NamedType] = None,
    location: Optional[SourceSpan] = None,
) -> Attribute:
    """
    Shorthand for ``[ProducesResponseType(...)]``.

    *status* is an ``int`` (e.g. ``StatusCodes.Status404NotFound``) or an
    already built :class:`Constant`.  With *payload_type* the two-argument
    constructor ``(Type, int)`` is modelled.
    """
    cls = attribute_class or NamedType("ProducesResponseTypeAttribute", MVC_NAMESPACE, OBJECT)
    status_arg = status if isinstance(status, Constant) else Constant.integer(status)
    if payload_type is None:
        return Attribute(cls, (status_arg,), location=location)
    return Attribute(cls, (Constant.of_type(payload_type), status_arg), location=location)


__all__ = [
    # Locations / cancellation
    "SourceSpan",
    "CancellationToken",
    # Protocols
    "ConstantKind",
    "TypeRef",
    "TypedConstant",
    "AttributeData",
    "ReturnStatement",
    "MethodSyntax",
    "MethodSymbol",
    "SemanticModel",
    "qualified_name",
    "iter_base_chain",
    "MAX_BASE_CHAIN_DEPTH",
    # In-memory model
    "NamedType",
    "Constant",
    "Attribute",
    "ValueExpr",
    "Call",
    "Return",
    "MethodDeclaration",
    "Method",
    "InMemoryModel",
    "OBJECT",
    "STRING",
    "INT32",
    "ICOMPARABLE",
    "MVC_NAMESPACE",
    "mvc_types",
    "produces",
]
