"""
producescheck/declarations.py
═════════════════════════════

Reading response declarations off a method symbol.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from producescheck.config import AnalyzerOptions
from producescheck.symbols import (
    AttributeData,
    ConstantKind,
    MethodSymbol,
    SourceSpan,
    TypedConstant,
    TypeRef,
)

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Declaration:
    """
    A normalized ``[ProducesResponseType(...)]``.

    Attributes
    ----------
    status_code    : declared HTTP status code
    payload_type   : declared payload type, if the two-argument
                     constructor was used
    location       : span of the attribute application
    attribute_name : attribute class name, for diagnostics
    status_kind    : PRIMITIVE for a plain ``int``, ENUM for an enum member
    """
    status_code: int
    payload_type: Optional[TypeRef] = None
    location: SourceSpan = field(default_factory=SourceSpan)
    attribute_name: str = ""
    status_kind: ConstantKind = ConstantKind.PRIMITIVE


def is_response_declaration(attribute: AttributeData, options: AnalyzerOptions) -> bool:
    cls = attribute.attribute_class
    if cls is None:
        return False
    return cls.name == options.attribute_name and cls.namespace == options.attribute_namespace


def _is_status_constant(arg: TypedConstant) -> bool:
    if arg.kind not in (ConstantKind.PRIMITIVE, ConstantKind.ENUM):
        return False
    value: Any = arg.value
    return isinstance(value, int) and not isinstance(value, bool)


def _is_type_constant(arg: TypedConstant) -> bool:
    return arg.kind is ConstantKind.TYPE and arg.value is not None


def to_declaration(attribute: AttributeData) -> Optional[Declaration]:
    """Normalize one attribute; ``None`` when it names no status code."""
    arguments = list(attribute.constructor_arguments)
    status = next((a for a in arguments if _is_status_constant(a)), None)
    if status is None:
        return None

    payload: Optional[TypeRef] = None
    if attribute.constructor_parameter_count == 2:
        type_arg = next((a for a in arguments if _is_type_constant(a)), None)
        if type_arg is not None:
            payload = type_arg.value

    cls = attribute.attribute_class
    return Declaration(
        status_code=int(status.value),
        payload_type=payload,
        location=attribute.location or SourceSpan(),
        attribute_name=cls.name if cls is not None else "",
        status_kind=status.kind,
    )


def extract_declarations(
    method: MethodSymbol,
    options: Optional[AnalyzerOptions] = None,
) -> List[Declaration]:
    """Response declarations of *method*, in attribute order."""
    opts = options or AnalyzerOptions()
    result: List[Declaration] = []
    for attribute in method.attributes:
        if not is_response_declaration(attribute, opts):
            continue
        declaration = to_declaration(attribute)
        if declaration is None:
            _log.debug("%s: response declaration without status code skipped", method.name)
            continue
        result.append(declaration)
    return result


__all__ = [
    "Declaration",
    "is_response_declaration",
    "to_declaration",
    "extract_declarations",
]
