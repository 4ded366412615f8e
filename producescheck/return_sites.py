"""
producescheck/return_sites.py
═════════════════════════════

Survey of the responses a method body can produce.

Each ``return <expr>;`` contributes one :class:`ReturnSite`: the static
type of ``<expr>`` and, when ``<expr>`` is a bound call with arguments,
the static type of its first argument (``Ok(payload)``,
``NotFound(error)``).  Sites are deduplicated by value.

The survey is syntactic: a return statement after an unconditional
``return`` is still collected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from producescheck.symbols import (
    CancellationToken,
    MethodSymbol,
    SemanticModel,
    TypeRef,
    qualified_name,
)

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReturnSite:
    """
    One distinct response a method can produce.

    Attributes
    ----------
    produced_type : static type of the returned expression
    payload_type  : static type of the first call argument, if any
    """
    produced_type: TypeRef
    payload_type: Optional[TypeRef] = None

    def __str__(self) -> str:
        if self.payload_type is None:
            return qualified_name(self.produced_type)
        return f"{qualified_name(self.produced_type)}<{qualified_name(self.payload_type)}>"


def payload_type_of(expression: Any, model: SemanticModel) -> Optional[TypeRef]:
    """Type of the first argument of a bound call, else ``None``."""
    if model.call_target(expression) is None:
        return None
    arguments = model.call_arguments(expression)
    if not arguments:
        return None
    return model.type_of(arguments[0])


def collect_return_sites(
    method: MethodSymbol,
    model: SemanticModel,
    cancellation: Optional[CancellationToken] = None,
) -> List[ReturnSite]:
    """
    Distinct return sites across every declaration of *method*.

    Bare ``return`` statements and returns whose expression type cannot
    be resolved are skipped.  Order of first appearance is kept.

    Raises
    ------
    OperationCancelled
        if *cancellation* fires during traversal.
    """
    sites: Dict[ReturnSite, None] = {}
    skipped = 0
    for declaration in method.declarations:
        for statement in declaration.return_statements():
            if cancellation is not None:
                cancellation.throw_if_cancelled(f"collecting returns of {method.name}")
            expression = statement.expression
            if expression is None:
                continue
            produced = model.type_of(expression)
            if produced is None:
                skipped += 1
                continue
            sites.setdefault(ReturnSite(produced, payload_type_of(expression, model)), None)

    if skipped:
        _log.debug("%s: %d return(s) with unresolved type ignored", method.name, skipped)
    _log.debug("%s: %d distinct return site(s)", method.name, len(sites))
    return list(sites)


__all__ = [
    "ReturnSite",
    "payload_type_of",
    "collect_return_sites",
]
