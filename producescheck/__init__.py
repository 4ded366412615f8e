"""
producescheck — Redundant response-declaration analysis for web-API handlers
============================================================================

Flags ``[ProducesResponseType(...)]`` declarations on a handler method that
no return statement of the method can produce.

Core modules
------------
status_codes
    Status code implied by a result-type name; status-bearing classification.
return_sites
    Distinct (result type, payload type) pairs a method body returns.
compatibility
    Status-code and payload-type matching between sites and declarations.
declarations
    Normalized response declarations read from a method's attributes.
analyzer
    The redundancy decision and the per-method host callback.
checkers
    Checker lifecycle, registry and runner over a compilation unit.
symbols
    Host symbol-model protocols and an in-memory implementation.

Quick start
-----------
>>> from producescheck import analyze_method, InMemoryModel, Method, produces
>>> diags = analyze_method(method, InMemoryModel())
>>> [d.args for d in diags]
[('ProducesResponseTypeAttribute', 404)]
"""

from __future__ import annotations

import logging
import sys
from typing import List

__version__ = "0.1.0"
__license__ = "MIT"

_log = logging.getLogger(__name__)

from producescheck.analyzer import analyze_method, find_orphans, find_redundant  # noqa: E402
from producescheck.checkers import (  # noqa: E402
    Checker,
    CheckerContext,
    CheckerRegistry,
    CheckerRunner,
    CheckerRunResults,
    RedundantResponseDeclarationChecker,
    default_registry,
)
from producescheck.compatibility import (  # noqa: E402
    payload_matches,
    status_code_matches,
    status_matches,
    status_name_matches,
)
from producescheck.config import AnalyzerOptions  # noqa: E402
from producescheck.declarations import Declaration, extract_declarations  # noqa: E402
from producescheck.diagnostics import (  # noqa: E402
    Diagnostic,
    DiagnosticSeverity,
    SuppressionManager,
)
from producescheck.errors import (  # noqa: E402
    ConfigurationError,
    OperationCancelled,
    ProducesCheckError,
)
from producescheck.return_sites import ReturnSite, collect_return_sites  # noqa: E402
from producescheck.rules import (  # noqa: E402
    REDUNDANT_RESPONSE_DECLARATION,
    REDUNDANT_RESPONSE_DECLARATION_RULE,
)
from producescheck.status_codes import is_status_bearing, resolve_status_code  # noqa: E402
from producescheck.symbols import (  # noqa: E402
    Attribute,
    Call,
    CancellationToken,
    Constant,
    ConstantKind,
    InMemoryModel,
    Method,
    MethodDeclaration,
    NamedType,
    Return,
    SourceSpan,
    ValueExpr,
    mvc_types,
    produces,
)


def configure_logging(verbosity: int = 0) -> None:
    """Set up the ``producescheck`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.

    Calling it again replaces the handler installed by the previous call.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("producescheck")
    root.setLevel(level)
    for old in [h for h in root.handlers if getattr(h, "_producescheck", False)]:
        root.removeHandler(old)
    handler._producescheck = True  # type: ignore[attr-defined]
    root.addHandler(handler)


__all__: List[str] = [
    "__version__",
    "configure_logging",
    # Analysis
    "analyze_method",
    "find_orphans",
    "find_redundant",
    "extract_declarations",
    "collect_return_sites",
    "payload_matches",
    "status_code_matches",
    "status_name_matches",
    "status_matches",
    "is_status_bearing",
    "resolve_status_code",
    # Values
    "Declaration",
    "ReturnSite",
    "AnalyzerOptions",
    "Diagnostic",
    "DiagnosticSeverity",
    "SuppressionManager",
    "REDUNDANT_RESPONSE_DECLARATION",
    "REDUNDANT_RESPONSE_DECLARATION_RULE",
    # Checker framework
    "Checker",
    "CheckerContext",
    "CheckerRegistry",
    "CheckerRunner",
    "CheckerRunResults",
    "RedundantResponseDeclarationChecker",
    "default_registry",
    # Errors
    "ProducesCheckError",
    "OperationCancelled",
    "ConfigurationError",
    # Symbol model
    "Attribute",
    "Call",
    "CancellationToken",
    "Constant",
    "ConstantKind",
    "InMemoryModel",
    "Method",
    "MethodDeclaration",
    "NamedType",
    "Return",
    "SourceSpan",
    "ValueExpr",
    "mvc_types",
    "produces",
]
