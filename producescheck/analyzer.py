"""
producescheck/analyzer.py
═════════════════════════

Redundant response-declaration detection.

    declarations ──┐
                   ├──► find_redundant() ──► orphaned declarations
    return sites ──┘

A declaration is orphaned when no return site of the method matches its
status code (and its payload type, when one is declared).  Matching is
conservative: any return statement, reachable or not, counts.

``find_redundant`` is a pure function over already extracted values.
``analyze_method`` is the per-method callback a host invokes; it extracts
both inputs from the symbol model and turns orphans into diagnostics.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from producescheck.compatibility import payload_matches, status_matches
from producescheck.config import AnalyzerOptions
from producescheck.declarations import Declaration, extract_declarations
from producescheck.diagnostics import Diagnostic
from producescheck.errors import OperationCancelled
from producescheck.return_sites import ReturnSite, collect_return_sites
from producescheck.rules import ALL_RULES, REDUNDANT_RESPONSE_DECLARATION
from producescheck.status_codes import STATUS_MARKERS
from producescheck.symbols import CancellationToken, MethodSymbol, SemanticModel

_log = logging.getLogger(__name__)


def site_satisfies(
    site: ReturnSite,
    declaration: Declaration,
    markers: Sequence[str] = STATUS_MARKERS,
) -> bool:
    if not status_matches(site.produced_type, declaration.status_code,
                          declaration.status_kind, markers):
        return False
    if declaration.payload_type is None:
        return True
    return payload_matches(site.payload_type, declaration.payload_type)


def find_redundant(
    declarations: Iterable[Declaration],
    return_sites: Sequence[ReturnSite],
    markers: Sequence[str] = STATUS_MARKERS,
) -> List[Declaration]:
    """Declarations no return site satisfies, in declaration order."""
    return [
        d for d in declarations
        if not any(site_satisfies(site, d, markers) for site in return_sites)
    ]


def to_diagnostic(declaration: Declaration, options: AnalyzerOptions) -> Diagnostic:
    rule = ALL_RULES[REDUNDANT_RESPONSE_DECLARATION]
    args = (declaration.attribute_name, declaration.status_code)
    return Diagnostic(
        rule_id=rule.rule_id,
        message=rule.format_message(*args),
        severity=options.severity_for(rule),
        location=declaration.location,
        args=args,
        checker_name="redundant-response-declaration",
        category=rule.category,
    )


def find_orphans(
    method: MethodSymbol,
    model: SemanticModel,
    options: AnalyzerOptions,
    cancellation: Optional[CancellationToken] = None,
) -> List[Declaration]:
    """
    Orphaned declarations of one method.

    Empty for methods without response declarations (their bodies are
    not walked), for generated methods unless enabled, when the rule is
    disabled (or off by default and not enabled), and when
    *cancellation* fires before the survey completes.
    """
    if not options.rule_enabled(ALL_RULES[REDUNDANT_RESPONSE_DECLARATION]):
        return []
    if method.is_generated and not options.analyze_generated_code:
        _log.debug("%s: generated code skipped", method.name)
        return []

    declarations = extract_declarations(method, options)
    if not declarations:
        return []

    try:
        sites = collect_return_sites(method, model, cancellation)
    except OperationCancelled as exc:
        _log.debug("%s: %s", method.name, exc)
        return []

    orphans = find_redundant(declarations, sites, options.status_markers)
    for d in orphans:
        _log.debug("%s: no return site produces status %d (payload %s)",
                   method.name, d.status_code,
                   getattr(d.payload_type, "name", None))
    return orphans


def analyze_method(
    method: MethodSymbol,
    model: SemanticModel,
    options: Optional[AnalyzerOptions] = None,
    cancellation: Optional[CancellationToken] = None,
) -> List[Diagnostic]:
    """Diagnostics for one handler method; see :func:`find_orphans`."""
    opts = options or AnalyzerOptions()
    return [to_diagnostic(d, opts) for d in find_orphans(method, model, opts, cancellation)]


__all__ = [
    "site_satisfies",
    "find_redundant",
    "to_diagnostic",
    "find_orphans",
    "analyze_method",
]
