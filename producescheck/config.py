"""
producescheck/config.py
═══════════════════════

Analyzer options.

Options arrive from the host as a plain mapping (the same dict that ends
up in ``CheckerContext.options``) and are validated once into a frozen
:class:`AnalyzerOptions`.

    >>> opts = AnalyzerOptions.from_mapping({"severity": "information"})
    >>> opts.severity
    <DiagnosticSeverity.INFORMATION: 'information'>
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from producescheck.diagnostics import DiagnosticSeverity
from producescheck.errors import ConfigurationError
from producescheck.rules import RuleDescriptor
from producescheck.status_codes import STATUS_MARKERS
from producescheck.symbols import MVC_NAMESPACE


@dataclass(frozen=True)
class AnalyzerOptions:
    """
    Attributes
    ----------
    attribute_name         : class name of the response-declaration attribute
    attribute_namespace    : its containing namespace
    status_markers         : base-type names marking status-bearing results
    severity               : severity of emitted diagnostics; ``None`` keeps
                             each rule's default severity
    analyze_generated_code : analyze methods the host marks as generated
    disabled_rules         : rule ids that are not evaluated at all
    enabled_rules          : rules that are off by default but requested
    suppressions           : rule ids whose diagnostics are dropped
    """
    attribute_name: str = "ProducesResponseTypeAttribute"
    attribute_namespace: str = MVC_NAMESPACE
    status_markers: Tuple[str, ...] = STATUS_MARKERS
    severity: Optional[DiagnosticSeverity] = None
    analyze_generated_code: bool = False
    disabled_rules: Tuple[str, ...] = ()
    enabled_rules: Tuple[str, ...] = ()
    suppressions: Tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> AnalyzerOptions:
        """
        Validate *raw* into options.  Missing keys keep their defaults.

        Raises
        ------
        ConfigurationError
            on unknown keys or values of the wrong shape.
        """
        if not raw:
            return cls()
        return cls(**_validated(raw))

    def with_overrides(self, **changes: Any) -> AnalyzerOptions:
        """Copy with *changes* applied; validated like :meth:`from_mapping`."""
        return replace(self, **_validated(changes))

    def severity_for(self, rule: RuleDescriptor) -> DiagnosticSeverity:
        return self.severity or rule.default_severity

    def rule_enabled(self, rule: RuleDescriptor) -> bool:
        if rule.rule_id in self.disabled_rules:
            return False
        return rule.enabled_by_default or rule.rule_id in self.enabled_rules


def _validated(raw: Mapping[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(AnalyzerOptions)}
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            raise ConfigurationError(key, "unknown option", value)
        values[key] = _coerce(key, value)
    return values


def _coerce(key: str, value: Any) -> Any:
    if key in ("attribute_name", "attribute_namespace"):
        if not isinstance(value, str) or not value:
            raise ConfigurationError(key, "expected a non-empty string", value)
        return value
    if key == "analyze_generated_code":
        if not isinstance(value, bool):
            raise ConfigurationError(key, "expected a boolean", value)
        return value
    if key == "severity":
        if isinstance(value, DiagnosticSeverity):
            return value
        try:
            return DiagnosticSeverity(str(value).lower())
        except ValueError:
            choices = ", ".join(s.value for s in DiagnosticSeverity)
            raise ConfigurationError(key, f"expected one of: {choices}", value) from None
    # remaining options are string lists
    if isinstance(value, str) or not hasattr(value, "__iter__"):
        raise ConfigurationError(key, "expected a list of strings", value)
    items = tuple(value)
    if not all(isinstance(item, str) and item for item in items):
        raise ConfigurationError(key, "expected a list of strings", value)
    if key == "status_markers" and not items:
        raise ConfigurationError(key, "at least one marker is required", value)
    return items


__all__ = ["AnalyzerOptions"]
