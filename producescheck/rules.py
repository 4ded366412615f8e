"""
producescheck/rules.py
══════════════════════

Rule identifiers and descriptors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from producescheck.diagnostics import DiagnosticSeverity


class Categories:
    DESIGN = "Design"


REDUNDANT_RESPONSE_DECLARATION = "PC0001"


@dataclass(frozen=True)
class RuleDescriptor:
    rule_id: str
    message_format: str
    category: str
    default_severity: DiagnosticSeverity
    enabled_by_default: bool = True

    def format_message(self, *args: Any) -> str:
        return self.message_format.format(*args)


REDUNDANT_RESPONSE_DECLARATION_RULE = RuleDescriptor(
    rule_id=REDUNDANT_RESPONSE_DECLARATION,
    message_format="Redundant response-declaration attribute",
    category=Categories.DESIGN,
    default_severity=DiagnosticSeverity.WARNING,
)

# Looked up by rule id when a diagnostic is built.
ALL_RULES: Dict[str, RuleDescriptor] = {
    REDUNDANT_RESPONSE_DECLARATION: REDUNDANT_RESPONSE_DECLARATION_RULE,
}


__all__ = [
    "Categories",
    "REDUNDANT_RESPONSE_DECLARATION",
    "RuleDescriptor",
    "REDUNDANT_RESPONSE_DECLARATION_RULE",
    "ALL_RULES",
]
