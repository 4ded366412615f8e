"""
producescheck/diagnostics.py
════════════════════════════

Diagnostic model and suppression handling.

A :class:`Diagnostic` is the only thing the analyzer hands back to its
host: rule id, severity, location of the offending declaration, message,
and the message arguments (declared attribute name and status code).

:class:`SuppressionManager` drops diagnostics the user opted out of,
globally, per file, or at a specific line.
"""

from __future__ import annotations

import json
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatch
from typing import Any, Dict, Iterable, List, Set, Tuple

from producescheck.symbols import SourceSpan


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — DIAGNOSTIC MODEL
# ═════════════════════════════════════════════════════════════════════════

class DiagnosticSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"
    HIDDEN = "hidden"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single finding.

    Attributes
    ----------
    rule_id      : stable rule identifier (e.g. "PC0001")
    message      : human-readable description
    severity     : DiagnosticSeverity
    location     : span of the offending attribute
    args         : message arguments, (attribute name, status code)
    checker_name : name of the checker that produced this
    category     : rule category
    """
    rule_id: str
    message: str
    severity: DiagnosticSeverity
    location: SourceSpan = field(default_factory=SourceSpan)
    args: Tuple[Any, ...] = ()
    checker_name: str = ""
    category: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ruleId": self.rule_id,
            "severity": self.severity.value,
            "message": self.message,
            "file": self.location.file,
            "line": self.location.line,
            "column": self.location.column,
            "endLine": self.location.end_line,
            "endColumn": self.location.end_column,
            "args": list(self.args),
            "category": self.category,
        }

    def to_json_str(self) -> str:
        return json.dumps(self.to_dict())

    def to_gcc_format(self) -> str:
        """GCC-style: ``file:line:col: severity: message [rule]``."""
        return f"{self.location}: {self.severity.value}: {self.message} [{self.rule_id}]"


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — SUPPRESSION MANAGER
# ═════════════════════════════════════════════════════════════════════════

class SuppressionManager:
    """
    Diagnostic suppressions from three sources.

      1. Inline: a rule id suppressed at ``(file, line)``; covers that line
         and the one after it (an attribute on the next line)
      2. File-level: exact path, path suffix, or fnmatch pattern
      3. Global: the rule id everywhere

    ``"*"`` stands for every rule id.

    >>> sm = SuppressionManager()
    >>> sm.add_global_suppression("PC0001")
    >>> sm.filter_diagnostics(diags)
    []
    """

    def __init__(self) -> None:
        self._inline: Dict[Tuple[str, int], Set[str]] = defaultdict(set)
        self._file_level: Dict[str, Set[str]] = defaultdict(set)
        self._global: Set[str] = set()

    def load_inline_suppressions(self, entries: Iterable[Any]) -> None:
        """
        Register host-reported suppressions.

        Each entry exposes ``rule_id`` and optionally ``file`` and
        ``line``; an entry without a line is file-level, one without a
        file is global.
        """
        for entry in entries:
            rule_id = getattr(entry, "rule_id", None)
            if not rule_id:
                continue
            file = getattr(entry, "file", "") or ""
            line = getattr(entry, "line", 0) or 0
            if file and line:
                self._inline[(file, line)].add(rule_id)
            elif file:
                self._file_level[file].add(rule_id)
            else:
                self._global.add(rule_id)

    def add_inline_suppression(self, rule_id: str, file: str, line: int) -> None:
        self._inline[(file, line)].add(rule_id)

    def add_file_suppression(self, rule_id: str, file_pattern: str) -> None:
        self._file_level[file_pattern].add(rule_id)

    def add_global_suppression(self, rule_id: str) -> None:
        self._global.add(rule_id)

    def is_suppressed(self, diag: Diagnostic) -> bool:
        rid = diag.rule_id
        if rid in self._global or "*" in self._global:
            return True

        loc = diag.location
        for line_offset in (0, 1):
            ids = self._inline.get((loc.file, loc.line - line_offset), set())
            if rid in ids or "*" in ids:
                return True

        for pattern, ids in self._file_level.items():
            if rid not in ids and "*" not in ids:
                continue
            if pattern == loc.file or loc.file.endswith(pattern) or fnmatch(loc.file, pattern):
                return True
        return False

    def filter_diagnostics(self, diagnostics: Iterable[Diagnostic]) -> List[Diagnostic]:
        return [d for d in diagnostics if not self.is_suppressed(d)]


__all__ = [
    "DiagnosticSeverity",
    "Diagnostic",
    "SuppressionManager",
]
