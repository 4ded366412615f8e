"""
producescheck/errors.py
═══════════════════════

Exception types raised by producescheck.

The analysis itself is advisory: unresolvable symbols and types degrade to
"no match" and never surface as exceptions.  The classes below cover the
few conditions that do interrupt control flow.

Hierarchy
─────────

  ProducesCheckError (base)
  ├── OperationCancelled   - host requested cancellation mid-traversal
  └── ConfigurationError   - invalid analyzer options
"""

from __future__ import annotations

from typing import Any, Optional


class ProducesCheckError(Exception):
    """Base class for all producescheck exceptions."""


class OperationCancelled(ProducesCheckError):
    """
    Raised when the host's cancellation token fires during traversal.

    ``analyze_method`` absorbs it and reports no diagnostics for the
    method being analyzed.
    """

    def __init__(self, where: str = "") -> None:
        self.where = where
        msg = "analysis cancelled"
        if where:
            msg += f" while {where}"
        super().__init__(msg)


class ConfigurationError(ProducesCheckError, ValueError):
    """An analyzer option is unknown or carries an invalid value."""

    def __init__(self, key: str, message: str, value: Optional[Any] = None) -> None:
        self.key = key
        self.value = value
        super().__init__(f"option '{key}': {message}")


__all__ = [
    "ProducesCheckError",
    "OperationCancelled",
    "ConfigurationError",
]
