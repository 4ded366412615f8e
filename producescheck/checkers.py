"""
producescheck/checkers.py
═════════════════════════

Checker framework: runs rules over every handler method of a
compilation unit and collects their diagnostics.

Architecture
────────────

  ┌──────────────────────────────────────────────────────┐
  │                    CheckerRunner                     │
  │   ┌──────────────────────────────────────────────┐   │
  │   │  RedundantResponseDeclarationChecker         │   │
  │   │    collect_evidence → find_orphans(method)   │   │
  │   │    diagnose         → Diagnostic per orphan  │   │
  │   └──────────────────────┬───────────────────────┘   │
  │                          │                           │
  │   ┌──────────────────────▼───────────────────────┐   │
  │   │              SuppressionManager              │   │
  │   └──────────────────────┬───────────────────────┘   │
  │                          ▼                           │
  │                  CheckerRunResults                   │
  └──────────────────────────────────────────────────────┘

Each Checker follows a four-phase lifecycle:

  1. **configure()**        — read options
  2. **collect_evidence()** — survey methods
  3. **diagnose()**         — turn evidence into Diagnostics
  4. **report()**           — return Diagnostics filtered by suppressions

Methods are independent of each other, so evidence collection may be
spread over a thread pool (``max_workers`` > 1).  Results keep method
order either way.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
)

from producescheck.analyzer import find_orphans, to_diagnostic
from producescheck.config import AnalyzerOptions
from producescheck.declarations import Declaration
from producescheck.diagnostics import (
    Diagnostic,
    DiagnosticSeverity,
    SuppressionManager,
)
from producescheck.rules import REDUNDANT_RESPONSE_DECLARATION
from producescheck.symbols import (
    CancellationToken,
    MethodSymbol,
    SemanticModel,
)

_log = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — CHECKER CONTEXT
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerContext:
    """
    Shared context passed to every checker during a run.

    Attributes
    ----------
    methods      : handler methods of the compilation unit
    model        : semantic model answering type queries
    suppressions : SuppressionManager
    options      : raw option mapping as supplied by the host
    settings     : validated AnalyzerOptions built from ``options``
    cancellation : host cancellation token, if any
    max_workers  : thread-pool size for per-method work (1 = sequential)
    stats        : mutable dict for timing / counting statistics
    """
    methods: Sequence[MethodSymbol]
    model: SemanticModel
    suppressions: SuppressionManager = field(default_factory=SuppressionManager)
    options: Dict[str, Any] = field(default_factory=dict)
    settings: AnalyzerOptions = field(default_factory=AnalyzerOptions)
    cancellation: Optional[CancellationToken] = None
    max_workers: int = 1
    stats: Dict[str, Any] = field(default_factory=dict)

    def get_option(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)

    @property
    def cancelled(self) -> bool:
        return self.cancellation is not None and self.cancellation.is_cancellation_requested


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — CHECKER BASE CLASS
# ═════════════════════════════════════════════════════════════════════════

class Checker(ABC):
    """
    Abstract base class for all checkers.

    Subclass Contract
    ─────────────────
      - Override ``name``, ``description``, ``rule_ids``
      - Implement ``collect_evidence()`` and ``diagnose()``
      - Optionally override ``configure()``
    """

    name: ClassVar[str] = "base-checker"
    description: ClassVar[str] = ""
    rule_ids: ClassVar[FrozenSet[str]] = frozenset()

    def __init__(self) -> None:
        self._diagnostics: List[Diagnostic] = []

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    def configure(self, ctx: CheckerContext) -> None:
        """Called before evidence collection.  Default does nothing."""
        pass

    @abstractmethod
    def collect_evidence(self, ctx: CheckerContext) -> None:
        ...

    @abstractmethod
    def diagnose(self, ctx: CheckerContext) -> None:
        """Append diagnostics to ``self._diagnostics``."""
        ...

    def report(self, ctx: CheckerContext) -> List[Diagnostic]:
        return ctx.suppressions.filter_diagnostics(self._diagnostics)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — REDUNDANT RESPONSE DECLARATION CHECKER
# ═════════════════════════════════════════════════════════════════════════

class RedundantResponseDeclarationChecker(Checker):
    """
    Flags response declarations no return path of the method can produce.

    A method declaring ``[ProducesResponseType(404)]`` whose body only ever
    returns ``Ok(...)`` gets one diagnostic on the 404 attribute.
    """

    name: ClassVar[str] = "redundant-response-declaration"
    description: ClassVar[str] = "Response declarations without a matching return path"
    rule_ids: ClassVar[FrozenSet[str]] = frozenset({REDUNDANT_RESPONSE_DECLARATION})

    def __init__(self) -> None:
        super().__init__()
        self._settings = AnalyzerOptions()
        self._orphans: List[Tuple[MethodSymbol, List[Declaration]]] = []

    def configure(self, ctx: CheckerContext) -> None:
        self._settings = ctx.settings

    def _survey(self, method: MethodSymbol, ctx: CheckerContext) -> List[Declaration]:
        if ctx.cancelled:
            return []
        return find_orphans(method, ctx.model, self._settings, ctx.cancellation)

    def collect_evidence(self, ctx: CheckerContext) -> None:
        methods = list(ctx.methods)
        if ctx.max_workers > 1 and len(methods) > 1:
            with ThreadPoolExecutor(max_workers=ctx.max_workers) as pool:
                results = list(pool.map(lambda m: self._survey(m, ctx), methods))
        else:
            results = [self._survey(m, ctx) for m in methods]
        self._orphans = [(m, r) for m, r in zip(methods, results) if r]
        ctx.stats[f"{self.name}_methods"] = len(methods)

    def diagnose(self, ctx: CheckerContext) -> None:
        if ctx.cancelled:
            # a partial survey must not be reported
            self._orphans = []
            return
        for _method, orphans in self._orphans:
            self._diagnostics.extend(to_diagnostic(d, self._settings) for d in orphans)


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — CHECKER REGISTRY
# ═════════════════════════════════════════════════════════════════════════

class CheckerRegistry:
    """
    Checker classes by name, each with an enabled flag.  Registration
    order is run order.

    >>> registry = CheckerRegistry()
    >>> registry.register(RedundantResponseDeclarationChecker)
    >>> [cls.name for cls in registry.get_enabled()]
    ['redundant-response-declaration']
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[Type[Checker], bool]] = {}

    def register(self, checker_cls: Type[Checker], *, enabled: bool = True) -> None:
        self._entries[checker_cls.name] = (checker_cls, enabled)

    def unregister(self, name: str) -> None:
        self._entries.pop(name, None)

    def _set_enabled(self, name: str, enabled: bool) -> None:
        if name not in self._entries:
            raise KeyError(f"no checker named '{name}'")
        self._entries[name] = (self._entries[name][0], enabled)

    def disable(self, name: str) -> None:
        self._set_enabled(name, False)

    def enable(self, name: str) -> None:
        self._set_enabled(name, True)

    def get_all(self) -> List[Type[Checker]]:
        return [cls for cls, _enabled in self._entries.values()]

    def get_enabled(self) -> List[Type[Checker]]:
        return [cls for cls, enabled in self._entries.values() if enabled]

    def get_by_name(self, name: str) -> Optional[Type[Checker]]:
        entry = self._entries.get(name)
        return entry[0] if entry else None

    def filter_by_rule_id(self, rule_id: str) -> List[Type[Checker]]:
        return [cls for cls in self.get_all() if rule_id in cls.rule_ids]

    @property
    def names(self) -> List[str]:
        return sorted(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def default_registry() -> CheckerRegistry:
    """A registry holding every built-in checker."""
    registry = CheckerRegistry()
    registry.register(RedundantResponseDeclarationChecker)
    return registry


# ═════════════════════════════════════════════════════════════════════════
#  PART 5 — CHECKER RUNNER
# ═════════════════════════════════════════════════════════════════════════

CHECKER_INTERNAL_ERROR = "checkerInternalError"


@dataclass
class CheckerRunResults:
    """
    Outcome of one :meth:`CheckerRunner.run`.

    Attributes
    ----------
    diagnostics   : reported diagnostics, in checker order then method order
    by_checker    : the same diagnostics keyed by checker name
    stats         : ``<checker>_elapsed_ms``, ``<checker>_methods`` and
                    ``methods_total``
    checker_names : checkers that ran, in run order
    cancelled     : the host requested cancellation during the run
    """
    diagnostics: List[Diagnostic] = field(default_factory=list)
    by_checker: Dict[str, List[Diagnostic]] = field(default_factory=dict)
    stats: Dict[str, Any] = field(default_factory=dict)
    checker_names: List[str] = field(default_factory=list)
    cancelled: bool = False

    def count(self, severity: Optional[DiagnosticSeverity] = None) -> int:
        if severity is None:
            return len(self.diagnostics)
        return sum(1 for d in self.diagnostics if d.severity is severity)

    @property
    def error_count(self) -> int:
        return self.count(DiagnosticSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return self.count(DiagnosticSeverity.WARNING)

    @property
    def total_count(self) -> int:
        return self.count()

    def by_severity(self, severity: DiagnosticSeverity) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is severity]

    def by_file(self, file: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.location.file == file]

    def by_rule(self, rule_id: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.rule_id == rule_id]

    def to_json_lines(self) -> str:
        return "\n".join(map(Diagnostic.to_json_str, self.diagnostics))

    def to_gcc_format(self) -> str:
        return "\n".join(map(Diagnostic.to_gcc_format, self.diagnostics))

    def summary(self) -> str:
        methods = self.stats.get("methods_total", 0)
        lines = [
            f"Analyzed {methods} method(s): {self.total_count} diagnostics "
            f"({self.error_count} errors, {self.warning_count} warnings)"
            + (" [cancelled]" if self.cancelled else ""),
        ]
        for name in self.checker_names:
            found = len(self.by_checker.get(name, ()))
            elapsed = self.stats.get(f"{name}_elapsed_ms", 0.0)
            lines.append(f"  {name}: {found} findings in {elapsed:.1f}ms")
        return "\n".join(lines)


class CheckerRunner:
    """
    Runs checkers over the handler methods of one compilation unit.

    >>> runner = CheckerRunner(options={"severity": "error"}, max_workers=4)
    >>> results = runner.run(methods, InMemoryModel())
    >>> print(results.summary())

    ``options`` is validated into :class:`AnalyzerOptions` here, so an
    invalid mapping raises ``ConfigurationError`` before anything runs.
    Rule ids listed under ``suppressions`` are dropped from this runner's
    results only; a shared :class:`SuppressionManager` is never modified.
    """

    def __init__(
        self,
        registry: Optional[CheckerRegistry] = None,
        suppressions: Optional[SuppressionManager] = None,
        options: Optional[Mapping[str, Any]] = None,
        max_workers: int = 1,
    ) -> None:
        self.registry = registry or default_registry()
        self.suppressions = suppressions or SuppressionManager()
        self.options: Dict[str, Any] = dict(options or {})
        self.settings = AnalyzerOptions.from_mapping(self.options)
        self.max_workers = max(1, max_workers)
        # kept apart from the caller-owned manager
        self._option_suppressions: FrozenSet[str] = frozenset(self.settings.suppressions)

    def _suppressed_by_options(self, diag: Diagnostic) -> bool:
        ids = self._option_suppressions
        return diag.rule_id in ids or "*" in ids

    def _select(self, names: Optional[Sequence[str]]) -> List[Type[Checker]]:
        if names is None:
            return self.registry.get_enabled()
        selected: List[Type[Checker]] = []
        for name in names:
            cls = self.registry.get_by_name(name)
            if cls is None:
                _log.warning("Unknown checker '%s' ignored", name)
            else:
                selected.append(cls)
        return selected

    def _run_checker(self, cls: Type[Checker], ctx: CheckerContext) -> List[Diagnostic]:
        checker = cls()
        try:
            checker.configure(ctx)
            checker.collect_evidence(ctx)
            checker.diagnose(ctx)
            return checker.report(ctx)
        except Exception as exc:
            # the failure becomes a diagnostic; remaining checkers still run
            _log.warning("Checker '%s' failed: %s", cls.name, exc, exc_info=True)
            return [Diagnostic(
                rule_id=CHECKER_INTERNAL_ERROR,
                message=f"Checker '{cls.name}' failed: {exc}",
                severity=DiagnosticSeverity.INFORMATION,
                checker_name=cls.name,
            )]

    def run(
        self,
        methods: Sequence[MethodSymbol],
        model: SemanticModel,
        checkers: Optional[Sequence[str]] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> CheckerRunResults:
        """
        Run checkers against a compilation unit.

        Parameters
        ----------
        methods      : handler methods to analyze
        model        : semantic model for type queries
        checkers     : checker names to run (None = all enabled)
        cancellation : token checked between and during method surveys
        """
        ctx = CheckerContext(
            methods=methods,
            model=model,
            suppressions=self.suppressions,
            options=self.options,
            settings=self.settings,
            cancellation=cancellation,
            max_workers=self.max_workers,
        )
        results = CheckerRunResults()
        for cls in self._select(checkers):
            started = time.monotonic()
            diags = [d for d in self._run_checker(cls, ctx)
                     if not self._suppressed_by_options(d)]
            results.stats[f"{cls.name}_elapsed_ms"] = (time.monotonic() - started) * 1000.0
            results.checker_names.append(cls.name)
            results.by_checker[cls.name] = diags
            results.diagnostics.extend(diags)

        results.stats.update(ctx.stats)
        results.stats["methods_total"] = len(methods)
        results.cancelled = ctx.cancelled
        _log.info("%d methods, %d diagnostics%s", len(methods), results.total_count,
                  " (cancelled)" if results.cancelled else "")
        return results


__all__ = [
    "CheckerContext",
    "Checker",
    "RedundantResponseDeclarationChecker",
    "CheckerRegistry",
    "default_registry",
    "CHECKER_INTERNAL_ERROR",
    "CheckerRunResults",
    "CheckerRunner",
]
