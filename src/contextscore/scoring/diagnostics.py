"""Diagnostics collector.

Diagnostics are additive evidence returned alongside a score. They never
stop scoring and never feed back into control flow.
"""

from __future__ import annotations

from collections.abc import Iterable

from contextscore.constants import (
    DEFAULT_MAX_DIAGNOSTICS,
    DiagnosticCode,
    Severity,
)
from contextscore.scoring.schemas import Diagnostic


class DiagnosticCollector:
    """Accumulates diagnostics up to a fixed cap.

    Once the cap is reached further diagnostics are counted but dropped,
    and a single ``diagnostics_suppressed`` info entry is appended when
    the collection is read.
    """

    def __init__(self, limit: int = DEFAULT_MAX_DIAGNOSTICS) -> None:
        self._limit = max(limit, 1)
        self._items: list[Diagnostic] = []
        self._suppressed = 0

    def __len__(self) -> int:
        return len(self._items)

    def add(self, diagnostic: Diagnostic) -> None:
        if len(self._items) >= self._limit:
            self._suppressed += 1
            return
        self._items.append(diagnostic)

    def error(
        self, code: DiagnosticCode, message: str, path: str | None = None
    ) -> None:
        self.add(Diagnostic(Severity.ERROR, code, message, path))

    def warning(
        self, code: DiagnosticCode, message: str, path: str | None = None
    ) -> None:
        self.add(Diagnostic(Severity.WARNING, code, message, path))

    def info(
        self, code: DiagnosticCode, message: str, path: str | None = None
    ) -> None:
        self.add(Diagnostic(Severity.INFO, code, message, path))

    def extend(
        self, diagnostics: Iterable[Diagnostic], suppressed: int = 0
    ) -> None:
        """Add ``diagnostics``; ``suppressed`` carries an upstream drop count."""
        for diagnostic in diagnostics:
            self.add(diagnostic)
        self._suppressed += suppressed

    @property
    def suppressed(self) -> int:
        return self._suppressed

    @property
    def items(self) -> tuple[Diagnostic, ...]:
        """Collected diagnostics without the suppressed notice."""
        return tuple(self._items)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self._items)

    def to_tuple(self) -> tuple[Diagnostic, ...]:
        items = tuple(self._items)
        if self._suppressed:
            items += (
                Diagnostic(
                    Severity.INFO,
                    DiagnosticCode.DIAGNOSTICS_SUPPRESSED,
                    f"{self._suppressed} further diagnostics suppressed",
                ),
            )
        return items
