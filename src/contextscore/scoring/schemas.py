"""Value types shared by every stage of the scoring pipeline.

Internal values are frozen dataclasses. ``ScoringResult`` is the one
pydantic model, because it crosses the output boundary (CLI JSON,
pipeline stages) and needs validation plus serialization.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, model_validator

from contextscore.constants import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_DIAGNOSTICS,
    DEFAULT_MAX_KEYS,
    DEFAULT_MAX_STRING_LENGTH,
    DEFAULT_MAX_TOTAL_CHARS,
    Category,
    DiagnosticCode,
    Severity,
)


@dataclass(frozen=True)
class ScoringLimits:
    """Resource ceilings the normalizer enforces on its own traversal."""

    max_depth: int = DEFAULT_MAX_DEPTH
    max_keys: int = DEFAULT_MAX_KEYS
    max_string_length: int = DEFAULT_MAX_STRING_LENGTH
    max_total_chars: int = DEFAULT_MAX_TOTAL_CHARS
    max_diagnostics: int = DEFAULT_MAX_DIAGNOSTICS


@dataclass(frozen=True)
class Slot:
    """A single addressable field that is either filled or absent."""

    path: str
    category: Category

    @property
    def shorthand(self) -> str:
        """Last path segment, e.g. ``hosting`` for ``stack.hosting``."""
        return self.path.rsplit(".", 1)[-1]


@dataclass(frozen=True)
class TypeDefinition:
    """A canonical project type and the slot categories it scores."""

    canonical_name: str
    categories: frozenset[Category]
    aliases: frozenset[str] = frozenset()


@dataclass(frozen=True)
class Diagnostic:
    """One structural or type problem found while compiling."""

    severity: Severity
    code: DiagnosticCode
    message: str
    path: str | None = None


@dataclass(frozen=True)
class ScopeResult:
    """The slots that count toward the score after type scoping."""

    slots: tuple[Slot, ...]
    ignored: tuple[str, ...] = ()

    @property
    def total(self) -> int:
        return len(self.slots)

    @property
    def paths(self) -> tuple[str, ...]:
        return tuple(s.path for s in self.slots)


# ── Normalized document ─────────────────────────────────


class _Absent:
    """Marker for a slot with no usable value."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT: Final = _Absent()


@dataclass(frozen=True)
class Present:
    """A slot value that survived normalization."""

    value: str


SlotValue: TypeAlias = Present | _Absent


@dataclass(frozen=True)
class SafeDoc:
    """Normalized view of a raw document.

    ``slots`` holds one entry per registry slot path. The remaining
    fields are the non-slot inputs the pipeline reads.
    """

    slots: dict[str, SlotValue] = field(default_factory=dict)
    project_type: str | None = None
    free_text: str | None = None
    ignore_directives: tuple[tuple[str, Any], ...] = ()
    inline_ignored: tuple[str, ...] = ()
    embedded_score_keys: tuple[str, ...] = ()

    def get(self, path: str) -> SlotValue:
        return self.slots.get(path, ABSENT)

    def is_filled(self, path: str) -> bool:
        return isinstance(self.get(path), Present)


@dataclass(frozen=True)
class NormalizedDocument:
    """Output of the input normalizer.

    ``suppressed`` counts diagnostics dropped past ``max_diagnostics``.
    """

    doc: SafeDoc
    diagnostics: tuple[Diagnostic, ...] = ()
    suppressed: int = 0


@dataclass(frozen=True)
class TypeResolution:
    """Outcome of resolving a raw type string to a canonical type."""

    canonical: str
    categories: frozenset[Category]
    source: str  # "explicit", "alias", "inferred", "fallback"
    diagnostics: tuple[Diagnostic, ...] = ()


@dataclass(frozen=True)
class SlotTally:
    """Filled/missing counts for a scope."""

    filled: int
    percent: int
    filled_paths: tuple[str, ...] = ()
    missing_paths: tuple[str, ...] = ()


# ── Output boundary ─────────────────────────────────────


class DiagnosticModel(BaseModel):
    """Serializable form of a ``Diagnostic``."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    code: DiagnosticCode
    message: str
    path: str | None = None

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic) -> DiagnosticModel:
        return cls(
            severity=diagnostic.severity,
            code=diagnostic.code,
            message=diagnostic.message,
            path=diagnostic.path,
        )


class ScoringResult(BaseModel):
    """Deterministic score, diagnostics and checksum for one document."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    filled: int = Field(ge=0)
    total: int = Field(ge=0)
    checksum: str
    grade: str
    canonical_type: str
    diagnostics: list[DiagnosticModel] = Field(
        default_factory=lambda: list[DiagnosticModel]()
    )
    scored_slots: list[str] = Field(
        default_factory=lambda: list[str]()
    )
    filled_slots: list[str] = Field(
        default_factory=lambda: list[str]()
    )
    missing_slots: list[str] = Field(
        default_factory=lambda: list[str]()
    )
    ignored_slots: list[str] = Field(
        default_factory=lambda: list[str]()
    )

    @model_validator(mode="after")
    def _check_counts(self) -> ScoringResult:
        if self.filled > self.total:
            raise ValueError(
                f"filled ({self.filled}) exceeds total ({self.total})"
            )
        return self

    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self.diagnostics)

    def diagnostics_by_severity(
        self, severity: Severity
    ) -> list[DiagnosticModel]:
        return [d for d in self.diagnostics if d.severity == severity]
