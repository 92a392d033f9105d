"""Shared constants — single source of truth for cross-module values.

All magic strings and numbers that appear in 2+ files belong here.
StrEnum members are str-compatible, so downstream code (JSON output,
CLI rendering, checksum payloads) works unchanged.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class Category(StrEnum):
    """Slot groups used to scope which slots apply to a project type."""

    PROJECT = "project"
    HUMAN = "human"
    FRONTEND = "frontend"
    BACKEND = "backend"
    UNIVERSAL = "universal"


class Severity(StrEnum):
    """Diagnostic severity levels."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class DiagnosticCode(StrEnum):
    """Stable identifiers for every diagnostic the compiler can emit."""

    # Type resolution
    UNKNOWN_TYPE = "unknown_type"
    TYPE_INFERRED = "type_inferred"
    TYPE_FALLBACK = "type_fallback"
    EMPTY_TYPE_CATEGORIES = "empty_type_categories"

    # Ignore directive
    DEPRECATED_IGNORE_KEY = "deprecated_ignore_key"
    EMPTY_IGNORE_ENTRY = "empty_ignore_entry"
    UNKNOWN_IGNORE_ENTRY = "unknown_ignore_entry"
    INVALID_IGNORE_SPEC = "invalid_ignore_spec"
    INLINE_SLOT_IGNORED = "inline_slot_ignored"

    # Document shape
    WRONG_TYPE = "wrong_type"
    STRING_TRUNCATED = "string_truncated"
    RESERVED_KEY = "reserved_key"
    CIRCULAR_REFERENCE = "circular_reference"
    DEPTH_LIMIT = "depth_limit"
    FANOUT_LIMIT = "fanout_limit"
    SIZE_BUDGET = "size_budget"
    INVALID_DOCUMENT = "invalid_document"
    EMBEDDED_SCORE_IGNORED = "embedded_score_ignored"

    # Collector bookkeeping
    DIAGNOSTICS_SUPPRESSED = "diagnostics_suppressed"


# ── Document Keys ────────────────────────────────────────

# Accepted spellings of the slot override directive. The first entry is
# the canonical spelling; the rest are accepted with a deprecation warning.
IGNORE_KEYS: tuple[str, ...] = ("slot_ignore", "slotIgnore", "ignore_slots")

# Inline slot value that removes the slot from the scored set.
INLINE_IGNORE_MARKER = "slotignored"

# Prefix that addresses a whole category in an ignore list.
CATEGORY_IGNORE_PREFIX = "category:"

# Keys that name object-prototype members in other runtimes. They are
# kept as plain keys but reported.
RESERVED_KEYS = frozenset({"__proto__", "constructor", "prototype"})

# Self-reported numbers that are never trusted.
EMBEDDED_SCORE_KEYS: tuple[str, ...] = (
    "claimed_score",
    "faf_score",
    "ai_score",
    "score",
    "scoring",
    "ai_scoring_details",
)

# String values that mean "nothing here".
PLACEHOLDER_VALUES = frozenset({
    "",
    "null",
    "undefined",
    "~",
    "none",
    "n/a",
    "unknown",
    "not specified",
})

# ── Project Types ────────────────────────────────────────

GENERIC_TYPE = "generic"

# ── Resource Ceilings ────────────────────────────────────

DEFAULT_MAX_DEPTH = 32
DEFAULT_MAX_KEYS = 10_000
DEFAULT_MAX_STRING_LENGTH = 10_000
DEFAULT_MAX_TOTAL_CHARS = 1_000_000
DEFAULT_MAX_DIAGNOSTICS = 200
# Room kept after the normalizer cap for type, ignore and embedded-score
# diagnostics.
PIPELINE_DIAGNOSTIC_RESERVE = 50
DEFAULT_MAX_DOCUMENT_BYTES = 16 * 1024 * 1024  # 16MB
DEFAULT_MAX_YAML_ALIASES = 100

# Cap on how much of a free-text field is scanned for type cues.
FREE_TEXT_SCAN_CHARS = 2_000

# ── Checksum ─────────────────────────────────────────────

CHECKSUM_HEX_LENGTH = 16

# ── Grades ───────────────────────────────────────────────

BASELINE_GRADE = "standard"

DEFAULT_GRADE_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (100, "trophy"),
    (99, "gold"),
    (95, "silver"),
    (85, "bronze"),
    (70, "ready"),
    (55, "caution"),
)

# ── Context File Discovery ──────────────────────────────

CONTEXT_FILE_NAMES: tuple[str, ...] = ("project.faf", ".faf")
CONTEXT_FILE_GLOB = "*.faf"
