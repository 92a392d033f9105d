"""The scoring compiler — one pure function from document to result.

Pipeline: normalize → resolve type → compute scope → score → checksum
and grade. Nothing is cached between calls, so concurrent callers need
no locking and identical input gives byte-identical output.
"""

from __future__ import annotations

import logging
from typing import Any

from contextscore.constants import (
    PIPELINE_DIAGNOSTIC_RESERVE,
    DiagnosticCode,
)
from contextscore.scoring.diagnostics import DiagnosticCollector
from contextscore.scoring.grading import (
    DEFAULT_GRADE_TABLE,
    GradeTable,
    compute_checksum,
)
from contextscore.scoring.normalizer import normalize
from contextscore.scoring.resolver import resolve_type
from contextscore.scoring.schemas import (
    DiagnosticModel,
    ScoringLimits,
    ScoringResult,
)
from contextscore.scoring.scope import compute_scope, extract_ignore_spec
from contextscore.scoring.scorer import score_slots
from contextscore.scoring.type_table import DEFAULT_TYPE_TABLE, TypeTable

logger = logging.getLogger(__name__)


def compile_score(
    document: Any,
    type_hint: str | None = None,
    *,
    grades: GradeTable | None = None,
    limits: ScoringLimits | None = None,
    types: TypeTable | None = None,
) -> ScoringResult:
    """Score a parsed context document.

    ``type_hint`` overrides ``project.type`` from the document. Malformed
    content never raises; it lowers the score and adds diagnostics. A
    non-mapping ``document`` raises ``DocumentTypeError``.
    """
    limits = limits or ScoringLimits()
    grades = grades or DEFAULT_GRADE_TABLE
    types = types or DEFAULT_TYPE_TABLE

    normalized = normalize(document, limits)
    doc = normalized.doc
    diagnostics = DiagnosticCollector(
        limits.max_diagnostics + PIPELINE_DIAGNOSTIC_RESERVE
    )
    diagnostics.extend(normalized.diagnostics, normalized.suppressed)

    raw_type = type_hint if type_hint and type_hint.strip() else doc.project_type
    resolution = resolve_type(raw_type, doc.free_text, types)
    diagnostics.extend(resolution.diagnostics)

    ignored, ignore_diagnostics = extract_ignore_spec(doc)
    diagnostics.extend(ignore_diagnostics)

    scope = compute_scope(resolution.categories, ignored)
    tally = score_slots(scope, doc)

    for key in doc.embedded_score_keys:
        diagnostics.info(
            DiagnosticCode.EMBEDDED_SCORE_IGNORED,
            f"Self-reported '{key}' ignored; score recomputed from slots",
            path=key,
        )

    checksum = compute_checksum(
        tally.percent,
        tally.filled,
        scope.total,
        resolution.canonical,
        scope.paths,
    )
    logger.debug(
        "Scored type=%s (%s) %d/%d = %d%%",
        resolution.canonical,
        resolution.source,
        tally.filled,
        scope.total,
        tally.percent,
    )

    return ScoringResult(
        score=tally.percent,
        filled=tally.filled,
        total=scope.total,
        checksum=checksum,
        grade=grades.grade_for(tally.percent),
        canonical_type=resolution.canonical,
        diagnostics=[
            DiagnosticModel.from_diagnostic(d)
            for d in diagnostics.to_tuple()
        ],
        scored_slots=list(scope.paths),
        filled_slots=list(tally.filled_paths),
        missing_slots=list(tally.missing_paths),
        ignored_slots=list(scope.ignored),
    )
