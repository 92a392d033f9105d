"""Type-aware scoring compiler for project context documents."""

from contextscore.scoring.compiler import compile_score
from contextscore.scoring.grading import GradeTable, compute_checksum
from contextscore.scoring.normalizer import normalize
from contextscore.scoring.resolver import resolve_type
from contextscore.scoring.schemas import ScoringLimits, ScoringResult
from contextscore.scoring.scope import canonicalize_ignore, compute_scope
from contextscore.scoring.scorer import score_slots
from contextscore.scoring.slots import all_slots, slots_by_category

__all__ = [
    "GradeTable",
    "ScoringLimits",
    "ScoringResult",
    "all_slots",
    "canonicalize_ignore",
    "compile_score",
    "compute_checksum",
    "compute_scope",
    "normalize",
    "resolve_type",
    "score_slots",
    "slots_by_category",
]
