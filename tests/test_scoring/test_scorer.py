"""Tests for slot tallying and percentage rounding."""

from __future__ import annotations

import pytest

from contextscore.constants import Category
from contextscore.scoring.schemas import ABSENT, Present, SafeDoc
from contextscore.scoring.scope import compute_scope
from contextscore.scoring.scorer import percent_of, score_slots


@pytest.mark.parametrize(
    ("filled", "total", "expected"),
    [
        (0, 0, 100),
        (0, 9, 0),
        (9, 9, 100),
        (1, 3, 33),
        (2, 3, 67),
        (1, 8, 13),
        (19, 21, 90),
        (20, 21, 95),
        (1, 200, 1),
        (1, 201, 0),
    ],
)
def test_percent_of(filled: int, total: int, expected: int) -> None:
    assert percent_of(filled, total) == expected


def test_percent_is_clamped() -> None:
    assert percent_of(30, 21) == 100
    assert percent_of(-4, 21) == 0


def test_score_slots_counts_only_scope() -> None:
    scope = compute_scope({Category.PROJECT})
    doc = SafeDoc(
        slots={
            "project.name": Present("demo"),
            "project.goal": ABSENT,
            "stack.hosting": Present("Vercel"),
        }
    )
    tally = score_slots(scope, doc)
    assert tally.filled == 1
    assert tally.percent == 33
    assert tally.filled_paths == ("project.name",)
    assert tally.missing_paths == ("project.goal", "project.main_language")


def test_empty_scope_scores_full() -> None:
    scope = compute_scope(set())
    tally = score_slots(scope, SafeDoc())
    assert (tally.filled, tally.percent) == (0, 100)
