"""Checksum and grade tiers.

The checksum covers exactly ``(score, filled, total, canonical_type,
sorted slot paths)``. No timestamps and no object identity go into it, so
the same input hashes the same in any process, on any thread.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from dataclasses import dataclass

from contextscore.constants import (
    BASELINE_GRADE,
    CHECKSUM_HEX_LENGTH,
    DEFAULT_GRADE_THRESHOLDS,
)
from contextscore.errors import ConfigurationError


def compute_checksum(
    score: int,
    filled: int,
    total: int,
    canonical_type: str,
    slot_paths: Iterable[str],
) -> str:
    """Short SHA-256 over a canonical JSON encoding of the inputs."""
    payload = json.dumps(
        {
            "score": int(score),
            "filled": int(filled),
            "total": int(total),
            "type": canonical_type,
            "slots": sorted(slot_paths),
        },
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
    )
    digest = hashlib.sha256(payload.encode("ascii")).hexdigest()
    return digest[:CHECKSUM_HEX_LENGTH]


@dataclass(frozen=True)
class GradeTier:
    """One named tier reached at ``threshold`` and above."""

    threshold: int
    label: str


class GradeTable:
    """Ordered score thresholds mapped to tier labels.

    Thresholds are configuration: pass a different sequence to retune
    tiers without touching the scorer. Scores below the lowest threshold
    get the ``baseline`` label.
    """

    def __init__(
        self,
        thresholds: Iterable[tuple[int, str]] = DEFAULT_GRADE_THRESHOLDS,
        baseline: str = BASELINE_GRADE,
    ) -> None:
        tiers = sorted(
            (GradeTier(int(t), str(label)) for t, label in thresholds),
            key=lambda tier: tier.threshold,
            reverse=True,
        )
        seen: set[int] = set()
        for tier in tiers:
            if tier.threshold in seen:
                raise ConfigurationError(
                    f"Duplicate grade threshold {tier.threshold}"
                )
            if not tier.label:
                raise ConfigurationError(
                    f"Grade threshold {tier.threshold} has an empty label"
                )
            seen.add(tier.threshold)
        self._tiers: tuple[GradeTier, ...] = tuple(tiers)
        self._baseline = baseline

    @property
    def tiers(self) -> tuple[GradeTier, ...]:
        return self._tiers

    @property
    def baseline(self) -> str:
        return self._baseline

    def grade_for(self, score: int) -> str:
        for tier in self._tiers:
            if score >= tier.threshold:
                return tier.label
        return self._baseline

    def next_target(self, score: int) -> GradeTier | None:
        """Lowest tier strictly above ``score``, or None at the top."""
        above = [t for t in self._tiers if t.threshold > score]
        return above[-1] if above else None


DEFAULT_GRADE_TABLE = GradeTable()
