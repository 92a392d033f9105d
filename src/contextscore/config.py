"""Environment-based configuration."""

from __future__ import annotations

import json
import logging
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

from contextscore.constants import (
    BASELINE_GRADE,
    DEFAULT_GRADE_THRESHOLDS,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_DIAGNOSTICS,
    DEFAULT_MAX_DOCUMENT_BYTES,
    DEFAULT_MAX_KEYS,
    DEFAULT_MAX_STRING_LENGTH,
    DEFAULT_MAX_TOTAL_CHARS,
    DEFAULT_MAX_YAML_ALIASES,
)
from contextscore.scoring.grading import GradeTable
from contextscore.scoring.schemas import ScoringLimits

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Reads from .env file and ``CONTEXTSCORE_*`` environment variables."""

    # Logging
    log_level: str = "WARNING"

    # Normalizer ceilings
    max_depth: int = DEFAULT_MAX_DEPTH
    max_keys: int = DEFAULT_MAX_KEYS
    max_string_length: int = DEFAULT_MAX_STRING_LENGTH
    max_total_chars: int = DEFAULT_MAX_TOTAL_CHARS
    max_diagnostics: int = DEFAULT_MAX_DIAGNOSTICS

    # Loader
    max_document_bytes: int = DEFAULT_MAX_DOCUMENT_BYTES
    max_yaml_aliases: int = DEFAULT_MAX_YAML_ALIASES

    # Grades (highest first is not required; the table sorts)
    grade_thresholds: Annotated[
        list[tuple[int, str]], NoDecode
    ] = list(DEFAULT_GRADE_THRESHOLDS)
    baseline_grade: str = BASELINE_GRADE

    @field_validator("grade_thresholds", mode="before")
    @classmethod
    def _parse_thresholds(cls, v: Any) -> Any:
        """Accept ``"100:trophy,99:gold"`` or a JSON array of pairs."""
        if not isinstance(v, str):
            return v
        text = v.strip()
        if text.startswith("["):
            return json.loads(text)
        pairs: list[tuple[str, str]] = []
        for item in text.split(","):
            if not item.strip():
                continue
            threshold, sep, label = item.partition(":")
            if not sep:
                raise ValueError(
                    f"Grade threshold '{item.strip()}' must be 'score:label'"
                )
            pairs.append((threshold.strip(), label.strip()))
        return pairs

    @field_validator("grade_thresholds")
    @classmethod
    def _validate_thresholds(
        cls, v: list[tuple[int, str]]
    ) -> list[tuple[int, str]]:
        if not v:
            raise ValueError("grade_thresholds must contain at least one tier")
        seen_scores: set[int] = set()
        seen_labels: set[str] = set()
        dupes: list[str] = []
        for threshold, label in v:
            if not 0 <= threshold <= 100:
                raise ValueError(
                    f"Grade threshold {threshold} is outside 0-100"
                )
            if not label:
                raise ValueError(
                    f"Grade threshold {threshold} has an empty label"
                )
            if threshold in seen_scores:
                raise ValueError(f"Duplicate grade threshold {threshold}")
            if label in seen_labels:
                dupes.append(label)
            seen_scores.add(threshold)
            seen_labels.add(label)
        if dupes:
            logger.warning(
                "Duplicate labels in CONTEXTSCORE_GRADE_THRESHOLDS: %s",
                ", ".join(dupes),
            )
        return v

    @field_validator(
        "max_depth",
        "max_keys",
        "max_string_length",
        "max_total_chars",
        "max_diagnostics",
    )
    @classmethod
    def _positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("limits must be positive")
        return v

    def limits(self) -> ScoringLimits:
        return ScoringLimits(
            max_depth=self.max_depth,
            max_keys=self.max_keys,
            max_string_length=self.max_string_length,
            max_total_chars=self.max_total_chars,
            max_diagnostics=self.max_diagnostics,
        )

    def grade_table(self) -> GradeTable:
        return GradeTable(self.grade_thresholds, self.baseline_grade)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "CONTEXTSCORE_",
        "extra": "ignore",
    }
