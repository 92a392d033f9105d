"""Load context files (``.faf`` YAML or JSON) and score them.

Parsing lives here, outside the scoring core. The loader refuses files
over a byte ceiling and caps YAML alias expansion, then hands a plain
mapping to ``compile_score``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from contextscore.config import Settings
from contextscore.constants import (
    CONTEXT_FILE_GLOB,
    CONTEXT_FILE_NAMES,
    DEFAULT_MAX_DOCUMENT_BYTES,
    DEFAULT_MAX_YAML_ALIASES,
    DiagnosticCode,
    Severity,
)
from contextscore.errors import DocumentLoadError
from contextscore.scoring.compiler import compile_score
from contextscore.scoring.schemas import DiagnosticModel, ScoringResult

logger = logging.getLogger(__name__)


class _BoundedSafeLoader(yaml.SafeLoader):
    """SafeLoader that stops after ``max_aliases`` alias references."""

    max_aliases = DEFAULT_MAX_YAML_ALIASES

    def __init__(self, stream: Any) -> None:
        super().__init__(stream)
        self._alias_count = 0

    def compose_node(self, parent: Any, index: Any) -> Any:
        if self.check_event(yaml.AliasEvent):
            self._alias_count += 1
            if self._alias_count > self.max_aliases:
                raise yaml.composer.ComposerError(
                    None,
                    None,
                    f"more than {self.max_aliases} alias references",
                    self.peek_event().start_mark,
                )
        return super().compose_node(parent, index)


def _loader_class(max_aliases: int) -> type[_BoundedSafeLoader]:
    return type(
        "BoundedSafeLoader",
        (_BoundedSafeLoader,),
        {"max_aliases": max_aliases},
    )


def parse_document(
    text: str,
    *,
    max_aliases: int = DEFAULT_MAX_YAML_ALIASES,
    source: str | None = None,
) -> dict[str, Any] | None:
    """Parse YAML/JSON text into a mapping (``None`` for an empty file).

    Raises ``DocumentLoadError`` for syntax errors, alias floods, and
    documents whose top level is not a mapping.
    """
    try:
        data = yaml.load(text, Loader=_loader_class(max_aliases))  # noqa: S506
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML: {exc}"
        raise DocumentLoadError(msg, source) from exc
    except RecursionError as exc:
        msg = "YAML nesting too deep to parse"
        raise DocumentLoadError(msg, source) from exc

    if data is None:
        return None
    if not isinstance(data, dict):
        msg = (
            "Context document must be a mapping at the top level, "
            f"got {type(data).__name__}"
        )
        raise DocumentLoadError(msg, source)
    return data


def load_document(
    path: Path,
    *,
    max_bytes: int = DEFAULT_MAX_DOCUMENT_BYTES,
    max_aliases: int = DEFAULT_MAX_YAML_ALIASES,
) -> dict[str, Any] | None:
    """Read and parse a context file.

    Raises ``DocumentLoadError`` if the file is missing, too large, not
    UTF-8, or not a YAML mapping.
    """
    source = str(path)
    try:
        size = path.stat().st_size
    except OSError as exc:
        msg = f"Cannot read {path}: {exc.strerror or exc}"
        raise DocumentLoadError(msg, source) from exc
    if size > max_bytes:
        msg = f"{path} is {size} bytes; limit is {max_bytes}"
        raise DocumentLoadError(msg, source)

    try:
        text = path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as exc:
        msg = f"{path} is not valid UTF-8"
        raise DocumentLoadError(msg, source) from exc
    except OSError as exc:
        msg = f"Cannot read {path}: {exc.strerror or exc}"
        raise DocumentLoadError(msg, source) from exc

    return parse_document(text, max_aliases=max_aliases, source=source)


def find_context_file(directory: Path) -> Path | None:
    """Return ``project.faf``, ``.faf`` or the first ``*.faf`` in order."""
    for name in CONTEXT_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    matches = sorted(p for p in directory.glob(CONTEXT_FILE_GLOB) if p.is_file())
    return matches[0] if matches else None


def compile_file(
    path: Path,
    type_hint: str | None = None,
    *,
    settings: Settings | None = None,
) -> ScoringResult:
    """Load ``path`` and score it.

    Load failures do not raise: they produce a zero-content result with
    an ``invalid_document`` error diagnostic.
    """
    settings = settings or Settings()
    try:
        document = load_document(
            path,
            max_bytes=settings.max_document_bytes,
            max_aliases=settings.max_yaml_aliases,
        )
    except DocumentLoadError as exc:
        logger.info("Scoring %s as empty: %s", path, exc)
        result = compile_score(
            None,
            type_hint,
            grades=settings.grade_table(),
            limits=settings.limits(),
        )
        failure = DiagnosticModel(
            severity=Severity.ERROR,
            code=DiagnosticCode.INVALID_DOCUMENT,
            message=str(exc),
            path=None,
        )
        return result.model_copy(
            update={"diagnostics": [failure, *result.diagnostics]}
        )

    return compile_score(
        document,
        type_hint,
        grades=settings.grade_table(),
        limits=settings.limits(),
    )
