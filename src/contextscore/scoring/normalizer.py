"""Input normalizer — turn an untrusted parsed document into a ``SafeDoc``.

The raw document is walked once, within fixed resource ceilings, into a
plain copy made only of dicts, lists and scalars. Slot values are then
read from that copy and classified as ``Present`` or ``ABSENT``, so no
later stage repeats null or type checks.

Ceilings:

- ``max_depth``: containers nested deeper are dropped (``depth_limit``)
- ``max_keys``: total nodes visited; the rest is dropped (``fanout_limit``)
- ``max_string_length``: longer strings are truncated (``string_truncated``)
- ``max_total_chars``: key and string characters copied; the rest is dropped
  (``size_budget``)

Every ceiling counts work done, never time taken, so a document scores
the same however busy the process is.

Known sections are walked first so junk keys cannot use up the budget
before the slots are read.
"""

from __future__ import annotations

import datetime as dt
import logging
import math
import re
from collections.abc import Mapping
from typing import Any

from contextscore.constants import (
    EMBEDDED_SCORE_KEYS,
    IGNORE_KEYS,
    INLINE_IGNORE_MARKER,
    PLACEHOLDER_VALUES,
    RESERVED_KEYS,
    Category,
    DiagnosticCode,
)
from contextscore.errors import DocumentTypeError
from contextscore.scoring.diagnostics import DiagnosticCollector
from contextscore.scoring.schemas import (
    ABSENT,
    NormalizedDocument,
    Present,
    SafeDoc,
    ScoringLimits,
    SlotValue,
)
from contextscore.scoring.slots import all_slots

logger = logging.getLogger(__name__)

_PRIORITY_SECTIONS: tuple[str, ...] = (
    "project",
    "human_context",
    "stack",
    *IGNORE_KEYS,
)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# Slots that may hold a list of strings (``who: [devs, ops]``).
_LIST_CATEGORIES = frozenset({Category.HUMAN})

_FREE_TEXT_PATHS: tuple[str, ...] = (
    "project.goal",
    "human_context.what",
    "project.description",
)


class _BudgetExceeded(Exception):
    """Internal signal: a global traversal budget ran out."""


class _Walker:
    """Bounded copy of an arbitrary parsed structure.

    Containers are attached to their parent before they are filled, so a
    budget breach deep in the tree keeps everything copied so far.
    """

    def __init__(
        self,
        limits: ScoringLimits,
        diagnostics: DiagnosticCollector,
    ) -> None:
        self._limits = limits
        self._diagnostics = diagnostics
        self._nodes = 0
        self._chars = 0
        self._ancestors: set[int] = set()

    def copy_document(self, node: Mapping[Any, Any]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        try:
            self._tick("")
            self._ancestors.add(id(node))
            self._fill_mapping(out, node, "", 0)
        except _BudgetExceeded:
            logger.debug("Normalizer budget exhausted after partial copy")
        except RecursionError:
            self._diagnostics.error(
                DiagnosticCode.DEPTH_LIMIT,
                "Document nesting exhausted the interpreter stack",
            )
        return out

    def _tick(self, path: str) -> None:
        self._nodes += 1
        if self._nodes > self._limits.max_keys:
            self._diagnostics.error(
                DiagnosticCode.FANOUT_LIMIT,
                f"Document exceeds {self._limits.max_keys} nodes; "
                "remaining content treated as absent",
                path=path or None,
            )
            raise _BudgetExceeded

    def _spend(self, chars: int, path: str) -> None:
        self._chars += chars
        if self._chars > self._limits.max_total_chars:
            self._diagnostics.error(
                DiagnosticCode.SIZE_BUDGET,
                f"Document text exceeds {self._limits.max_total_chars} "
                "characters; remaining content treated as absent",
                path=path or None,
            )
            raise _BudgetExceeded

    def _attach(self, node: Any, path: str, depth: int) -> Any:
        """Return the copy of ``node``; containers come back empty."""
        self._tick(path)
        if isinstance(node, (Mapping, list, tuple)):
            if depth >= self._limits.max_depth:
                self._diagnostics.error(
                    DiagnosticCode.DEPTH_LIMIT,
                    f"Nesting deeper than {self._limits.max_depth} levels "
                    "treated as absent",
                    path=path,
                )
                return None
            if id(node) in self._ancestors:
                self._diagnostics.error(
                    DiagnosticCode.CIRCULAR_REFERENCE,
                    "Self-referential structure treated as absent",
                    path=path,
                )
                return None
            return {} if isinstance(node, Mapping) else []
        return self._copy_scalar(node, path)

    def _descend(self, target: Any, node: Any, path: str, depth: int) -> None:
        if isinstance(target, dict):
            fill = self._fill_mapping
        elif isinstance(target, list):
            fill = self._fill_sequence
        else:
            return
        marker = id(node)
        self._ancestors.add(marker)
        try:
            fill(target, node, path, depth)
        finally:
            self._ancestors.discard(marker)

    def _fill_mapping(
        self,
        out: dict[str, Any],
        node: Mapping[Any, Any],
        path: str,
        depth: int,
    ) -> None:
        for raw_key in _ordered_keys(node, top_level=not path):
            key = _key_to_str(raw_key)
            if key is None:
                self._diagnostics.warning(
                    DiagnosticCode.WRONG_TYPE,
                    f"Unsupported key of type {type(raw_key).__name__} "
                    "skipped",
                    path=path or None,
                )
                continue
            self._spend(len(key), path)
            child_path = f"{path}.{key}" if path else key
            if key in RESERVED_KEYS:
                self._diagnostics.error(
                    DiagnosticCode.RESERVED_KEY,
                    f"Reserved key '{key}' kept as a plain key",
                    path=child_path,
                )
            child = node[raw_key]
            out[key] = copied = self._attach(child, child_path, depth + 1)
            self._descend(copied, child, child_path, depth + 1)

    def _fill_sequence(
        self,
        out: list[Any],
        node: list[Any] | tuple[Any, ...],
        path: str,
        depth: int,
    ) -> None:
        for i, child in enumerate(node):
            child_path = f"{path}[{i}]"
            copied = self._attach(child, child_path, depth + 1)
            out.append(copied)
            self._descend(copied, child, child_path, depth + 1)

    def _copy_scalar(self, node: Any, path: str) -> Any:
        if node is None or isinstance(node, (bool, int)):
            return node
        if isinstance(node, float):
            return node if math.isfinite(node) else None
        if isinstance(node, str):
            limit = self._limits.max_string_length
            if len(node) > limit:
                self._diagnostics.warning(
                    DiagnosticCode.STRING_TRUNCATED,
                    f"String of {len(node)} characters truncated "
                    f"to {limit}",
                    path=path,
                )
                node = node[:limit]
            self._spend(len(node), path)
            return node
        if isinstance(node, (dt.date, dt.datetime)):
            return node.isoformat()
        # bytes, sets and arbitrary objects have no document meaning
        return _Unusable(type(node).__name__)


class _Unusable:
    """Placeholder for a value of a type documents cannot carry."""

    __slots__ = ("type_name",)

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name


def _key_to_str(key: Any) -> str | None:
    if isinstance(key, str):
        return key
    if isinstance(key, (bool, int, float)):
        return str(key)
    return None


def _ordered_keys(node: Mapping[Any, Any], *, top_level: bool) -> list[Any]:
    keys = list(node.keys())
    if not top_level:
        return keys
    first = [k for k in _PRIORITY_SECTIONS if k in node]
    return first + [k for k in keys if k not in first]


def _type_name(value: Any) -> str:
    if isinstance(value, _Unusable):
        return value.type_name
    if isinstance(value, dict):
        return "mapping"
    if isinstance(value, list):
        return "list"
    return type(value).__name__


def _clean_text(text: str) -> str:
    return _CONTROL_CHARS.sub("", text).strip()


def _is_placeholder(text: str) -> bool:
    return text.lower() in PLACEHOLDER_VALUES


def _lookup(tree: dict[str, Any], path: str) -> tuple[bool, Any, str]:
    """Follow ``path`` through nested mappings.

    Returns ``(found, value, blocking_path)``; ``blocking_path`` names the
    first segment that exists but is not a mapping.
    """
    node: Any = tree
    walked: list[str] = []
    for segment in path.split("."):
        if node is None:
            return False, None, ""
        if not isinstance(node, dict):
            return False, node, ".".join(walked)
        if segment not in node:
            return False, None, ""
        walked.append(segment)
        node = node[segment]
    return True, node, ""


def _classify(
    value: Any,
    path: str,
    category: Category,
    diagnostics: DiagnosticCollector,
) -> SlotValue | str:
    """Classify a slot value; returns the ignore marker string if set."""
    if value is None:
        return ABSENT
    if isinstance(value, bool):
        diagnostics.warning(
            DiagnosticCode.WRONG_TYPE,
            "Expected text, found a boolean",
            path=path,
        )
        return ABSENT
    if isinstance(value, (int, float)):
        return Present(str(value))
    if isinstance(value, str):
        text = _clean_text(value)
        if text.lower() == INLINE_IGNORE_MARKER:
            return INLINE_IGNORE_MARKER
        if not text or _is_placeholder(text):
            return ABSENT
        return Present(text)
    if isinstance(value, list) and category in _LIST_CATEGORIES:
        parts: list[str] = []
        for item in value:
            if isinstance(item, str):
                text = _clean_text(item)
                if text and not _is_placeholder(text):
                    parts.append(text)
            elif isinstance(item, (int, float)) and not isinstance(item, bool):
                parts.append(str(item))
            elif item is not None:
                diagnostics.warning(
                    DiagnosticCode.WRONG_TYPE,
                    f"List item of type {_type_name(item)} ignored",
                    path=path,
                )
        return Present(", ".join(parts)) if parts else ABSENT
    diagnostics.warning(
        DiagnosticCode.WRONG_TYPE,
        f"Expected text, found {_type_name(value)}",
        path=path,
    )
    return ABSENT


def _read_text(
    tree: dict[str, Any],
    path: str,
    diagnostics: DiagnosticCollector | None = None,
) -> str | None:
    found, value, _ = _lookup(tree, path)
    if not found or value is None:
        return None
    if isinstance(value, str):
        text = _clean_text(value)
        return text or None
    if diagnostics is not None:
        diagnostics.warning(
            DiagnosticCode.WRONG_TYPE,
            f"Expected text, found {_type_name(value)}",
            path=path,
        )
    return None


def normalize(
    raw_doc: Any,
    limits: ScoringLimits | None = None,
) -> NormalizedDocument:
    """Normalize a parsed document into a ``SafeDoc`` plus diagnostics.

    ``None`` is an empty document. Any other non-mapping value is a caller
    error and raises ``DocumentTypeError`` immediately.
    """
    if raw_doc is not None and not isinstance(raw_doc, Mapping):
        raise DocumentTypeError(
            f"Document must be a mapping, got {type(raw_doc).__name__}"
        )
    limits = limits or ScoringLimits()
    diagnostics = DiagnosticCollector(limits.max_diagnostics)

    tree: dict[str, Any] = {}
    if raw_doc:
        tree = _Walker(limits, diagnostics).copy_document(raw_doc)

    slots: dict[str, SlotValue] = {}
    inline_ignored: list[str] = []
    reported_blockers: set[str] = set()
    for slot in all_slots():
        found, value, blocker = _lookup(tree, slot.path)
        if not found:
            if blocker and blocker not in reported_blockers:
                reported_blockers.add(blocker)
                diagnostics.warning(
                    DiagnosticCode.WRONG_TYPE,
                    f"Expected a mapping, found {_type_name(value)}",
                    path=blocker,
                )
            slots[slot.path] = ABSENT
            continue
        classified = _classify(value, slot.path, slot.category, diagnostics)
        if isinstance(classified, str):
            inline_ignored.append(slot.path)
            slots[slot.path] = ABSENT
        else:
            slots[slot.path] = classified

    free_text: str | None = None
    for path in _FREE_TEXT_PATHS:
        free_text = _read_text(tree, path)
        if free_text:
            break

    doc = SafeDoc(
        slots=slots,
        project_type=_read_text(tree, "project.type", diagnostics),
        free_text=free_text,
        ignore_directives=tuple(
            (key, tree[key]) for key in IGNORE_KEYS if key in tree
        ),
        inline_ignored=tuple(inline_ignored),
        embedded_score_keys=tuple(
            key for key in EMBEDDED_SCORE_KEYS if key in tree
        ),
    )
    return NormalizedDocument(
        doc=doc,
        diagnostics=diagnostics.items,
        suppressed=diagnostics.suppressed,
    )
