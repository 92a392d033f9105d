"""Scope calculator — expand a type's categories and apply slot overrides.

All accepted override shapes go through ``canonicalize_ignore``:

- a list/tuple/set of entries, or one comma-separated string
- dotted paths (``stack.hosting``) or shorthand (``hosting``)
- ``category:<name>`` to drop a whole category
- any of the keys ``slot_ignore``, ``slotIgnore``, ``ignore_slots``
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from contextscore.constants import (
    CATEGORY_IGNORE_PREFIX,
    IGNORE_KEYS,
    Category,
    DiagnosticCode,
)
from contextscore.scoring.diagnostics import DiagnosticCollector
from contextscore.scoring.schemas import Diagnostic, SafeDoc, ScopeResult
from contextscore.scoring.slots import (
    get_slot,
    shorthand_index,
    slots_by_category,
    slots_for_categories,
)

_CANONICAL_KEY = IGNORE_KEYS[0]


def _split_entries(
    spec: Any, key: str, diagnostics: DiagnosticCollector
) -> list[str]:
    if spec is None:
        return []
    if isinstance(spec, str):
        return spec.split(",")
    if isinstance(spec, (set, frozenset)):
        spec = sorted(spec, key=repr)
    if isinstance(spec, (list, tuple)):
        entries: list[str] = []
        for item in spec:
            if isinstance(item, str):
                entries.append(item)
            elif item is None:
                entries.append("")
            else:
                diagnostics.warning(
                    DiagnosticCode.INVALID_IGNORE_SPEC,
                    f"Ignore entry of type {type(item).__name__} skipped",
                    path=key,
                )
        return entries
    diagnostics.warning(
        DiagnosticCode.INVALID_IGNORE_SPEC,
        f"Ignore list must be a list or comma-separated string, "
        f"found {type(spec).__name__}",
        path=key,
    )
    return []


def _expand_entry(entry: str) -> tuple[str, ...]:
    """Map one normalized entry to the slot paths it names."""
    if entry.startswith(CATEGORY_IGNORE_PREFIX):
        name = entry[len(CATEGORY_IGNORE_PREFIX):]
        try:
            category = Category(name)
        except ValueError:
            return ()
        return tuple(s.path for s in slots_by_category(category))
    if get_slot(entry) is not None:
        return (entry,)
    full = shorthand_index().get(entry)
    return (full,) if full is not None else ()


def canonicalize_ignore(
    spec: Any,
    key: str = _CANONICAL_KEY,
) -> tuple[frozenset[str], tuple[Diagnostic, ...]]:
    """Normalize any accepted override shape into a set of slot paths."""
    diagnostics = DiagnosticCollector()
    paths: set[str] = set()
    for raw in _split_entries(spec, key, diagnostics):
        entry = raw.strip().lower()
        if not entry:
            diagnostics.warning(
                DiagnosticCode.EMPTY_IGNORE_ENTRY,
                "Empty ignore entry skipped",
                path=key,
            )
            continue
        expanded = _expand_entry(entry)
        if not expanded:
            diagnostics.info(
                DiagnosticCode.UNKNOWN_IGNORE_ENTRY,
                f"Ignore entry '{entry[:80]}' matches no slot",
                path=key,
            )
            continue
        paths.update(expanded)
    return frozenset(paths), diagnostics.to_tuple()


def extract_ignore_spec(
    doc: SafeDoc,
) -> tuple[frozenset[str], tuple[Diagnostic, ...]]:
    """Collect ignore paths from every accepted key plus inline markers."""
    diagnostics = DiagnosticCollector()
    paths: set[str] = set()
    for key, spec in doc.ignore_directives:
        if key != _CANONICAL_KEY:
            diagnostics.warning(
                DiagnosticCode.DEPRECATED_IGNORE_KEY,
                f"'{key}' is accepted but '{_CANONICAL_KEY}' is preferred",
                path=key,
            )
        found, found_diagnostics = canonicalize_ignore(spec, key)
        paths.update(found)
        diagnostics.extend(found_diagnostics)

    for path in doc.inline_ignored:
        diagnostics.info(
            DiagnosticCode.INLINE_SLOT_IGNORED,
            "Slot marked 'slotignored' removed from scoring",
            path=path,
        )
        paths.add(path)
    return frozenset(paths), diagnostics.to_tuple()


def compute_scope(
    categories: Iterable[Category],
    ignore: Any = None,
) -> ScopeResult:
    """Expand ``categories`` to slots and drop the ignored ones.

    ``ignore`` takes any shape ``canonicalize_ignore`` accepts; slot paths
    pass through unchanged. ``total`` is recomputed from what remains.
    """
    ignored_paths, _ = canonicalize_ignore(ignore)

    candidates = slots_for_categories(frozenset(categories))
    kept = tuple(s for s in candidates if s.path not in ignored_paths)
    removed = tuple(
        sorted(s.path for s in candidates if s.path in ignored_paths)
    )
    return ScopeResult(slots=kept, ignored=removed)
