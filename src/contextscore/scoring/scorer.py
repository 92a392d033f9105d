"""Count filled slots in a scope and compute a bounded percentage."""

from __future__ import annotations

from contextscore.scoring.schemas import SafeDoc, ScopeResult, SlotTally


def percent_of(filled: int, total: int) -> int:
    """Integer percentage, rounded half up, clamped to [0, 100].

    Scoring rules:
    - empty scope: 100 (nothing to fill, nothing missing)
    - otherwise: round(filled / total * 100), computed in integers so
      the same counts always give the same result
    """
    if total <= 0:
        return 100
    filled = max(0, min(filled, total))
    value = (filled * 200 + total) // (total * 2)
    return max(0, min(100, value))


def score_slots(scope: ScopeResult, doc: SafeDoc) -> SlotTally:
    """Tally the slots in ``scope`` that hold a present value in ``doc``.

    Only the normalized slot values are read. Any score the document
    reports about itself is never consulted.
    """
    filled_paths: list[str] = []
    missing_paths: list[str] = []
    for slot in scope.slots:
        if doc.is_filled(slot.path):
            filled_paths.append(slot.path)
        else:
            missing_paths.append(slot.path)

    return SlotTally(
        filled=len(filled_paths),
        percent=percent_of(len(filled_paths), scope.total),
        filled_paths=tuple(filled_paths),
        missing_paths=tuple(missing_paths),
    )
