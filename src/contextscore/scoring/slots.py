"""Slot registry — the fixed set of fields a context document can fill.

Every slot belongs to exactly one category. Project types select
categories, never individual slots, so adding a slot here needs no
change anywhere else.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from contextscore.constants import Category
from contextscore.scoring.schemas import Slot

_SLOTS: tuple[Slot, ...] = (
    # Project
    Slot("project.name", Category.PROJECT),
    Slot("project.goal", Category.PROJECT),
    Slot("project.main_language", Category.PROJECT),
    # Human context (the six W's)
    Slot("human_context.who", Category.HUMAN),
    Slot("human_context.what", Category.HUMAN),
    Slot("human_context.why", Category.HUMAN),
    Slot("human_context.where", Category.HUMAN),
    Slot("human_context.when", Category.HUMAN),
    Slot("human_context.how", Category.HUMAN),
    # Frontend
    Slot("stack.frontend", Category.FRONTEND),
    Slot("stack.css_framework", Category.FRONTEND),
    Slot("stack.ui_library", Category.FRONTEND),
    Slot("stack.state_management", Category.FRONTEND),
    # Backend
    Slot("stack.backend", Category.BACKEND),
    Slot("stack.api_type", Category.BACKEND),
    Slot("stack.runtime", Category.BACKEND),
    Slot("stack.database", Category.BACKEND),
    Slot("stack.connection", Category.BACKEND),
    # Universal
    Slot("stack.hosting", Category.UNIVERSAL),
    Slot("stack.build", Category.UNIVERSAL),
    Slot("stack.cicd", Category.UNIVERSAL),
)


def _build_shorthand_index(
    slots: tuple[Slot, ...],
) -> Mapping[str, str]:
    index: dict[str, str] = {}
    for slot in slots:
        if slot.shorthand in index:
            msg = (
                f"Shorthand '{slot.shorthand}' is ambiguous: "
                f"{index[slot.shorthand]} and {slot.path}"
            )
            raise ValueError(msg)
        index[slot.shorthand] = slot.path
    return MappingProxyType(index)


_BY_PATH: Mapping[str, Slot] = MappingProxyType({s.path: s for s in _SLOTS})
_SHORTHAND: Mapping[str, str] = _build_shorthand_index(_SLOTS)


def all_slots() -> tuple[Slot, ...]:
    """Return every slot in registry order."""
    return _SLOTS


def slot_paths() -> tuple[str, ...]:
    return tuple(s.path for s in _SLOTS)


def slots_by_category(category: Category) -> tuple[Slot, ...]:
    """Return the slots tagged with ``category`` in registry order."""
    return tuple(s for s in _SLOTS if s.category == category)


def slots_for_categories(
    categories: frozenset[Category] | set[Category],
) -> tuple[Slot, ...]:
    """Expand a category set into its slots, preserving registry order."""
    return tuple(s for s in _SLOTS if s.category in categories)


def get_slot(path: str) -> Slot | None:
    return _BY_PATH.get(path)


def shorthand_index() -> Mapping[str, str]:
    """Map each slot's last path segment to its full dotted path."""
    return _SHORTHAND
