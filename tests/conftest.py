"""Shared test fixtures — sample context documents."""

from __future__ import annotations

import copy
from typing import Any

import pytest

HUMAN_CONTEXT: dict[str, str] = {
    "who": "Developers",
    "what": "CLI tool",
    "why": "Automation",
    "where": "Terminal",
    "when": "Now",
    "how": "npm install",
}

FULL_STACK: dict[str, str] = {
    "frontend": "React",
    "css_framework": "Tailwind",
    "ui_library": "shadcn/ui",
    "state_management": "Zustand",
    "backend": "Node.js",
    "api_type": "REST",
    "runtime": "Node 20",
    "database": "PostgreSQL",
    "connection": "Prisma",
    "hosting": "Vercel",
    "build": "Vite",
    "cicd": "GitHub Actions",
}


def make_doc(
    project_type: str | None = None,
    *,
    goal: str = "Testing",
    human: bool = False,
    stack: bool = False,
    **extra: Any,
) -> dict[str, Any]:
    """Build a context document with the project slots filled."""
    project: dict[str, Any] = {
        "name": "test-project",
        "goal": goal,
        "main_language": "TypeScript",
    }
    if project_type is not None:
        project["type"] = project_type
    doc: dict[str, Any] = {"project": project}
    if human:
        doc["human_context"] = dict(HUMAN_CONTEXT)
    if stack:
        doc["stack"] = dict(FULL_STACK)
    doc.update(extra)
    return doc


@pytest.fixture
def cli_doc() -> dict[str, Any]:
    """A cli-type document with every scored slot filled."""
    return make_doc("cli", goal="A command line tool", human=True)


@pytest.fixture
def complete_doc() -> dict[str, Any]:
    """A fullstack document with all 21 slots filled."""
    return copy.deepcopy(
        make_doc("fullstack", goal="Full stack app", human=True, stack=True)
    )
