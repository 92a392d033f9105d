"""Resolve a raw project-type string to a canonical type.

Resolution order, first match wins:

1. exact canonical name (after trim/lower-case/hyphenation)
2. alias index
3. keyword cues in free text (``project.goal`` and friends)
4. ``generic``
"""

from __future__ import annotations

import logging
import re

from contextscore.constants import (
    FREE_TEXT_SCAN_CHARS,
    GENERIC_TYPE,
    DiagnosticCode,
)
from contextscore.scoring.diagnostics import DiagnosticCollector
from contextscore.scoring.schemas import TypeDefinition, TypeResolution
from contextscore.scoring.type_table import (
    DEFAULT_TYPE_TABLE,
    TypeTable,
    normalize_type_name,
)

logger = logging.getLogger(__name__)

# Ordered (pattern, canonical type). Specific cues come before broad ones
# so "chrome extension" wins over "extension" and "next.js" over "react".
# A CLI cue outranks the nouns a tool works on ("game servers").
_CUE_TABLE: tuple[tuple[str, str], ...] = (
    (r"monorepo|turborepo|pnpm workspace|yarn workspace", "monorepo"),
    (r"chrome extension|browser extension", "chrome-extension"),
    (r"firefox (?:extension|add-?on)", "firefox-extension"),
    (r"mcp server|model context protocol", "mcp-server"),
    (r"next\.?js", "nextjs"),
    (r"full[- ]?stack", "fullstack"),
    (r"cli|command[- ]line|terminal tool", "cli"),
    (r"react native|expo", "react-native"),
    (r"flutter", "flutter"),
    (r"ios app|iphone", "ios"),
    (r"android", "android"),
    (r"mobile app|mobile", "mobile"),
    (r"electron|tauri|desktop app|desktop", "desktop"),
    (r"game|unity|godot", "game"),
    (r"smart contract|solidity", "smart-contract"),
    (r"dapp|web3", "dapp"),
    (r"data pipeline|etl", "data-pipeline"),
    (r"machine learning|ml model|neural network", "ml-model"),
    (r"data science|notebook|jupyter", "data-science"),
    (r"terraform|kubernetes|k8s|infrastructure", "infrastructure"),
    (r"github action", "github-action"),
    (r"firmware|embedded|arduino|iot", "embedded"),
    (r"graphql", "graphql"),
    (r"microservices?", "microservice"),
    (r"fastapi|flask", "python-api"),
    (r"express|fastify|nestjs", "node-api"),
    (r"rest api|api|backend|server", "backend-api"),
    (r"svelte(?:kit)?", "svelte"),
    (r"vue|nuxt", "vue"),
    (r"angular", "angular"),
    (r"react", "react"),
    (r"landing page", "landing-page"),
    (r"frontend|front-end|website|web app|spa", "frontend"),
    (r"npm package", "npm-package"),
    (r"pip package|pypi", "pip-package"),
    (r"library|package|sdk", "library"),
    (r"documentation|docs site", "documentation"),
)

_CUES: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(rf"(?<![a-z0-9])(?:{pattern})(?![a-z0-9])"), target)
    for pattern, target in _CUE_TABLE
)


def infer_type_from_text(
    free_text: str | None,
    table: TypeTable = DEFAULT_TYPE_TABLE,
) -> str | None:
    """Return the canonical type suggested by keyword cues, or None."""
    if not free_text:
        return None
    text = free_text[:FREE_TEXT_SCAN_CHARS].lower()
    for pattern, target in _CUES:
        if target in table and pattern.search(text):
            return target
    return None


def resolve_type(
    raw_type: str | None,
    free_text: str | None = None,
    table: TypeTable = DEFAULT_TYPE_TABLE,
) -> TypeResolution:
    """Resolve ``raw_type`` (or ``free_text`` cues) to a canonical type."""
    diagnostics = DiagnosticCollector()

    normalized = normalize_type_name(raw_type) if raw_type else ""
    if normalized:
        definition = table.get(normalized)
        if definition is not None:
            return _finish(definition, "explicit", diagnostics, table)

        definition = table.lookup_alias(normalized)
        if definition is not None:
            logger.debug(
                "Type alias '%s' resolved to '%s'",
                normalized,
                definition.canonical_name,
            )
            return _finish(definition, "alias", diagnostics, table)

        diagnostics.warning(
            DiagnosticCode.UNKNOWN_TYPE,
            f"Unknown project type '{_clip(raw_type or '')}'",
            path="project.type",
        )

    inferred = infer_type_from_text(free_text, table)
    if inferred is not None:
        definition = table.get(inferred)
        if definition is not None:
            diagnostics.info(
                DiagnosticCode.TYPE_INFERRED,
                f"Project type inferred as '{inferred}' from description",
                path="project.goal",
            )
            return _finish(definition, "inferred", diagnostics, table)

    diagnostics.info(
        DiagnosticCode.TYPE_FALLBACK,
        f"No recognizable project type; using '{GENERIC_TYPE}'",
        path="project.type",
    )
    return _finish(table.generic, "fallback", diagnostics, table)


def _finish(
    definition: TypeDefinition,
    source: str,
    diagnostics: DiagnosticCollector,
    table: TypeTable,
) -> TypeResolution:
    if not definition.categories:
        diagnostics.warning(
            DiagnosticCode.EMPTY_TYPE_CATEGORIES,
            f"Type '{definition.canonical_name}' has no slot categories; "
            f"using '{GENERIC_TYPE}'",
            path="project.type",
        )
        definition = table.generic
        source = "fallback"
    return TypeResolution(
        canonical=definition.canonical_name,
        categories=definition.categories,
        source=source,
        diagnostics=diagnostics.to_tuple(),
    )


def _clip(text: str, limit: int = 80) -> str:
    return text if len(text) <= limit else text[:limit] + "..."
