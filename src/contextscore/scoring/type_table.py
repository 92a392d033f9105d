"""Project type table — canonical names, category sets and aliases.

Adding a project type is a data entry here, never new control flow.
The table is validated once at import: canonical names are unique,
every alias maps to exactly one canonical name and no alias shadows a
canonical name.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping

from contextscore.constants import GENERIC_TYPE, Category
from contextscore.errors import ConfigurationError
from contextscore.scoring.schemas import TypeDefinition

P = Category.PROJECT
H = Category.HUMAN
F = Category.FRONTEND
B = Category.BACKEND
U = Category.UNIVERSAL

# ── Category classes ─────────────────────────────────────

TOOL = frozenset({P, H})  # 9 slots
CLIENT_APP = frozenset({P, F, H})  # 13 slots
DATA_SERVICE = frozenset({P, B, H})  # 14 slots
WEB_FRONTEND = frozenset({P, F, U, H})  # 16 slots
WEB_BACKEND = frozenset({P, B, U, H})  # 17 slots
FULL = frozenset({P, H, F, B, U})  # 21 slots
GENERAL = frozenset({P, H, U})  # 12 slots


def _t(
    name: str,
    categories: frozenset[Category],
    *aliases: str,
) -> TypeDefinition:
    return TypeDefinition(
        canonical_name=name,
        categories=categories,
        aliases=frozenset(aliases),
    )


TYPE_DEFINITIONS: tuple[TypeDefinition, ...] = (
    # CLI, libraries and packages
    _t("cli", TOOL, "cli-tool", "command-line", "cmd", "terminal"),
    _t("library", TOOL, "lib", "package", "sdk", "module"),
    _t("npm-package", TOOL, "npm", "node-package"),
    _t("pip-package", TOOL, "pypi", "python-package"),
    _t("crate", TOOL, "rust-crate", "cargo"),
    _t("gem", TOOL, "ruby-gem"),
    # Browser extensions
    _t("chrome-extension", TOOL, "browser-extension", "extension"),
    _t("firefox-extension", TOOL, "firefox-addon"),
    _t("safari-extension", TOOL),
    # DevOps and infrastructure
    _t("terraform", TOOL, "tf", "opentofu"),
    _t("kubernetes", TOOL, "k8s", "helm"),
    _t("docker", TOOL, "dockerfile", "container"),
    _t("ansible", TOOL),
    _t("pulumi", TOOL),
    _t("infrastructure", TOOL, "infra", "iac", "devops"),
    _t("github-action", TOOL, "gha", "github-actions", "action"),
    # Embedded and low level
    _t("embedded", TOOL, "iot", "firmware"),
    _t("arduino", TOOL),
    _t("raspberry-pi", TOOL, "rpi", "raspi"),
    _t("wasm", TOOL, "webassembly"),
    # Notebooks
    _t("jupyter", TOOL, "notebook", "ipynb"),
    # Smart contracts
    _t("smart-contract", TOOL, "solidity", "contract"),
    _t("hardhat", TOOL),
    _t("foundry", TOOL, "forge"),
    # Testing
    _t("test-suite", TOOL, "tests", "testing"),
    _t("e2e-tests", TOOL, "e2e", "playwright", "cypress"),
    # Automation
    _t("zapier", TOOL),
    # AI, data and services without a web surface
    _t("mcp-server", DATA_SERVICE, "mcp"),
    _t("data-science", DATA_SERVICE, "datascience", "analytics"),
    _t("ml-model", DATA_SERVICE, "ml", "machine-learning", "ai-model"),
    _t("data-pipeline", DATA_SERVICE, "etl", "pipeline", "airflow"),
    _t("n8n-workflow", DATA_SERVICE, "n8n", "workflow"),
    _t("python-app", DATA_SERVICE, "python", "python-script"),
    _t("ai-agent", DATA_SERVICE, "agent", "llm-app", "chatbot"),
    # Mobile
    _t("mobile", CLIENT_APP, "mobile-app", "app"),
    _t("react-native", CLIENT_APP, "rn", "expo"),
    _t("flutter", CLIENT_APP, "dart"),
    _t("ios", CLIENT_APP, "swift", "swiftui"),
    _t("android", CLIENT_APP, "kotlin", "jetpack-compose"),
    _t("ionic", CLIENT_APP, "capacitor"),
    # Desktop
    _t("desktop", CLIENT_APP, "desktop-app"),
    _t("electron", CLIENT_APP),
    _t("tauri", CLIENT_APP),
    _t("qt", CLIENT_APP, "pyqt", "pyside"),
    _t("gtk", CLIENT_APP),
    # Games and 3D
    _t("game", CLIENT_APP, "gamedev", "game-dev"),
    _t("unity", CLIENT_APP, "unity3d"),
    _t("godot", CLIENT_APP),
    _t("unreal", CLIENT_APP, "unreal-engine", "ue5"),
    _t("phaser", CLIENT_APP),
    _t("threejs", CLIENT_APP, "three", "three.js", "webgl"),
    # Web3 clients
    _t("dapp", CLIENT_APP, "web3", "blockchain"),
    # Frontend
    _t("frontend", WEB_FRONTEND, "web", "spa", "webapp", "web-app"),
    _t("svelte", WEB_FRONTEND, "sveltekit", "svelte-kit"),
    _t("react", WEB_FRONTEND, "reactjs", "react.js", "vite-react", "cra"),
    _t("vue", WEB_FRONTEND, "vuejs", "vue.js", "nuxt", "nuxtjs"),
    _t("angular", WEB_FRONTEND, "angularjs"),
    _t("astro", WEB_FRONTEND),
    _t("solid", WEB_FRONTEND, "solidjs", "solid-start"),
    _t("qwik", WEB_FRONTEND),
    _t("static-html", WEB_FRONTEND, "html", "static", "static-site"),
    _t("landing-page", WEB_FRONTEND, "landing", "marketing-site"),
    _t("storybook", WEB_FRONTEND, "design-system", "component-library"),
    # Backend APIs
    _t("backend-api", WEB_BACKEND, "api", "backend", "rest-api", "rest"),
    _t("node-api", WEB_BACKEND, "express", "fastify", "koa", "nestjs", "hono"),
    _t("python-api", WEB_BACKEND, "flask", "fastapi", "starlette"),
    _t("go-api", WEB_BACKEND, "gin", "echo", "fiber", "golang-api"),
    _t("rust-api", WEB_BACKEND, "axum", "actix", "rocket"),
    _t("graphql", WEB_BACKEND, "graphql-api", "apollo"),
    _t("microservice", WEB_BACKEND, "microservices", "service"),
    # Headless CMS
    _t("cms", WEB_BACKEND, "headless-cms"),
    _t("strapi", WEB_BACKEND),
    _t("sanity", WEB_BACKEND),
    _t("contentful", WEB_BACKEND),
    # Fullstack
    _t("fullstack", FULL, "full-stack", "fullstack-app"),
    _t("nextjs", FULL, "next", "next.js"),
    _t("remix", FULL),
    _t("t3", FULL, "t3-stack", "create-t3-app"),
    _t("mern", FULL),
    _t("mean", FULL),
    _t("lamp", FULL),
    _t("django", FULL),
    _t("rails", FULL, "ruby-on-rails", "ror"),
    _t("laravel", FULL),
    _t("wordpress", FULL, "wp"),
    # Monorepos
    _t("monorepo", FULL, "mono", "workspace", "multi-package"),
    _t("turborepo", FULL, "turbo"),
    _t("nx", FULL, "nx-workspace"),
    _t("lerna", FULL),
    _t("pnpm-workspace", FULL, "pnpm-monorepo"),
    _t("yarn-workspace", FULL, "yarn-workspaces"),
    # Documentation sites
    _t("documentation", GENERAL, "docs", "doc-site"),
    _t("docusaurus", GENERAL),
    _t("mkdocs", GENERAL),
    _t("vitepress", GENERAL),
    # Fallback
    _t(GENERIC_TYPE, GENERAL, "other", "unspecified"),
)

_SEPARATORS = re.compile(r"[\s_]+")


def normalize_type_name(raw: str) -> str:
    """Lower-case, trim and hyphenate a raw type string.

    ``"  CLI  "`` -> ``"cli"``; ``"Backend API"`` -> ``"backend-api"``;
    ``"pip_package"`` -> ``"pip-package"``.
    """
    return _SEPARATORS.sub("-", raw.strip().lower()).strip("-")


def _build_indexes(
    definitions: tuple[TypeDefinition, ...],
) -> tuple[Mapping[str, TypeDefinition], Mapping[str, str]]:
    canonical: dict[str, TypeDefinition] = {}
    for definition in definitions:
        name = definition.canonical_name
        if normalize_type_name(name) != name:
            raise ConfigurationError(
                f"Canonical type '{name}' is not in normalized form"
            )
        if name in canonical:
            raise ConfigurationError(
                f"Duplicate canonical type '{name}'"
            )
        canonical[name] = definition

    aliases: dict[str, str] = {}
    for definition in definitions:
        for alias in definition.aliases:
            key = normalize_type_name(alias)
            if key in canonical:
                raise ConfigurationError(
                    f"Alias '{alias}' shadows canonical type '{key}'"
                )
            owner = aliases.get(key)
            if owner is not None and owner != definition.canonical_name:
                raise ConfigurationError(
                    f"Alias '{alias}' maps to both '{owner}' "
                    f"and '{definition.canonical_name}'"
                )
            aliases[key] = definition.canonical_name

    return MappingProxyType(canonical), MappingProxyType(aliases)


class TypeTable:
    """Immutable lookup over a tuple of ``TypeDefinition`` entries."""

    def __init__(
        self,
        definitions: tuple[TypeDefinition, ...] = TYPE_DEFINITIONS,
    ) -> None:
        self._canonical, self._aliases = _build_indexes(definitions)
        if GENERIC_TYPE not in self._canonical:
            raise ConfigurationError(
                f"Type table must define '{GENERIC_TYPE}'"
            )

    def __contains__(self, name: object) -> bool:
        return name in self._canonical

    def __len__(self) -> int:
        return len(self._canonical)

    def get(self, canonical_name: str) -> TypeDefinition | None:
        return self._canonical.get(canonical_name)

    def lookup_alias(self, normalized: str) -> TypeDefinition | None:
        target = self._aliases.get(normalized)
        if target is None:
            return None
        return self._canonical[target]

    @property
    def generic(self) -> TypeDefinition:
        return self._canonical[GENERIC_TYPE]


DEFAULT_TYPE_TABLE = TypeTable()
