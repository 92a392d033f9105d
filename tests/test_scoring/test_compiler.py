"""End-to-end tests for compile_score."""

from __future__ import annotations

import copy
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import pytest

from contextscore.constants import DiagnosticCode, Severity
from contextscore.errors import DocumentTypeError
from contextscore.ingestion import parse_document
from contextscore.scoring import GradeTable, ScoringResult, compile_score
from contextscore.scoring.schemas import ScoringLimits
from tests.conftest import FULL_STACK, HUMAN_CONTEXT, make_doc


def _codes(result: ScoringResult) -> list[str]:
    return [d.code for d in result.diagnostics]


class TestSlotCounts:
    def test_cli_scores_nine_slots(self, cli_doc: dict[str, Any]) -> None:
        result = compile_score(cli_doc)
        assert (result.filled, result.total, result.score) == (9, 9, 100)
        assert result.canonical_type == "cli"
        assert result.grade == "trophy"

    def test_cli_ignores_stack_values(self, cli_doc: dict[str, Any]) -> None:
        cli_doc["stack"] = {"frontend": "React"}
        assert compile_score(cli_doc).total == 9

    def test_empty_fullstack(self) -> None:
        result = compile_score({"project": {"type": "fullstack"}})
        assert (result.filled, result.total, result.score) == (0, 21, 0)
        assert result.grade == "standard"

    def test_complete_fullstack(self, complete_doc: dict[str, Any]) -> None:
        result = compile_score(complete_doc)
        assert (result.filled, result.total, result.score) == (21, 21, 100)
        assert result.missing_slots == []

    def test_backend_api(self) -> None:
        doc = make_doc("backend-api", human=True, stack=True)
        result = compile_score(doc)
        assert (result.filled, result.total) == (17, 17)

    def test_partial_document(self) -> None:
        doc = make_doc("cli", human=False)
        result = compile_score(doc)
        assert (result.filled, result.total, result.score) == (3, 9, 33)
        assert result.grade == "standard"


@pytest.mark.parametrize(
    ("project_type", "total"),
    [
        ("cli", 9),
        ("library", 9),
        ("npm-package", 9),
        ("chrome-extension", 9),
        ("terraform", 9),
        ("embedded", 9),
        ("mobile", 13),
        ("flutter", 13),
        ("desktop", 13),
        ("game", 13),
        ("mcp-server", 14),
        ("data-pipeline", 14),
        ("ml-model", 14),
        ("frontend", 16),
        ("react", 16),
        ("svelte", 16),
        ("backend-api", 17),
        ("node-api", 17),
        ("graphql", 17),
        ("fullstack", 21),
        ("nextjs", 21),
        ("django", 21),
        ("monorepo", 21),
        ("turborepo", 21),
        ("generic", 12),
        ("documentation", 12),
    ],
)
def test_type_determines_total(project_type: str, total: int) -> None:
    doc = make_doc(project_type, human=True, stack=True)
    result = compile_score(doc)
    assert result.total == total
    assert result.filled == total
    assert result.score == 100


@pytest.mark.parametrize(
    ("alias", "canonical"),
    [("cli-tool", "cli"), ("next", "nextjs"), ("k8s", "kubernetes")],
)
def test_alias_scores_like_canonical(alias: str, canonical: str) -> None:
    via_alias = compile_score(make_doc(alias, human=True, stack=True))
    direct = compile_score(make_doc(canonical, human=True, stack=True))
    assert via_alias.canonical_type == canonical
    assert via_alias.total == direct.total
    assert via_alias.checksum == direct.checksum


class TestSlotIgnore:
    def test_list_removes_slots(self, complete_doc: dict[str, Any]) -> None:
        complete_doc["slot_ignore"] = ["hosting", "cicd"]
        result = compile_score(complete_doc)
        assert (result.filled, result.total, result.score) == (19, 19, 100)
        assert result.ignored_slots == ["stack.cicd", "stack.hosting"]

    def test_three_slots(self, complete_doc: dict[str, Any]) -> None:
        complete_doc["slot_ignore"] = ["hosting", "cicd", "database"]
        assert compile_score(complete_doc).total == 18

    def test_comma_string(self, complete_doc: dict[str, Any]) -> None:
        complete_doc["slot_ignore"] = "hosting, cicd"
        assert compile_score(complete_doc).total == 19

    def test_dotted_paths(self, complete_doc: dict[str, Any]) -> None:
        complete_doc["slot_ignore"] = ["stack.hosting", "stack.cicd"]
        assert compile_score(complete_doc).total == 19

    @pytest.mark.parametrize("key", ["slotIgnore", "ignore_slots"])
    def test_alternate_keys(
        self, complete_doc: dict[str, Any], key: str
    ) -> None:
        complete_doc[key] = ["hosting", "cicd"]
        result = compile_score(complete_doc)
        assert result.total == 19
        assert DiagnosticCode.DEPRECATED_IGNORE_KEY in _codes(result)

    def test_duplicates_are_idempotent(
        self, complete_doc: dict[str, Any]
    ) -> None:
        complete_doc["slot_ignore"] = ["hosting", "hosting", "stack.hosting"]
        assert compile_score(complete_doc).total == 20

    def test_frontend_minus_two(self) -> None:
        doc = make_doc(
            "frontend",
            human=True,
            stack=True,
            slot_ignore=["hosting", "cicd"],
        )
        result = compile_score(doc)
        assert (result.total, result.score) == (14, 100)

    def test_cli_ignore_human_slots(self, cli_doc: dict[str, Any]) -> None:
        cli_doc["slot_ignore"] = ["where", "when"]
        result = compile_score(cli_doc)
        assert (result.filled, result.total, result.score) == (7, 7, 100)

    def test_monorepo_without_frontend(self) -> None:
        doc = make_doc(
            "monorepo",
            human=True,
            stack=True,
            slot_ignore=[
                "frontend",
                "css_framework",
                "ui_library",
                "state_management",
            ],
        )
        assert compile_score(doc).total == 17

    def test_ignored_slot_never_counts_as_missing(self) -> None:
        doc = make_doc("fullstack", human=True, slot_ignore="category:frontend")
        result = compile_score(doc)
        assert result.total == 17
        assert "stack.css_framework" in result.ignored_slots
        assert "stack.css_framework" not in result.missing_slots
        assert "stack.css_framework" not in result.scored_slots

    def test_inline_marker(self, complete_doc: dict[str, Any]) -> None:
        complete_doc["stack"]["database"] = "slotignored"
        result = compile_score(complete_doc)
        assert (result.total, result.score) == (20, 100)
        assert "stack.database" in result.ignored_slots

    def test_ignore_everything_scores_full(
        self, cli_doc: dict[str, Any]
    ) -> None:
        cli_doc["slot_ignore"] = "category:project, category:human"
        result = compile_score(cli_doc)
        assert (result.filled, result.total, result.score) == (0, 0, 100)


class TestTypeResolution:
    def test_unknown_type_falls_back_to_generic(self) -> None:
        result = compile_score(
            make_doc("quantum-computing-framework", human=True)
        )
        assert result.canonical_type == "generic"
        assert result.total == 12
        assert result.score == 75
        by_code = {d.code: d.severity for d in result.diagnostics}
        assert by_code[DiagnosticCode.UNKNOWN_TYPE] == Severity.WARNING
        assert by_code[DiagnosticCode.TYPE_FALLBACK] == Severity.INFO

    @pytest.mark.parametrize("raw", ["CLI", "  cli  ", "Cli"])
    def test_case_and_whitespace(self, raw: str) -> None:
        assert compile_score(make_doc(raw, human=True)).total == 9

    def test_missing_type_is_inferred(self) -> None:
        doc = make_doc(goal="A CLI for deploying things", human=True)
        result = compile_score(doc)
        assert result.canonical_type == "cli"
        assert DiagnosticCode.TYPE_INFERRED in _codes(result)

    def test_type_hint_overrides_document(
        self, complete_doc: dict[str, Any]
    ) -> None:
        result = compile_score(complete_doc, "cli")
        assert result.canonical_type == "cli"
        assert result.total == 9

    def test_blank_type_hint_is_ignored(
        self, complete_doc: dict[str, Any]
    ) -> None:
        assert compile_score(complete_doc, "  ").canonical_type == "fullstack"


class TestDeterminism:
    def test_repeated_runs_identical(
        self, complete_doc: dict[str, Any]
    ) -> None:
        complete_doc["slot_ignore"] = ["hosting"]
        first = compile_score(complete_doc)
        for _ in range(1000):
            again = compile_score(complete_doc)
            assert again.model_dump_json() == first.model_dump_json()

    def test_concurrent_runs_identical(
        self, complete_doc: dict[str, Any]
    ) -> None:
        docs = [copy.deepcopy(complete_doc) for _ in range(100)]
        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(pool.map(compile_score, docs))
        assert len({r.checksum for r in results}) == 1
        assert len({r.model_dump_json() for r in results}) == 1

    def test_near_limit_document_stable_under_contention(self) -> None:
        doc = make_doc("cli", human=True)
        doc["project"]["notes"] = ["x"] * 9000
        docs = [copy.deepcopy(doc) for _ in range(100)]
        with ThreadPoolExecutor(max_workers=100) as pool:
            results = list(pool.map(compile_score, docs))
        assert len({r.model_dump_json() for r in results}) == 1
        assert results[0].score == 100
        codes = _codes(results[0])
        assert DiagnosticCode.SIZE_BUDGET not in codes
        assert DiagnosticCode.FANOUT_LIMIT not in codes

    def test_key_order_does_not_matter(self) -> None:
        doc = make_doc("fullstack", human=True, stack=True)
        reordered = {k: doc[k] for k in reversed(list(doc))}
        reordered["stack"] = dict(reversed(list(FULL_STACK.items())))
        assert (
            compile_score(reordered).checksum == compile_score(doc).checksum
        )

    def test_input_is_not_mutated(self, complete_doc: dict[str, Any]) -> None:
        snapshot = copy.deepcopy(complete_doc)
        compile_score(complete_doc)
        assert complete_doc == snapshot


class TestHostileInput:
    def test_empty_document(self) -> None:
        result = compile_score({})
        assert result.canonical_type == "generic"
        assert (result.filled, result.total, result.score) == (0, 12, 0)

    def test_none_document(self) -> None:
        assert compile_score(None).total == 12

    def test_null_values(self) -> None:
        doc = {
            "project": {"type": "cli", "name": None, "goal": None},
            "human_context": {k: None for k in HUMAN_CONTEXT},
        }
        result = compile_score(doc)
        assert (result.filled, result.score) == (0, 0)

    def test_huge_values(self) -> None:
        doc = make_doc("cli", human=True)
        doc["project"]["name"] = "x" * (10 * 1024 * 1024)
        doc["comments"] = ["spam"] * 100_000
        result = compile_score(doc)
        assert result.score == 100
        codes = _codes(result)
        assert DiagnosticCode.STRING_TRUNCATED in codes
        assert DiagnosticCode.FANOUT_LIMIT in codes

    def test_deep_nesting(self) -> None:
        doc = make_doc("cli", human=True)
        node: dict[str, Any] = doc
        for _ in range(100):
            node["nested"] = {}
            node = node["nested"]
        result = compile_score(doc)
        assert result.score == 100
        assert DiagnosticCode.DEPTH_LIMIT in _codes(result)

    def test_reserved_keys(self) -> None:
        doc = make_doc("cli", human=True)
        doc["__proto__"] = {"isAdmin": True}
        doc["constructor"] = {"prototype": {"polluted": True}}
        result = compile_score(doc)
        assert result.score == 100
        assert result.has_errors()
        assert _codes(result).count(DiagnosticCode.RESERVED_KEY) == 3

    def test_self_reference(self) -> None:
        doc = make_doc("cli", human=True)
        doc["self"] = doc
        loop: list[Any] = []
        loop.append(loop)
        doc["loop"] = loop
        result = compile_score(doc)
        assert result.score == 100
        assert DiagnosticCode.CIRCULAR_REFERENCE in _codes(result)

    def test_claimed_score_is_ignored(self) -> None:
        doc = make_doc("fullstack", claimed_score=100, faf_score="100%")
        result = compile_score(doc)
        assert result.score == 14
        assert _codes(result).count(DiagnosticCode.EMBEDDED_SCORE_IGNORED) == 2

    def test_wrong_types_lower_score_without_raising(self) -> None:
        doc = {
            "project": {"type": "cli", "name": True, "goal": ["a"]},
            "human_context": "everyone",
        }
        result = compile_score(doc)
        assert result.filled == 0
        assert DiagnosticCode.WRONG_TYPE in _codes(result)

    @pytest.mark.parametrize("bad", ["project: cli", [1, 2], 42, 3.5])
    def test_non_mapping_raises(self, bad: Any) -> None:
        with pytest.raises(DocumentTypeError):
            compile_score(bad)

    @pytest.mark.parametrize(
        "doc",
        [
            {},
            {"project": "string"},
            {"stack": [1, 2, 3]},
            {"slot_ignore": 42},
            {"slot_ignore": ["category:project", "category:human"]},
            {"project": {"type": 7}},
            make_doc("fullstack", human=True, stack=True),
        ],
    )
    def test_bounds_hold(self, doc: dict[str, Any]) -> None:
        result = compile_score(doc)
        assert 0 <= result.score <= 100
        assert 0 <= result.filled <= result.total
        assert len(result.checksum) == 16


class TestOptions:
    def test_custom_grade_table(self, cli_doc: dict[str, Any]) -> None:
        grades = GradeTable([(100, "perfect")], baseline="incomplete")
        assert compile_score(cli_doc, grades=grades).grade == "perfect"
        del cli_doc["human_context"]
        assert compile_score(cli_doc, grades=grades).grade == "incomplete"

    def test_custom_limits(self, cli_doc: dict[str, Any]) -> None:
        limits = ScoringLimits(max_diagnostics=1)
        cli_doc["__proto__"] = 1
        cli_doc["constructor"] = 2
        result = compile_score(cli_doc, limits=limits)
        assert _codes(result)[-1] == DiagnosticCode.DIAGNOSTICS_SUPPRESSED


class TestDiagnosticCap:
    def test_type_diagnostics_survive_flood(self) -> None:
        doc = {
            "project": {"type": "quantum-computing-framework"},
            "junk": [{"__proto__": i} for i in range(250)],
        }
        result = compile_score(doc)
        codes = _codes(result)
        assert codes.count(DiagnosticCode.RESERVED_KEY) == 200
        assert DiagnosticCode.UNKNOWN_TYPE in codes
        assert DiagnosticCode.TYPE_FALLBACK in codes
        notice = result.diagnostics[-1]
        assert notice.code == DiagnosticCode.DIAGNOSTICS_SUPPRESSED
        assert "50 further" in notice.message


def _alias_bomb() -> str:
    lines = [
        "project:",
        "  name: bomb",
        "  goal: expand shared lists",
        "  main_language: Go",
        "  type: cli",
        "a: &a [" + ", ".join(["x"] * 9) + "]",
    ]
    previous = "a"
    for name in "bcdefghij":
        lines.append(
            f"{name}: &{name} [" + ", ".join([f"*{previous}"] * 9) + "]"
        )
        previous = name
    return "\n".join(lines) + "\n"


class TestSharedExpansion:
    def test_alias_bomb_is_bounded(self) -> None:
        doc = parse_document(_alias_bomb())
        result = compile_score(doc)
        assert DiagnosticCode.FANOUT_LIMIT in _codes(result)
        assert 0 <= result.score <= 100
        assert result.filled <= result.total
        assert result.canonical_type == "cli"
        assert result.filled == 3
