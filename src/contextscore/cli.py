"""CLI entry point — ``contextscore score|check|validate|status``."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pydantic import ValidationError

from contextscore import __version__
from contextscore.config import Settings
from contextscore.constants import Severity
from contextscore.ingestion.loader import compile_file, find_context_file
from contextscore.logging_config import set_level, setup_logging
from contextscore.scoring.grading import GradeTable
from contextscore.scoring.schemas import ScoringResult


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"contextscore {__version__}")
        return 0

    try:
        settings = Settings()
    except ValidationError as exc:
        print(f"Error: invalid configuration\n{exc}", file=sys.stderr)
        return 2
    setup_logging(settings.log_level)
    if getattr(args, "verbose", False):
        set_level("DEBUG")

    handlers = {
        "score": _run_score,
        "check": _run_check,
        "validate": _run_validate,
        "status": _run_status,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 0

    path = _resolve_path(Path(args.path))
    if path is None:
        print(
            f"Error: no context file found at {args.path}",
            file=sys.stderr,
        )
        return 2

    result = compile_file(path, args.type, settings=settings)
    return handler(args, result, settings)


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="contextscore",
        description=(
            "Score how completely a project context file "
            "briefs an AI assistant."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    def add_common(cmd: argparse.ArgumentParser) -> None:
        cmd.add_argument(
            "path",
            nargs="?",
            default=".",
            help="Context file or directory containing one (default: .)",
        )
        cmd.add_argument(
            "--type",
            "-t",
            default=None,
            help="Project type override (default: project.type)",
        )
        cmd.add_argument(
            "--verbose",
            "-v",
            action="store_true",
            help="Enable debug logging",
        )

    score = sub.add_parser("score", help="Score a context file")
    add_common(score)
    score.add_argument(
        "--json",
        action="store_true",
        help="Print the full result as JSON",
    )

    check = sub.add_parser(
        "check",
        help="Exit non-zero when the score is below a threshold",
    )
    add_common(check)
    check.add_argument(
        "--min-score",
        type=int,
        default=85,
        help="Minimum passing score (default: 85)",
    )

    validate = sub.add_parser(
        "validate",
        help="Exit non-zero when the file has error diagnostics",
    )
    add_common(validate)

    status = sub.add_parser("status", help="One-line score summary")
    add_common(status)

    return parser


def _resolve_path(path: Path) -> Path | None:
    if path.is_dir():
        return find_context_file(path)
    return path if path.exists() else None


def _run_score(
    args: argparse.Namespace, result: ScoringResult, settings: Settings
) -> int:
    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
        return 0

    print(
        f"Score: {result.score}% ({result.filled}/{result.total} slots) "
        f"[{result.grade}]"
    )
    print(f"Type: {result.canonical_type}")
    print(f"Checksum: {result.checksum}")
    if result.missing_slots:
        print("Missing:")
        for path in result.missing_slots:
            print(f"  - {path}")
    _print_diagnostics(result)
    return 0


def _run_check(
    args: argparse.Namespace, result: ScoringResult, settings: Settings
) -> int:
    passed = result.score >= args.min_score
    status = "PASS" if passed else "FAIL"
    print(
        f"[{status}] {result.score}% "
        f"(minimum {args.min_score}%, type {result.canonical_type})"
    )
    return 0 if passed else 1


def _run_validate(
    args: argparse.Namespace, result: ScoringResult, settings: Settings
) -> int:
    errors = result.diagnostics_by_severity(Severity.ERROR)
    warnings = result.diagnostics_by_severity(Severity.WARNING)
    _print_diagnostics(result)
    if errors:
        print(
            f"Invalid: {len(errors)} errors, {len(warnings)} warnings",
            file=sys.stderr,
        )
        return 1
    print(f"Valid ({len(warnings)} warnings)")
    return 0


def _run_status(
    args: argparse.Namespace, result: ScoringResult, settings: Settings
) -> int:
    print(_status_line(result, settings.grade_table()))
    return 0


def _status_line(result: ScoringResult, grades: GradeTable) -> str:
    line = (
        f"{result.score}% {result.grade} "
        f"({result.filled}/{result.total}, {result.canonical_type})"
    )
    target = grades.next_target(result.score)
    if target is not None:
        line += f"; next: {target.label} at {target.threshold}%"
    return line


def _print_diagnostics(result: ScoringResult) -> None:
    for d in result.diagnostics:
        location = f" {d.path}:" if d.path else ""
        print(f"  {d.severity.upper()}{location} {d.message}")


if __name__ == "__main__":
    sys.exit(main())
