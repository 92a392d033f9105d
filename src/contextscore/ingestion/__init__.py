"""Context file ingestion — locate, parse and score ``.faf`` documents."""

from contextscore.ingestion.loader import (
    compile_file,
    find_context_file,
    load_document,
    parse_document,
)

__all__ = [
    "compile_file",
    "find_context_file",
    "load_document",
    "parse_document",
]
