"""Exception types raised at the edges of the scoring core.

The compiler itself never raises for malformed documents; problems with
document content become diagnostics. These exceptions cover the cases
that are the caller's fault or that happen before a document exists.
"""

from __future__ import annotations


class ContextScoreError(Exception):
    """Base class for all contextscore exceptions."""


class DocumentTypeError(ContextScoreError, TypeError):
    """A non-mapping value was passed where a document was required."""


class DocumentLoadError(ContextScoreError):
    """A context file could not be read or parsed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ConfigurationError(ContextScoreError, ValueError):
    """A static table or injected configuration is inconsistent."""
