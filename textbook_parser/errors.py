"""Exceptions raised while compiling textbook chapters.

Structural problems abort the compile of a single document and surface as a
:class:`CompileError` subclass carrying the offending identifier or source
snippet. Recoverable problems (an attribute shorthand that does not render, an
equation the notation renderer rejects) never reach the caller; they are logged
where they are detected and the affected node is left alone.
"""

from __future__ import annotations


class CompileError(RuntimeError):
    """Raised when a document cannot be compiled.

    Parameters
    ----------
    message : str
        Human readable description of the failure.
    snippet : str, optional
        The identifier or source fragment that caused the failure.
    """

    def __init__(self, message: str, *, snippet: str | None = None) -> None:
        super().__init__(message)
        self.snippet = snippet


class DirectiveError(CompileError):
    """Raised when a ``:::`` block directive is malformed or unbalanced."""


class IdentifierError(CompileError):
    """Raised when a step or section id is reserved, malformed, or duplicated."""


class TemplateBlockError(CompileError):
    """Raised when an embedded template block fails to render."""


__all__ = [
    "CompileError",
    "DirectiveError",
    "IdentifierError",
    "TemplateBlockError",
]
