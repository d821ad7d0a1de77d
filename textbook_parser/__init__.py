"""Compile Mathigon-style extended Markdown chapters into interactive markup.

This package turns one chapter source into a document model (title,
sections, steps, goals, duration estimates) plus minified HTML per step and
per section, and exposes the ``textbook`` console command.

Exports
-------
- ``compile_document``: Async compile of one chapter.
- ``compile_document_sync``: Blocking wrapper around ``compile_document``.
- ``compile_fragment``: Compile a short snippet such as a glossary entry.
- ``CompilerConfig``: Build settings shared by compile calls.
- ``CompiledDocument``, ``Document``, ``Section``, ``Step``: Result models.
- ``CompileError`` and its subclasses: Structural compile failures.
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from textbook_parser import compile_document_sync
>>> compile_document_sync("demo", "# Demo\\n\\nHi").document.title
'Demo'
>>> from textbook_parser import app
>>> app.name[0]
'textbook'
"""

from __future__ import annotations

from .cli import app, main
from .compiler import compile_document, compile_document_sync, compile_fragment
from .config import CompilerConfig
from .errors import CompileError, DirectiveError, IdentifierError, TemplateBlockError
from .models import CompiledDocument, Document, Section, Step

__all__ = [
    "CompileError",
    "CompiledDocument",
    "CompilerConfig",
    "Document",
    "DirectiveError",
    "IdentifierError",
    "Section",
    "Step",
    "TemplateBlockError",
    "app",
    "compile_document",
    "compile_document_sync",
    "compile_fragment",
    "main",
]
