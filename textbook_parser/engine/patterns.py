"""Inline patterns registered with Python-Markdown."""

from __future__ import annotations

import typing as typ

from markdown import util
from markdown.inlinepatterns import InlineProcessor

from textbook_parser.inline import EQUATION_PATTERN

if typ.TYPE_CHECKING:
    import re

    from markdown import Markdown

    from textbook_parser.context import CompileContext


class EquationSpanProcessor(InlineProcessor):
    """Replace ``$...$`` spans with inline equation placeholders.

    Registered between code spans and backslash escapes so TeX inside a span
    reaches the renderer exactly as written, while ``$`` inside code spans is
    left alone.
    """

    def __init__(self, md: Markdown, context: CompileContext) -> None:
        super().__init__(EQUATION_PATTERN, md)
        self.context = context

    def handleMatch(  # type: ignore[override]  # noqa: N802
        self, m: re.Match[str], data: str
    ) -> tuple[str, int, int]:
        """Issue a placeholder for the matched expression."""
        token = self.context.equations.placeholder(m.group(1), inline=True)
        return util.AtomicString(token), m.start(0), m.end(0)


__all__ = ["EquationSpanProcessor"]
