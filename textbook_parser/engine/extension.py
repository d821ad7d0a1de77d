"""Python-Markdown extension bundling the textbook dialect hooks."""

from __future__ import annotations

import typing as typ

from markdown.extensions import Extension

from .blocks import (
    MetadataBlockProcessor,
    RawHtmlBlockProcessor,
    StepBreakProcessor,
    TemplateBlockProcessor,
)
from .patterns import EquationSpanProcessor
from .preprocessors import FencedCodePreprocessor, RawHtmlLinePreprocessor
from .treeprocessors import (
    CodeSpanTreeprocessor,
    HeadingTreeprocessor,
    InlineExtensionTreeprocessor,
    LinkTreeprocessor,
)

if typ.TYPE_CHECKING:
    from markdown import Markdown

    from textbook_parser.context import CompileContext


class TextbookExtension(Extension):
    """Register every textbook hook on a ``markdown.Markdown`` instance.

    The extension closes over a single :class:`CompileContext`, so build a new
    one (and a new ``Markdown`` instance) for each compile call.

    Parameters
    ----------
    context : CompileContext
        State of the compile call the hooks write into.
    step_breaks : bool, optional
        Treat top-level horizontal rules as step boundaries and capture the
        title heading. Disabled for fragments and nested re-parses.
    """

    def __init__(self, context: CompileContext, *, step_breaks: bool = True) -> None:
        self.context = context
        self.step_breaks = step_breaks

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Replace the stock HTML, code, quote, and rule handling."""
        context = self.context
        md.preprocessors.deregister("html_block")
        md.preprocessors.register(
            FencedCodePreprocessor(md, context), "textbook_fenced_code", 25
        )
        md.preprocessors.register(RawHtmlLinePreprocessor(md), "textbook_raw_html", 20)

        parser = md.parser
        parser.blockprocessors.register(
            RawHtmlBlockProcessor(parser), "textbook_raw_html", 95
        )
        parser.blockprocessors.register(
            TemplateBlockProcessor(parser, context), "code", 80
        )
        parser.blockprocessors.register(
            MetadataBlockProcessor(parser, context), "quote", 20
        )
        if self.step_breaks:
            parser.blockprocessors.register(
                StepBreakProcessor(parser, context), "hr", 50
            )

        md.inlinePatterns.register(
            EquationSpanProcessor(md, context), "textbook_equation", 185
        )

        md.treeprocessors.register(
            LinkTreeprocessor(md, context), "textbook_links", 19
        )
        md.treeprocessors.register(
            CodeSpanTreeprocessor(md, context), "textbook_code_spans", 18
        )
        md.treeprocessors.register(
            HeadingTreeprocessor(md, capture_title=self.step_breaks),
            "textbook_headings",
            17,
        )
        md.treeprocessors.register(
            InlineExtensionTreeprocessor(md, context), "textbook_inline", 15
        )


__all__ = ["TextbookExtension"]
