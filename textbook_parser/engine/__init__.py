"""Python-Markdown integration for the textbook dialect.

:func:`render_markdown` builds a fresh ``markdown.Markdown`` instance with the
``tables`` and ``sane_lists`` extensions plus :class:`TextbookExtension`, whose
hooks all write into the :class:`~textbook_parser.context.CompileContext`
passed in. Nothing is shared between calls.

Examples
--------
>>> from textbook_parser.context import CompileContext
>>> from textbook_parser.engine import render_markdown
>>> context = CompileContext(doc_id="demo")
>>> render_markdown("See [light](gloss:photon).", context)
'<p>See <x-gloss xid="photon">light</x-gloss>.</p>'
>>> sorted(context.glossary)
['photon']
"""

from __future__ import annotations

import typing as typ

from markdown import Markdown

from .extension import TextbookExtension

if typ.TYPE_CHECKING:
    from textbook_parser.context import CompileContext


def render_markdown(
    text: str, context: CompileContext, *, step_breaks: bool = True
) -> str:
    """Render textbook Markdown into HTML.

    Parameters
    ----------
    text : str
        Source after directive expansion.
    context : CompileContext
        Per-call state receiving steps, metadata, cross-references, and
        equation placeholders.
    step_breaks : bool, optional
        Split steps on top-level horizontal rules and capture the title.

    Returns
    -------
    str
        Rendered markup. With ``step_breaks`` enabled, step boundaries appear
        as ``</x-step><x-step>`` so the caller can wrap the whole result in a
        single ``<x-step>`` element.
    """
    md = Markdown(
        extensions=[
            "tables",
            "sane_lists",
            TextbookExtension(context, step_breaks=step_breaks),
        ]
    )
    return md.convert(text)


__all__ = ["TextbookExtension", "render_markdown"]
