"""Compile textbook Markdown into a document model and step markup.

This module wires the stages together. One call of :func:`compile_document`
runs, in order:

1. source rewrites (asset paths, ``data-*`` attributes, header-less tables);
2. ``:::`` block directive expansion;
3. Python-Markdown with the textbook extension, which records steps,
   metadata, cross-references, and equation placeholders in a fresh
   :class:`~textbook_parser.context.CompileContext`;
4. equation placeholder resolution, awaiting the renderer once per token;
5. attribute shorthand injection on the parsed tree;
6. re-parsing of ``.md`` elements as Markdown, resolving their equations;
7. DOM clean-ups; and
8. segmentation into steps and sections with goals and durations.

Examples
--------
>>> from textbook_parser import compile_document_sync
>>> result = compile_document_sync("intro", "# Circles\\n\\nHello [[world]].")
>>> result.document.title
'Circles'
>>> result.document.steps[0].goals
['blank-0']
"""

from __future__ import annotations

import asyncio
import logging
import re
import typing as typ

from bs4 import BeautifulSoup

from ._constants import STEP_TAG
from .attributes import inject_attributes
from .cleanup import clean_up
from .config import CompilerConfig
from .context import CompileContext
from .directives import expand_block_directives
from .engine import render_markdown
from .equations import (
    CachedEquationRenderer,
    EquationCache,
    EquationRenderer,
    MathMLRenderer,
    resolve_equations,
)
from .minify import minify_markup
from .segmenter import segment_document
from .sources import prepare_source
from .templating import TemplateRenderer

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .models import CompiledDocument

logger = logging.getLogger(__name__)

MARKDOWN_CLASS = "md"
PARAGRAPH_WRAPPER_PATTERN = re.compile(r"^<p>|</p>$")


def build_equation_renderer(config: CompilerConfig) -> EquationRenderer:
    """Return the default renderer, cached on disk when configured."""
    renderer = MathMLRenderer()
    if config.equation_cache is None:
        return renderer
    return CachedEquationRenderer(renderer, EquationCache(config.equation_cache))


async def _expand_markdown_elements(
    soup: BeautifulSoup, context: CompileContext, renderer: EquationRenderer
) -> int:
    """Re-parse the contents of ``.md`` elements as Markdown."""
    expanded = 0
    while True:
        element = soup.select_one(f".{MARKDOWN_CLASS}")
        if element is None:
            return expanded
        classes = [name for name in element.get("class", []) if name != MARKDOWN_CLASS]
        if classes:
            element["class"] = classes
        else:
            del element["class"]
        markup = render_markdown(element.decode_contents(), context, step_breaks=False)
        markup = PARAGRAPH_WRAPPER_PATTERN.sub("", markup)
        markup = await resolve_equations(
            markup, context.equations, renderer, label=context.doc_id
        )
        element.clear()
        fragment = BeautifulSoup(markup, "html.parser")
        for child in list(fragment.contents):
            element.append(child.extract())
        expanded += 1


async def compile_document(
    doc_id: str,
    source: str,
    base_dir: Path | None = None,
    *,
    config: CompilerConfig | None = None,
    equation_renderer: EquationRenderer | None = None,
) -> CompiledDocument:
    """Compile one chapter.

    Parameters
    ----------
    doc_id : str
        Document identifier; relative ``images/`` paths are rewritten into
        this document's resource namespace.
    source : str
        Raw chapter source.
    base_dir : Path, optional
        Directory used to resolve ``{% include %}`` in template blocks.
    config : CompilerConfig, optional
        Build settings; defaults are used when omitted.
    equation_renderer : EquationRenderer, optional
        Renderer for equation placeholders. When omitted a
        :class:`~textbook_parser.equations.MathMLRenderer` is used, backed by
        the configured equation cache, which is saved before returning.

    Returns
    -------
    CompiledDocument
        The document model, step and section markup, and the glossary and
        biography ids referenced by the chapter.

    Raises
    ------
    DirectiveError
        If a ``:::`` directive is malformed or unbalanced.
    TemplateBlockError
        If an indented template block fails to render.
    IdentifierError
        If a step or section id is invalid or duplicated.
    """
    config = config or CompilerConfig()
    renderer = equation_renderer or build_equation_renderer(config)
    context = CompileContext(
        doc_id=doc_id, config=config, templates=TemplateRenderer(base_dir)
    )
    logger.debug("Compiling document %s", doc_id)

    text = prepare_source(source, doc_id, config)
    text = expand_block_directives(text, context.templates)
    body = render_markdown(text, context)
    html = await resolve_equations(
        f"<{STEP_TAG}>{body}</{STEP_TAG}>", context.equations, renderer, label=doc_id
    )

    soup = BeautifulSoup(html, "html.parser")
    inject_attributes(soup, context.templates)
    await _expand_markdown_elements(soup, context, renderer)
    clean_up(soup)
    compiled = segment_document(soup, context)

    if equation_renderer is None and isinstance(renderer, CachedEquationRenderer):
        renderer.cache.save()
    logger.debug(
        "Compiled %s: %d step(s), %d section(s), %d goal(s)",
        doc_id,
        len(compiled.document.steps),
        len(compiled.document.sections),
        compiled.document.total_goals,
    )
    return compiled


def compile_document_sync(
    doc_id: str,
    source: str,
    base_dir: Path | None = None,
    *,
    config: CompilerConfig | None = None,
    equation_renderer: EquationRenderer | None = None,
) -> CompiledDocument:
    """Run :func:`compile_document` to completion on a new event loop."""
    return asyncio.run(
        compile_document(
            doc_id,
            source,
            base_dir,
            config=config,
            equation_renderer=equation_renderer,
        )
    )


async def compile_fragment(
    text: str,
    *,
    base_dir: Path | None = None,
    config: CompilerConfig | None = None,
    equation_renderer: EquationRenderer | None = None,
) -> str:
    """Compile a short Markdown snippet, such as a glossary entry, to markup.

    Fragments have no steps or title; horizontal rules stay ``<hr>`` elements
    and level-one headings are dropped. Attribute shorthand is applied and
    the result is minified.
    """
    config = config or CompilerConfig()
    renderer = equation_renderer or build_equation_renderer(config)
    context = CompileContext(config=config, templates=TemplateRenderer(base_dir))
    html = render_markdown(text, context, step_breaks=False)
    html = await resolve_equations(html, context.equations, renderer)
    soup = BeautifulSoup(html, "html.parser")
    inject_attributes(soup, context.templates)
    markup = minify_markup(soup)
    if equation_renderer is None and isinstance(renderer, CachedEquationRenderer):
        renderer.cache.save()
    return markup


__all__ = [
    "build_equation_renderer",
    "compile_document",
    "compile_document_sync",
    "compile_fragment",
]
