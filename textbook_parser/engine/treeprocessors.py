"""Tree processors that adapt Python-Markdown output to the textbook dialect.

They run after Python-Markdown's own inline processor (priority 20) and
before prettifying, in this order:

``textbook_links`` (19)
    Classify every ``<a>`` into a widget and record cross-references.
``textbook_code_spans`` (18)
    Give ``{py}``-style tagged code spans their language class and turn every
    other code span into an inline equation inside ``<span class="math">``.
``textbook_headings`` (17)
    Turn the first ``#`` heading into the document title marker, drop the
    others, and shift deeper headings up one level.
``textbook_inline`` (15)
    Run the ordered inline stages over paragraphs, list items, and table
    cells, replacing each element with its rewritten markup.
"""

from __future__ import annotations

import html
import re
import typing as typ

from markdown import util
from markdown.treeprocessors import Treeprocessor

from textbook_parser._constants import TITLE_MARKER_TAG
from textbook_parser.inline import apply_inline_extensions
from textbook_parser.links import classify_link

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from textbook_parser.context import CompileContext

CODE_TAG_PATTERN = re.compile(r"^\{([\w-]+)\}")
MATH_SPAN_CLASS = "math"
HEADING_PATTERN = re.compile(r"^h([1-6])$")
INLINE_TAGS = frozenset({"p", "li", "td", "th"})


def _parent_map(root: Element) -> dict[Element, Element]:
    return {child: parent for parent in root.iter() for child in parent}


def _detach(parent: Element, element: Element, replacement: str = "") -> None:
    """Remove ``element`` from ``parent`` keeping ``replacement`` and its tail."""
    text = replacement + (element.tail or "")
    index = list(parent).index(element)
    if text:
        if index:
            previous = parent[index - 1]
            previous.tail = (previous.tail or "") + text
        else:
            parent.text = (parent.text or "") + text
    parent.remove(element)


class LinkTreeprocessor(Treeprocessor):
    """Rewrite links into textbook widgets and collect cross-references."""

    def __init__(self, md: Markdown, context: CompileContext) -> None:
        super().__init__(md)
        self.context = context

    def run(self, root: Element) -> None:
        """Classify every anchor produced by Markdown."""
        for element in list(root.iter("a")):
            target = classify_link(element.get("href", ""), element.get("title"))
            element.tag = target.tag
            element.attrib.clear()
            element.attrib.update(target.attributes)
            if target.glossary_id is not None:
                self.context.glossary.add(target.glossary_id)
            if target.bio_id is not None:
                self.context.bios.add(target.bio_id)


class CodeSpanTreeprocessor(Treeprocessor):
    """Render inline code spans as tagged code or as inline maths.

    A span starting with a known ``{tag}`` keeps its ``<code>`` element and
    gains the language class. Any other span becomes ``<span class="math">``
    holding an inline equation placeholder, so it is rendered by the same
    equation renderer as ``$...$`` and stays empty when rendering fails.
    """

    def __init__(self, md: Markdown, context: CompileContext) -> None:
        super().__init__(md)
        self.context = context

    def run(self, root: Element) -> None:
        """Rewrite every inline ``<code>`` element outside ``<pre>``."""
        languages = self.context.config.code_languages
        parents = _parent_map(root)
        for code in list(root.iter("code")):
            parent = parents.get(code)
            if parent is not None and parent.tag == "pre":
                continue
            text = code.text or ""
            match = CODE_TAG_PATTERN.match(text)
            if match is not None and match.group(1) in languages:
                code.set("class", languages[match.group(1)])
                code.text = util.AtomicString(text[match.end() :].strip())
                continue
            expression = html.unescape(text).strip()
            token = self.context.equations.placeholder(expression, inline=True)
            code.tag = "span"
            code.attrib.clear()
            code.set("class", MATH_SPAN_CLASS)
            code.text = util.AtomicString(token)


class HeadingTreeprocessor(Treeprocessor):
    """Capture the title heading and shift the remaining headings up a level."""

    def __init__(self, md: Markdown, *, capture_title: bool) -> None:
        super().__init__(md)
        self.capture_title = capture_title

    def run(self, root: Element) -> None:
        """Rewrite heading elements in document order."""
        parents = _parent_map(root)
        title_seen = False
        for heading in list(root.iter()):
            match = HEADING_PATTERN.match(str(heading.tag))
            if match is None:
                continue
            level = int(match.group(1))
            if level > 1:
                heading.tag = f"h{level - 1}"
            elif self.capture_title and not title_seen:
                heading.tag = TITLE_MARKER_TAG
                heading.attrib.clear()
                title_seen = True
            else:
                _detach(parents[heading], heading)


class InlineExtensionTreeprocessor(Treeprocessor):
    """Apply the ordered inline stages to paragraph-like elements.

    Elements are visited children first from a worklist collected up front.
    Each one is serialized, rewritten, stashed as raw HTML, and replaced in
    its parent by the stash placeholder, so parents see the rewritten markup
    of their children as opaque text.
    """

    def __init__(self, md: Markdown, context: CompileContext) -> None:
        super().__init__(md)
        self.context = context

    def run(self, root: Element) -> None:
        """Rewrite every ``p``, ``li``, ``td`` and ``th`` element."""
        parents = _parent_map(root)
        worklist = [element for element in root.iter() if element.tag in INLINE_TAGS]
        emoji_image = self.context.config.emoji_image
        for element in reversed(worklist):
            parent = parents.get(element)
            if parent is None:
                continue
            tail = element.tail
            element.tail = None
            markup = apply_inline_extensions(
                self.md.serializer(element), emoji_image=emoji_image
            )
            element.tail = tail
            _detach(parent, element, self.md.htmlStash.store(markup))


__all__ = [
    "CodeSpanTreeprocessor",
    "HeadingTreeprocessor",
    "InlineExtensionTreeprocessor",
    "LinkTreeprocessor",
]
