"""Block processors for raw HTML, template blocks, metadata, and step breaks."""

from __future__ import annotations

import logging
import re
import typing as typ

from markdown import util
from markdown.blockprocessors import (
    BlockProcessor,
    BlockQuoteProcessor,
    HRProcessor,
)
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from textbook_parser._constants import STEP_TAG

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown.blockparser import BlockParser

    from textbook_parser.context import CompileContext

logger = logging.getLogger(__name__)

RAW_BLOCK_PATTERN = re.compile(rf"(?:{util.HTML_PLACEHOLDER % '[0-9]+'}\s*)+")
STEP_BREAK_MARKUP = f"</{STEP_TAG}><{STEP_TAG}>"
HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})


def append_raw(parent: Element, placeholder: str) -> None:
    """Append a stash placeholder to ``parent`` outside of any paragraph.

    The placeholder is stored as atomic text so inline patterns skip it and
    the raw HTML postprocessor substitutes it without a ``<p>`` wrapper.
    """
    if len(parent):
        last = parent[-1]
        last.tail = util.AtomicString(f"{last.tail or ''}\n{placeholder}\n")
    else:
        parent.text = util.AtomicString(f"{parent.text or ''}\n{placeholder}\n")


def parse_metadata(text: str) -> dict[str, typ.Any] | None:
    """Parse a metadata block, returning ``None`` when it is not a mapping."""
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        loaded = loader.load(text)
    except YAMLError as exc:
        logger.warning("Ignoring metadata block that is not valid YAML: %s", exc)
        return None
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        logger.warning("Ignoring metadata block that is not a mapping: %r", text)
        return None
    return {str(key): value for key, value in loaded.items()}


class RawHtmlBlockProcessor(BlockProcessor):
    """Emit blocks made only of stash placeholders as raw markup."""

    def test(self, parent: Element, block: str) -> bool:
        return RAW_BLOCK_PATTERN.fullmatch(block.rstrip()) is not None

    def run(self, parent: Element, blocks: list[str]) -> None:
        append_raw(parent, blocks.pop(0).rstrip())


class TemplateBlockProcessor(BlockProcessor):
    """Render indented blocks through the document's template renderer.

    Consecutive indented blocks form one template. Macro definitions persist
    for the rest of the document; a block that renders to nothing (such as a
    block of macro definitions) emits no markup.
    """

    def __init__(self, parser: BlockParser, context: CompileContext) -> None:
        super().__init__(parser)
        self.context = context

    def test(self, parent: Element, block: str) -> bool:
        return block.startswith(" " * self.tab_length)

    def run(self, parent: Element, blocks: list[str]) -> None:
        indent = " " * self.tab_length
        source, rest = self.detab(blocks.pop(0))
        chunks = [source]
        while not rest and blocks and blocks[0].startswith(indent):
            source, rest = self.detab(blocks.pop(0))
            chunks.append(source)
        if rest:
            blocks.insert(0, rest)
        markup = self.context.templates.render_block("\n\n".join(chunks))
        if markup:
            append_raw(parent, self.parser.md.htmlStash.store(markup))


class MetadataBlockProcessor(BlockQuoteProcessor):
    """Read blockquotes as YAML metadata for the current step.

    A block that appears before any content other than headings also becomes
    document metadata.
    """

    def __init__(self, parser: BlockParser, context: CompileContext) -> None:
        super().__init__(parser)
        self.context = context

    def run(self, parent: Element, blocks: list[str]) -> None:
        block = blocks.pop(0)
        match = self.RE.search(block)
        if match is None:  # pragma: no cover - guarded by test()
            return
        before = block[: match.start()]
        if before:
            self.parser.parseBlocks(parent, [before])
        lines = block[match.start() :].split("\n")
        text = "\n".join(self.clean(line) for line in lines)
        values = parse_metadata(text.strip("\n"))
        if values is None:
            return
        self.context.merge_metadata(values, document=self._precedes_content(parent))

    def _precedes_content(self, parent: Element) -> bool:
        root = getattr(self.parser, "root", None)
        if parent is not root or len(self.context.steps) > 1:
            return False
        return all(child.tag in HEADING_TAGS for child in parent) and not (
            parent.text and parent.text.strip()
        )


class StepBreakProcessor(HRProcessor):
    """Turn top-level horizontal rules into step boundaries.

    Rules nested in lists or blockquotes stay ordinary ``<hr>`` elements.
    """

    def __init__(self, parser: BlockParser, context: CompileContext) -> None:
        super().__init__(parser)
        self.context = context

    def run(self, parent: Element, blocks: list[str]) -> None:
        if parent is not getattr(self.parser, "root", None):
            super().run(parent, blocks)
            return
        block = blocks.pop(0)
        match = self.match
        prelines = block[: match.start()].rstrip("\n")
        if prelines:
            self.parser.parseBlocks(parent, [prelines])
        self.context.start_step()
        append_raw(parent, self.parser.md.htmlStash.store(STEP_BREAK_MARKUP))
        postlines = block[match.end() :].lstrip("\n")
        if postlines:
            blocks.insert(0, postlines)


__all__ = [
    "MetadataBlockProcessor",
    "RawHtmlBlockProcessor",
    "StepBreakProcessor",
    "TemplateBlockProcessor",
    "append_raw",
    "parse_metadata",
]
