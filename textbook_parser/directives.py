"""Expand ``:::`` block directives into container markup.

The preprocessor runs on raw chapter source before Markdown sees it. A line
that starts with ``:::`` either opens a block (``::: x-slideshow.wide``) or
closes the innermost open one (``:::``). Open blocks live on an explicit stack
of :class:`OpenBlock` entries so sibling columns and tabs can be told apart
from nested containers:

* ``::: column(width=4)`` opens a ``div`` inside a ``<div class="row padded">``
  wrapper; numeric widths become ``style="width: 4px"``.
* ``::: tab(title="A")`` opens a ``div.tab`` inside an ``<x-tabbox>`` wrapper.
* Any other body is rendered as a single element through the tag shorthand.

A column or tab directive met while a column or tab of the same family is open
closes the previous item and opens a sibling. A ``:::`` that closes a column or
tab only closes the wrapper too when the next non-blank line does not open
another sibling, so both of these produce one row holding two columns::

    ::: column(width=4)        ::: column(width=4)
    A                          A
    ::: column(width=6)        :::
    B                          ::: column(width=6)
    :::                        B
                               :::

Every emitted tag sits on its own line surrounded by blank lines so the
Markdown engine treats it as a raw HTML block and keeps parsing the content in
between.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import logging
import re
import typing as typ

from .errors import DirectiveError
from .templating import TagShorthandError, parse_shorthand

if typ.TYPE_CHECKING:
    from .templating import TemplateRenderer

logger = logging.getLogger(__name__)

DIRECTIVE_MARKER = ":::"
FENCE_PATTERN = re.compile(r"^[ ]{0,3}(`{3,}|~{3,})")
WIDTH_PATTERN = re.compile(r'width="([0-9]+)"')

COLUMN_WRAPPER = ('<div class="row padded">', "</div>")
TAB_WRAPPER = ("<x-tabbox>", "</x-tabbox>")


class BlockKind(enum.Enum):
    """Kinds of entries kept on the directive stack."""

    GENERIC = "generic"
    COLUMN = "column"
    COLUMN_GROUP = "column-group"
    TAB = "tab"
    TAB_GROUP = "tab-group"


ITEM_KINDS = {"column": BlockKind.COLUMN, "tab": BlockKind.TAB}
GROUP_KINDS = {"column": BlockKind.COLUMN_GROUP, "tab": BlockKind.TAB_GROUP}
WRAPPERS = {"column": COLUMN_WRAPPER, "tab": TAB_WRAPPER}


@dc.dataclass(slots=True)
class OpenBlock:
    """An open directive waiting for its ``:::`` line."""

    kind: BlockKind
    close_markup: str


def _family(body: str) -> str | None:
    """Return ``"column"`` or ``"tab"`` when ``body`` opens a grouped item."""
    for family in ("column", "tab"):
        if body == family or re.match(rf"{family}(?![\w-])", body):
            return family
    return None


class DirectiveExpander:
    """Stateful expansion of one chapter's directive lines."""

    def __init__(self, templates: TemplateRenderer) -> None:
        self.templates = templates
        self.stack: list[OpenBlock] = []

    def expand(self, source: str) -> str:
        """Return ``source`` with every directive line replaced by markup.

        Raises
        ------
        DirectiveError
            If a body does not render or a ``:::`` has nothing to close.
        """
        lines = source.split("\n")
        output: list[str] = []
        in_fence: str | None = None
        for index, line in enumerate(lines):
            fence = FENCE_PATTERN.match(line)
            if fence:
                marker = fence.group(1)
                if in_fence is None:
                    in_fence = marker[0]
                elif marker[0] == in_fence:
                    in_fence = None
            if in_fence is not None or not line.startswith(DIRECTIVE_MARKER):
                output.append(line)
                continue
            body = line[len(DIRECTIVE_MARKER) :].strip()
            if body:
                markup = self._open(body, line_number=index + 1)
            else:
                markup = self._close(lines, index)
            output.append(f"\n{markup}\n")
        if self.stack:
            logger.debug(
                "Closing %d directive(s) left open at end of input", len(self.stack)
            )
            output.append(f"\n{self._close_all()}\n")
        return "\n".join(output)

    def _open(self, body: str, *, line_number: int) -> str:
        family = _family(body)
        if family is None:
            opening, closing = self._render(body, line_number=line_number)
            self.stack.append(OpenBlock(BlockKind.GENERIC, closing))
            return opening
        return self._open_item(family, body, line_number=line_number)

    def _open_item(self, family: str, body: str, *, line_number: int) -> str:
        item_kind = ITEM_KINDS[family]
        group_kind = GROUP_KINDS[family]
        opening, closing = self._render_item(family, body, line_number=line_number)
        top = self.stack[-1] if self.stack else None
        if top is not None and top.kind is item_kind:
            # Sibling of the open item: close it and stay inside the group.
            self.stack[-1] = OpenBlock(item_kind, closing)
            return f"{top.close_markup}{opening}"
        if top is not None and top.kind is group_kind:
            self.stack.append(OpenBlock(item_kind, closing))
            return opening
        wrapper_open, wrapper_close = WRAPPERS[family]
        self.stack.append(OpenBlock(group_kind, wrapper_close))
        self.stack.append(OpenBlock(item_kind, closing))
        return f"{wrapper_open}{opening}"

    def _close(self, lines: list[str], index: int) -> str:
        if not self.stack:
            msg = f"Unmatched '{DIRECTIVE_MARKER}' on line {index + 1}."
            raise DirectiveError(msg, snippet=lines[index])
        entry = self.stack.pop()
        if entry.kind in (BlockKind.COLUMN, BlockKind.TAB):
            family = "column" if entry.kind is BlockKind.COLUMN else "tab"
            if _next_opens_sibling(lines, index, family):
                return entry.close_markup
            group = self.stack.pop()
            return entry.close_markup + group.close_markup
        return entry.close_markup

    def _close_all(self) -> str:
        closing = "".join(entry.close_markup for entry in reversed(self.stack))
        self.stack.clear()
        return closing

    def _render(self, body: str, *, line_number: int) -> tuple[str, str]:
        try:
            return self.templates.render_tag_parts(body)
        except TagShorthandError as exc:
            msg = f"Invalid block directive on line {line_number}: {exc}"
            raise DirectiveError(msg, snippet=body) from exc

    def _render_item(
        self, family: str, body: str, *, line_number: int
    ) -> tuple[str, str]:
        try:
            shorthand = parse_shorthand(body)
            shorthand.tag = "div"
            if family == "tab":
                shorthand.add_class("tab", first=True)
            opening, closing = self.templates.render_shorthand(shorthand)
        except TagShorthandError as exc:
            msg = f"Invalid {family} directive on line {line_number}: {exc}"
            raise DirectiveError(msg, snippet=body) from exc
        if family == "column":
            opening = WIDTH_PATTERN.sub(r'style="width: \1px"', opening, count=1)
        return opening, closing


def _next_opens_sibling(lines: list[str], index: int, family: str) -> bool:
    """Return whether the next non-blank line opens another ``family`` item."""
    for line in lines[index + 1 :]:
        if not line.strip():
            continue
        if not line.startswith(DIRECTIVE_MARKER):
            return False
        return _family(line[len(DIRECTIVE_MARKER) :].strip()) == family
    return False


def expand_block_directives(source: str, templates: TemplateRenderer) -> str:
    """Expand the ``:::`` directives in ``source``.

    Parameters
    ----------
    source : str
        Raw chapter source.
    templates : TemplateRenderer
        Renderer used for the directive bodies.

    Returns
    -------
    str
        Source with each directive line replaced by its container markup.

    Raises
    ------
    DirectiveError
        If a directive body does not render or a ``:::`` closes nothing.
    """
    return DirectiveExpander(templates).expand(source)


__all__ = [
    "BlockKind",
    "DirectiveExpander",
    "OpenBlock",
    "expand_block_directives",
]
