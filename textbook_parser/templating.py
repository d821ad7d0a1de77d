"""Render tag shorthand and embedded template blocks through Jinja.

Two kinds of authoring markup funnel through :class:`TemplateRenderer`:

* Tag shorthand such as ``x-slideshow.wide#intro(delay="200") Caption``, used
  by ``:::`` block directives and by the ``{...}`` attribute shorthand. The
  shorthand is parsed into a :class:`TagShorthand` and rendered with a small
  Jinja template so attribute values go through ``xmlattr`` escaping.
* Indented blocks in a chapter, which are Jinja templates. ``{% macro %}``
  definitions found in a block are kept in a per-document prelude and are
  available to every later block of the same chapter.

Examples
--------
>>> from textbook_parser.templating import TemplateRenderer
>>> renderer = TemplateRenderer()
>>> renderer.render_tag(".note(title=Hi)")
'<div class="note" title="Hi"></div>'
>>> renderer.render_tag_parts("x-tabbox")
('<x-tabbox>', '</x-tabbox>')
"""

from __future__ import annotations

import dataclasses as dc
import re
from pathlib import Path  # noqa: TC003 - used for runtime type metadata

from jinja2 import (
    DictLoader,
    Environment,
    FileSystemLoader,
    TemplateError,
    select_autoescape,
)

from ._constants import VOID_ELEMENTS
from .errors import TemplateBlockError

SHORTHAND_PATTERN = re.compile(
    r"""
    ^(?P<tag>[A-Za-z][\w:-]*)?
    (?P<selectors>(?:[.#][\w-]+)*)
    (?:\((?P<attributes>(?:"[^"]*"|'[^']*'|[^)"'])*)\))?
    (?:\s+(?P<text>.*))?$
    """,
    re.VERBOSE | re.DOTALL,
)
SELECTOR_PATTERN = re.compile(r"([.#])([\w-]+)")
ATTRIBUTE_PATTERN = re.compile(
    r"""\s*(?P<name>[^\s=,()'"]+)"""
    r"""(?:\s*=\s*(?P<value>"[^"]*"|'[^']*'|[^\s,()'"]+))?\s*,?"""
)
MACRO_PATTERN = re.compile(r"{%-?\s*macro\b.*?{%-?\s*endmacro\s*-?%}", re.DOTALL)

OPEN_TAG_TEMPLATE = "<{{ tag }}{{ attributes|xmlattr }}>{{ text|safe }}"


class TagShorthandError(ValueError):
    """Raised when a tag shorthand string cannot be parsed or rendered."""


@dc.dataclass(slots=True)
class TagShorthand:
    """Parsed form of ``tag#id.class(attr=value) text``."""

    tag: str
    attributes: dict[str, str] = dc.field(default_factory=dict)
    text: str = ""
    explicit_tag: bool = True

    @property
    def classes(self) -> list[str]:
        """Return the class list in declaration order."""
        return self.attributes.get("class", "").split()

    def add_class(self, name: str, *, first: bool = False) -> None:
        """Add ``name`` to the class list unless already present."""
        classes = self.classes
        if name in classes:
            return
        classes = [name, *classes] if first else [*classes, name]
        self.attributes["class"] = " ".join(classes)


def parse_shorthand(body: str) -> TagShorthand:
    """Parse a tag shorthand body into a :class:`TagShorthand`.

    Parameters
    ----------
    body : str
        Shorthand such as ``div.row(width=4)`` or ``.note Hello``. The tag
        defaults to ``div`` when only selectors or attributes are given.

    Returns
    -------
    TagShorthand
        Tag name, ordered attributes (``id`` and ``class`` first), and any
        trailing text content.

    Raises
    ------
    TagShorthandError
        If ``body`` is empty or does not follow the shorthand grammar.
    """
    stripped = body.strip()
    match = SHORTHAND_PATTERN.match(stripped)
    if not stripped or match is None:
        msg = f"Invalid tag shorthand: {body!r}"
        raise TagShorthandError(msg)
    tag, selectors, raw_attributes, text = match.group(
        "tag", "selectors", "attributes", "text"
    )
    if not (tag or selectors or raw_attributes is not None):
        msg = f"Tag shorthand names no tag, selector, or attribute: {body!r}"
        raise TagShorthandError(msg)

    element_id: str | None = None
    classes: list[str] = []
    for prefix, name in SELECTOR_PATTERN.findall(selectors or ""):
        if prefix == "#":
            element_id = name
        elif name not in classes:
            classes.append(name)

    extra = _parse_attributes(raw_attributes or "", body)
    for name in extra.pop("class", "").split():
        if name not in classes:
            classes.append(name)
    if "id" in extra:
        element_id = extra.pop("id")

    attributes: dict[str, str] = {}
    if element_id:
        attributes["id"] = element_id
    if classes:
        attributes["class"] = " ".join(classes)
    attributes.update(extra)
    return TagShorthand(
        tag=(tag or "div").lower(),
        attributes=attributes,
        text=(text or "").strip(),
        explicit_tag=bool(tag),
    )


def _parse_attributes(raw: str, body: str) -> dict[str, str]:
    """Parse ``name=value`` pairs separated by commas or whitespace."""
    attributes: dict[str, str] = {}
    position = 0
    while raw[position:].strip():
        match = ATTRIBUTE_PATTERN.match(raw, position)
        if match is None or match.end() == position:
            msg = f"Invalid attribute list in tag shorthand: {body!r}"
            raise TagShorthandError(msg)
        value = match.group("value")
        if value is None:
            value = ""
        elif value[:1] in {'"', "'"}:
            value = value[1:-1]
        attributes[match.group("name")] = value
        position = match.end()
    return attributes


class TemplateRenderer:
    """Render tag shorthand and template blocks for one compile call.

    Parameters
    ----------
    base_dir : Path, optional
        Directory used to resolve ``{% include %}`` and ``{% import %}`` in
        template blocks. Without it those statements fail to render.
    """

    def __init__(self, base_dir: Path | None = None) -> None:
        loader = (
            FileSystemLoader(str(base_dir)) if base_dir is not None else DictLoader({})
        )
        self._env = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._open_tag = self._env.from_string(OPEN_TAG_TEMPLATE)
        self.prelude = ""

    def render_shorthand(self, shorthand: TagShorthand) -> tuple[str, str]:
        """Return the opening markup (with text) and closing tag for ``shorthand``."""
        try:
            opening = self._open_tag.render(
                tag=shorthand.tag,
                attributes=shorthand.attributes,
                text=shorthand.text,
            )
        except ValueError as exc:
            msg = f"Cannot render tag shorthand for <{shorthand.tag}>: {exc}"
            raise TagShorthandError(msg) from exc
        if shorthand.tag in VOID_ELEMENTS:
            return opening, ""
        return opening, f"</{shorthand.tag}>"

    def render_tag_parts(self, body: str) -> tuple[str, str]:
        """Parse and render ``body`` into ``(opening, closing)`` markup."""
        return self.render_shorthand(parse_shorthand(body))

    def render_tag(self, body: str) -> str:
        """Parse and render ``body`` into a complete element."""
        opening, closing = self.render_tag_parts(body)
        return opening + closing

    def render_block(self, source: str) -> str:
        """Render an embedded template block after the running macro prelude.

        Parameters
        ----------
        source : str
            Dedented template source taken from an indented block.

        Returns
        -------
        str
            Rendered markup with surrounding whitespace removed.

        Raises
        ------
        TemplateBlockError
            If Jinja cannot parse or render the block.
        """
        try:
            rendered = self._env.from_string(self.prelude + source).render()
        except TemplateError as exc:
            msg = f"Template block failed to render: {exc}"
            raise TemplateBlockError(msg, snippet=source) from exc
        macros = MACRO_PATTERN.findall(source)
        if macros:
            self.prelude += "\n".join(macros) + "\n"
        return rendered.strip()


__all__ = [
    "TagShorthand",
    "TagShorthandError",
    "TemplateRenderer",
    "parse_shorthand",
]
