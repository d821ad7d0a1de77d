"""Rewrite leading ``{...}`` shorthand into element attributes.

A paragraph such as ``<p>{.note#tip} Remember this</p>`` becomes
``<p class="note" id="tip">Remember this</p>``. When the shorthand names a tag
other than a plain ``div`` (``{x-gesture(target="#b")}``) the node is replaced
by that element and its children move inside it.

The pass is idempotent: after it runs, no element's first text child starts
with a shorthand, so running it again changes nothing.
"""

from __future__ import annotations

import logging
import re
import typing as typ

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from .templating import TagShorthandError

if typ.TYPE_CHECKING:
    from .templating import TemplateRenderer

logger = logging.getLogger(__name__)

SHORTHAND_PREFIX_PATTERN = re.compile(r"^\{([^}]+)\}")
OPAQUE_TAGS = frozenset({"svg", "math", "pre"})


def _post_order(node: Tag) -> list[Tag]:
    """Return descendants children-first, without entering opaque subtrees."""
    ordered: list[Tag] = []
    for child in node.find_all(recursive=False):
        if child.name not in OPAQUE_TAGS:
            ordered.extend(_post_order(child))
        ordered.append(child)
    return ordered


def _leading_shorthand(node: Tag) -> tuple[NavigableString, re.Match[str]] | None:
    first = next(iter(node.contents), None)
    if not isinstance(first, NavigableString) or isinstance(
        first, PreformattedString
    ):
        return None
    match = SHORTHAND_PREFIX_PATTERN.match(str(first))
    if match is None:
        return None
    return first, match


def _render_element(body: str, templates: TemplateRenderer) -> Tag | None:
    try:
        markup = templates.render_tag(body)
    except TagShorthandError as exc:
        logger.warning("Invalid attribute shorthand {%s}: %s", body, exc)
        return None
    element = BeautifulSoup(markup, "html.parser").find()
    if not isinstance(element, Tag):
        logger.warning("Attribute shorthand {%s} did not render an element", body)
        return None
    return element


def _merge_attributes(node: Tag, source: Tag) -> None:
    for name, value in source.attrs.items():
        if name != "class":
            node[name] = value
            continue
        classes = list(node.get("class") or [])
        for class_name in value:
            if class_name not in classes:
                classes.append(class_name)
        node["class"] = classes


def _apply(node: Tag, templates: TemplateRenderer) -> tuple[Tag, bool]:
    """Apply one leading shorthand of ``node``; return the node now in place."""
    found = _leading_shorthand(node)
    if found is None:
        return node, False
    text, match = found
    body = match.group(1)
    rendered = _render_element(body, templates)
    if rendered is None:
        return node, False

    remainder = str(text)[match.end() :].lstrip()
    if remainder:
        text.replace_with(remainder)
    else:
        text.extract()

    if rendered.name == "div" and not body.lstrip().startswith("div"):
        _merge_attributes(node, rendered)
        return node, True
    rendered.extract()
    for child in list(node.contents):
        rendered.append(child.extract())
    node.replace_with(rendered)
    return rendered, True


def inject_attributes(root: Tag, templates: TemplateRenderer) -> int:
    """Rewrite every leading attribute shorthand below ``root``.

    Parameters
    ----------
    root : Tag
        Parsed document or fragment; modified in place.
    templates : TemplateRenderer
        Renderer for the shorthand bodies.

    Returns
    -------
    int
        Number of shorthands applied. Shorthands that do not render are
        logged and left in place.
    """
    applied = 0
    for node in _post_order(root):
        changed = True
        while changed:
            node, changed = _apply(node, templates)
            applied += int(changed)
    return applied


__all__ = ["inject_attributes"]
