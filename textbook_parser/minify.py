"""Conservative markup minification for step fragments."""

from __future__ import annotations

import re

from bs4 import Comment, NavigableString, Tag

WHITESPACE_PATTERN = re.compile(r"\s+")
PRESERVED_TAGS = frozenset({"pre", "code", "textarea", "script", "style"})


def _preserved(text: NavigableString) -> bool:
    return any(parent.name in PRESERVED_TAGS for parent in text.parents)


def minify_markup(node: Tag) -> str:
    """Return the outer markup of ``node`` with comments and extra space removed.

    Runs of whitespace collapse to a single space rather than disappearing, so
    the visible text never changes. Text inside ``pre``, ``code``,
    ``textarea``, ``script`` and ``style`` is kept as written. ``node`` is
    modified in place.
    """
    for comment in node.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()
    for text in node.find_all(string=True):
        if _preserved(text):
            continue
        collapsed = WHITESPACE_PATTERN.sub(" ", str(text))
        if collapsed != text:
            text.replace_with(collapsed)
    return str(node).strip()


__all__ = ["minify_markup"]
