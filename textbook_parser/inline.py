"""Ordered inline rewriting stages for paragraphs, list items, and table cells.

The stages run over the serialized markup of one element after
Python-Markdown has finished its own inline parsing, so emphasis, links, and
code spans are already real tags and raw inline HTML is still an opaque stash
placeholder. Order matters and is fixed:

1. :func:`replace_blanks` turns ``[[answer]]`` into ``<x-blank-input>`` and
   ``[[a|b|c]]`` into an ``<x-blank>`` with one ``span.choice`` per option.
   Choice text is kept verbatim, including markup.
2. Equation spans. ``$...$`` is matched by :data:`EQUATION_PATTERN` while
   Markdown parses inline text (before backslash escapes and emphasis run, so
   TeX reaches the renderer untouched) and is replaced by an equation
   placeholder token. By the time the stages below run, only escaped ``\\$``
   and bound variables still contain dollar signs.
3. :func:`replace_variables` turns ``${expr}{target}`` into ``<x-var>`` and a
   bare ``${expr}`` into ``span.var``. The bare pattern refuses to match text
   followed by ``</x-var>`` so bound variables are not wrapped twice.
4. :func:`replace_emoji` turns ``:smile:`` or ``:grinning_face:`` into an
   ``img.emoji`` keyed by the first codepoint of the emoji. Only text between
   tags is considered.
5. :func:`unescape` runs last: ``\\ `` becomes ``&nbsp;``, ``\\$`` becomes
   ``$``, and Markdown's backslash-escape markers are restored. Earlier stages
   rely on the markers still being present, which is how ``\\[[x]]`` stays
   literal text.

Examples
--------
>>> from textbook_parser.inline import apply_inline_extensions
>>> apply_inline_extensions("Pick [[red|blue]] for ${n}{count} apples")
'Pick <x-blank><span class="choice">red</span><span class="choice">blue</span></x-blank> for <x-var bind="count">${n}</x-var> apples'
"""  # noqa: E501

from __future__ import annotations

import html
import re

import emoji
from markdown import util

from ._constants import DEFAULT_EMOJI_IMAGE

BLANK_PATTERN = re.compile(r"\[\[([^\]]+)\]\]")
EQUATION_PATTERN = r"(?<!\\)\$([^{$][^$]*?)\$"
BOUND_VARIABLE_PATTERN = re.compile(r"\$\{([^}]+)\}\{([^}]+)\}")
DISPLAY_VARIABLE_PATTERN = re.compile(r"\$\{([^}]+)\}(?!</x-var>)")
EMOJI_PATTERN = re.compile(r":([\w+-]+):")
TAG_SPLIT_PATTERN = re.compile(r"(<[^>]*>)")
ESCAPED_SPACE_PATTERN = re.compile(r"\\\s")
ESCAPED_DOLLAR = "\\$"
ESCAPE_MARKER_PATTERN = re.compile(f"{util.STX}([0-9]+){util.ETX}")


def replace_blanks(text: str) -> str:
    """Rewrite cloze blank syntax into blank widgets."""

    def _replace(match: re.Match[str]) -> str:
        body = match.group(1)
        choices = body.split("|")
        if len(choices) == 1:
            solution = body.replace('"', "&quot;")
            return f'<x-blank-input solution="{solution}"></x-blank-input>'
        spans = "".join(f'<span class="choice">{choice}</span>' for choice in choices)
        return f"<x-blank>{spans}</x-blank>"

    return BLANK_PATTERN.sub(_replace, text)


def replace_variables(text: str) -> str:
    """Rewrite bound ``${expr}{target}`` and display-only ``${expr}`` variables."""
    text = BOUND_VARIABLE_PATTERN.sub(r'<x-var bind="\2">${\1}</x-var>', text)
    return DISPLAY_VARIABLE_PATTERN.sub(r'<span class="var">${\1}</span>', text)


def emoji_character(name: str) -> str | None:
    """Return the emoji a ``:shortcode:`` name stands for.

    Both GitHub-style aliases (``smile``, ``+1``) and CLDR names
    (``grinning_face``) are recognised. Unknown names give ``None``.
    """
    shortcode = f":{name}:"
    character = emoji.emojize(shortcode, language="alias")
    if character == shortcode:
        return None
    return character


def replace_emoji(text: str, *, image_template: str = DEFAULT_EMOJI_IMAGE) -> str:
    """Rewrite ``:name:`` shortcodes outside tags into emoji images."""

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        character = emoji_character(name)
        if character is None:
            return match.group(0)
        src = image_template.format(codepoint=f"{ord(character[0]):x}")
        return (
            f'<img class="emoji" width="20" height="20" src="{html.escape(src)}"'
            f' alt="{name}"/>'
        )

    parts = TAG_SPLIT_PATTERN.split(text)
    for index in range(0, len(parts), 2):
        parts[index] = EMOJI_PATTERN.sub(_replace, parts[index])
    return "".join(parts)


def unescape(text: str) -> str:
    """Resolve escaped spaces, escaped dollars, and Markdown escape markers."""
    text = ESCAPED_SPACE_PATTERN.sub("&nbsp;", text)
    text = text.replace(ESCAPED_DOLLAR, "$")
    return ESCAPE_MARKER_PATTERN.sub(
        lambda match: html.escape(chr(int(match.group(1)))), text
    )


def apply_inline_extensions(
    text: str, *, emoji_image: str = DEFAULT_EMOJI_IMAGE
) -> str:
    """Run the inline stages over ``text`` in their fixed order."""
    text = replace_blanks(text)
    text = replace_variables(text)
    text = replace_emoji(text, image_template=emoji_image)
    return unescape(text)


__all__ = [
    "EQUATION_PATTERN",
    "apply_inline_extensions",
    "emoji_character",
    "replace_blanks",
    "replace_emoji",
    "replace_variables",
    "unescape",
]
