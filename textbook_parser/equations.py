"""Equation placeholders and their asynchronous resolution.

While a chapter is parsed, every ``$...$`` span and every ``latex`` fence is
replaced by an opaque token (``XEQUATIONX0XEQUATIONX``) recorded in the
compile call's :class:`EquationTable`. Once the markup is built,
:func:`resolve_equations` walks the tokens in the order they appear and asks an
:class:`EquationRenderer` for the notation markup of each, one at a time. A
failure for one expression is logged and that token is replaced by empty
markup; the compile carries on.

:class:`MathMLRenderer` converts TeX to MathML with ``latex2mathml``.
:class:`CachedEquationRenderer` memoizes any renderer by expression and inline
flag in an :class:`EquationCache`, which can be persisted as JSON and shared by
every compile of a build.

Examples
--------
>>> import asyncio
>>> from textbook_parser.equations import EquationTable, MathMLRenderer
>>> from textbook_parser.equations import resolve_equations
>>> table = EquationTable()
>>> token = table.placeholder("x+1", inline=True)
>>> html = asyncio.run(resolve_equations(f"<p>{token}</p>", table, MathMLRenderer()))
>>> html.startswith("<p><math")
True
"""

from __future__ import annotations

import dataclasses as dc
import logging
import os
import re
import tempfile
import typing as typ

import msgspec
from latex2mathml import converter

from ._constants import EQUATION_PLACEHOLDER_TEMPLATE

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(EQUATION_PLACEHOLDER_TEMPLATE.format(index="[0-9]+"))
STEP_OPEN_TAG = "<x-step"


class EquationRenderError(RuntimeError):
    """Raised by a renderer that cannot turn an expression into markup."""


class EquationRenderer(typ.Protocol):
    """Capability that renders one TeX expression into markup."""

    async def render(self, expression: str, *, inline: bool) -> str:
        """Return markup for ``expression`` or raise :class:`EquationRenderError`."""
        ...


@dc.dataclass(slots=True)
class EquationTable:
    """Placeholder tokens issued during one compile call."""

    entries: dict[str, tuple[str, bool]] = dc.field(default_factory=dict)
    issued: int = 0

    def placeholder(self, expression: str, *, inline: bool) -> str:
        """Record ``expression`` and return the token that stands in for it."""
        token = EQUATION_PLACEHOLDER_TEMPLATE.format(index=self.issued)
        self.issued += 1
        self.entries[token] = (expression, inline)
        return token

    def __len__(self) -> int:
        return len(self.entries)


async def resolve_equations(
    html: str,
    table: EquationTable,
    renderer: EquationRenderer,
    *,
    label: str = "",
) -> str:
    """Replace every placeholder token in ``html`` with rendered markup.

    Parameters
    ----------
    html : str
        Markup containing placeholder tokens.
    table : EquationTable
        Table the tokens were issued from. Resolved entries are removed.
    renderer : EquationRenderer
        Capability used for each expression, awaited sequentially in the
        order the tokens appear.
    label : str, optional
        Document identifier included in diagnostics.

    Returns
    -------
    str
        ``html`` without any placeholder token. Tokens that fail to render,
        whatever the renderer raises, or are unknown to ``table`` become
        empty markup.
    """
    parts: list[str] = []
    position = 0
    for match in PLACEHOLDER_PATTERN.finditer(html):
        parts.append(html[position : match.start()])
        location = _describe_location(html, match.start(), label)
        parts.append(await _render_token(match.group(0), table, renderer, location))
        position = match.end()
    parts.append(html[position:])
    return "".join(parts)


async def _render_token(
    token: str, table: EquationTable, renderer: EquationRenderer, location: str
) -> str:
    entry = table.entries.pop(token, None)
    if entry is None:
        logger.warning("Unknown equation placeholder %s in %s", token, location)
        return ""
    expression, inline = entry
    try:
        return await renderer.render(expression, inline=inline)
    except EquationRenderError as exc:
        logger.warning(
            "Could not render equation %r in %s: %s", expression, location, exc
        )
        return ""
    except Exception:
        logger.exception("Equation renderer failed on %r in %s", expression, location)
        return ""


def _describe_location(html: str, offset: int, label: str) -> str:
    """Describe where ``offset`` sits, naming the enclosing step when known."""
    document = f"document {label!r}" if label else "fragment"
    steps = html.count(STEP_OPEN_TAG, 0, offset)
    if steps:
        return f"{document}, step {steps - 1}"
    return document


class MathMLRenderer:
    """Render TeX to MathML with ``latex2mathml``."""

    async def render(self, expression: str, *, inline: bool) -> str:
        """Convert ``expression``; display equations use block layout."""
        try:
            return converter.convert(
                expression, display="inline" if inline else "block"
            )
        except Exception as exc:  # noqa: BLE001 - latex2mathml raises bare Exception subclasses
            msg = f"latex2mathml rejected the expression: {exc!r}"
            raise EquationRenderError(msg) from exc


class EquationCache:
    """Rendered equations keyed by expression and inline flag.

    Parameters
    ----------
    path : Path, optional
        JSON file the cache is loaded from and saved to. Without it the cache
        only lives in memory.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._entries: dict[str, str] = {}
        self._dirty = False
        if path is not None and path.exists():
            self._entries = self._load(path)

    @staticmethod
    def _load(path: Path) -> dict[str, str]:
        try:
            return msgspec.json.decode(path.read_bytes(), type=dict[str, str])
        except msgspec.DecodeError as exc:
            logger.warning("Ignoring unreadable equation cache %s: %s", path, exc)
            return {}

    @staticmethod
    def key(expression: str, *, inline: bool) -> str:
        """Return the cache key for ``expression``."""
        mode = "inline" if inline else "display"
        return f"{mode}:{expression}"

    def get(self, expression: str, *, inline: bool) -> str | None:
        """Return the cached markup for ``expression``, if any."""
        return self._entries.get(self.key(expression, inline=inline))

    def set(self, expression: str, markup: str, *, inline: bool) -> None:
        """Store ``markup``; writing the same key twice is harmless."""
        self._entries[self.key(expression, inline=inline)] = markup
        self._dirty = True

    def __len__(self) -> int:
        return len(self._entries)

    def save(self) -> bool:
        """Write the cache to disk when it changed.

        Returns
        -------
        bool
            ``True`` when a file was written.
        """
        if self.path is None or not self._dirty:
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = msgspec.json.encode(dict(sorted(self._entries.items())))
        handle, temp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        with os.fdopen(handle, "wb") as stream:
            stream.write(payload)
        os.replace(temp_name, self.path)
        self._dirty = False
        return True


class CachedEquationRenderer:
    """Memoize another renderer in an :class:`EquationCache`."""

    def __init__(self, renderer: EquationRenderer, cache: EquationCache) -> None:
        self.renderer = renderer
        self.cache = cache

    async def render(self, expression: str, *, inline: bool) -> str:
        """Return cached markup or render and remember it."""
        cached = self.cache.get(expression, inline=inline)
        if cached is not None:
            return cached
        markup = await self.renderer.render(expression, inline=inline)
        self.cache.set(expression, markup, inline=inline)
        return markup


__all__ = [
    "CachedEquationRenderer",
    "EquationCache",
    "EquationRenderError",
    "EquationRenderer",
    "EquationTable",
    "MathMLRenderer",
    "resolve_equations",
]
