"""Classify Markdown link targets into textbook widgets."""

from __future__ import annotations

import dataclasses as dc
import html


@dc.dataclass(slots=True)
class LinkTarget:
    """Element that replaces an ``<a>`` produced by Markdown.

    Attributes
    ----------
    tag : str
        Element name to use for the link.
    attributes : dict[str, str]
        Attributes to set on the element, replacing the original ones.
    glossary_id : str or None
        Glossary term referenced by a ``gloss:`` link.
    bio_id : str or None
        Biography referenced by a ``bio:`` link.
    """

    tag: str
    attributes: dict[str, str]
    glossary_id: str | None = None
    bio_id: str | None = None


def classify_link(href: str, title: str | None = None) -> LinkTarget:
    """Map ``href`` onto the widget it stands for.

    Parameters
    ----------
    href : str
        Link target as written in the chapter.
    title : str, optional
        Markdown link title, kept on ordinary external links.

    Returns
    -------
    LinkTarget
        The replacement element. Unrecognized targets fall back to an external
        link that opens in a new tab.

    Examples
    --------
    >>> classify_link("gloss:photon").attributes
    {'xid': 'photon'}
    >>> classify_link("->circle_area").attributes
    {'to': 'circle area'}
    """
    if href == "btn:next":
        return LinkTarget("button", {"class": "next-step"})
    if href.startswith("gloss:"):
        term = href.removeprefix("gloss:")
        return LinkTarget("x-gloss", {"xid": term}, glossary_id=term)
    if href.startswith("bio:"):
        person = href.removeprefix("bio:")
        return LinkTarget("x-bio", {"xid": person}, bio_id=person)
    if href.startswith("target:"):
        return LinkTarget(
            "span", {"class": "step-target", "data-to": href.removeprefix("target:")}
        )
    if href.startswith("pill:"):
        return LinkTarget(
            "strong",
            {"class": "pill step-target", "data-to": href.removeprefix("pill:")},
        )
    if href == "pill":
        return LinkTarget("strong", {"class": "pill"})
    decoded = html.unescape(href)
    if decoded.startswith("->"):
        return LinkTarget("x-target", {"to": decoded[2:].replace("_", " ")})
    attributes = {"href": href, "target": "_blank"}
    if title:
        attributes["title"] = title
    return LinkTarget("a", attributes)


__all__ = ["LinkTarget", "classify_link"]
