"""Tests for link target classification."""

from __future__ import annotations

import pytest

from textbook_parser.links import classify_link


@pytest.mark.parametrize(
    ("href", "tag", "attributes"),
    [
        ("btn:next", "button", {"class": "next-step"}),
        ("gloss:photon", "x-gloss", {"xid": "photon"}),
        ("bio:euler", "x-bio", {"xid": "euler"}),
        ("target:radius", "span", {"class": "step-target", "data-to": "radius"}),
        (
            "pill:radius",
            "strong",
            {"class": "pill step-target", "data-to": "radius"},
        ),
        ("pill", "strong", {"class": "pill"}),
        ("->circle_area", "x-target", {"to": "circle area"}),
        ("-&gt;circle", "x-target", {"to": "circle"}),
        (
            "https://example.com",
            "a",
            {"href": "https://example.com", "target": "_blank"},
        ),
    ],
)
def test_classify_link(href: str, tag: str, attributes: dict[str, str]) -> None:
    target = classify_link(href)
    assert target.tag == tag
    assert target.attributes == attributes


def test_cross_references_are_reported() -> None:
    assert classify_link("gloss:photon").glossary_id == "photon"
    assert classify_link("bio:euler").bio_id == "euler"
    assert classify_link("btn:next").glossary_id is None


def test_external_links_keep_their_title() -> None:
    target = classify_link("https://example.com", "Example")
    assert target.attributes["title"] == "Example"
