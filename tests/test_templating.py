"""Tests for tag shorthand parsing and template block rendering."""

from __future__ import annotations

from pathlib import Path

import pytest

from textbook_parser.errors import TemplateBlockError
from textbook_parser.templating import (
    TagShorthandError,
    TemplateRenderer,
    parse_shorthand,
)


def test_parse_shorthand_collects_selectors_attributes_and_text() -> None:
    shorthand = parse_shorthand('x-slideshow.wide#intro(delay="200") Caption')
    assert shorthand.tag == "x-slideshow"
    assert shorthand.attributes == {"id": "intro", "class": "wide", "delay": "200"}
    assert shorthand.text == "Caption"
    assert shorthand.explicit_tag


def test_parse_shorthand_defaults_to_div() -> None:
    shorthand = parse_shorthand(".a.b(class=c, hidden)")
    assert shorthand.tag == "div"
    assert not shorthand.explicit_tag
    assert shorthand.classes == ["a", "b", "c"]
    assert shorthand.attributes["hidden"] == ""


@pytest.mark.parametrize("body", ["", "   ", "(unclosed", "#"])
def test_parse_shorthand_rejects_invalid_bodies(body: str) -> None:
    with pytest.raises(TagShorthandError):
        parse_shorthand(body)


def test_render_tag_escapes_attribute_values() -> None:
    renderer = TemplateRenderer()
    assert renderer.render_tag(".note(title=Hi)") == (
        '<div class="note" title="Hi"></div>'
    )
    assert renderer.render_tag("span(title='a<b')") == (
        '<span title="a&lt;b"></span>'
    )


def test_render_tag_parts_for_void_elements() -> None:
    renderer = TemplateRenderer()
    assert renderer.render_tag_parts("img(src=a.png)") == ('<img src="a.png">', "")


def test_render_tag_keeps_trailing_text() -> None:
    renderer = TemplateRenderer()
    assert renderer.render_tag("h3.caption Step <em>one</em>") == (
        '<h3 class="caption">Step <em>one</em></h3>'
    )


def test_macros_persist_across_blocks() -> None:
    renderer = TemplateRenderer()
    assert renderer.render_block(
        "{% macro hint(text) %}<x-hint>{{ text }}</x-hint>{% endmacro %}"
    ) == ""
    assert renderer.render_block("{{ hint('Look up') }}") == "<x-hint>Look up</x-hint>"


def test_macros_do_not_leak_between_renderers() -> None:
    first = TemplateRenderer()
    first.render_block("{% macro hint() %}x{% endmacro %}")
    with pytest.raises(TemplateBlockError):
        TemplateRenderer().render_block("{{ hint() }}")


def test_broken_template_block_raises_with_snippet() -> None:
    with pytest.raises(TemplateBlockError) as excinfo:
        TemplateRenderer().render_block("{% if %}")
    assert excinfo.value.snippet == "{% if %}"


def test_includes_resolve_against_base_dir(tmp_path: Path) -> None:
    (tmp_path / "part.html").write_text("<b>shared</b>", encoding="utf-8")
    renderer = TemplateRenderer(tmp_path)
    assert renderer.render_block('{% include "part.html" %}') == "<b>shared</b>"
