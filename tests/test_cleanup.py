"""Tests for the DOM clean-ups applied after attribute injection."""

from __future__ import annotations

from bs4 import BeautifulSoup

from textbook_parser.cleanup import (
    clean_up,
    promote_table_row_classes,
    propagate_parent_classes,
    remove_empty_table_headers,
)


def test_parent_attribute_becomes_parent_classes() -> None:
    soup = BeautifulSoup(
        '<div class="box"><img src="a.png" parent="wide dark"></div>', "html.parser"
    )
    propagate_parent_classes(soup)
    assert soup.find("div")["class"] == ["box", "wide", "dark"]
    assert not soup.find("img").has_attr("parent")


def test_empty_table_header_is_removed() -> None:
    soup = BeautifulSoup(
        "<table><thead><tr><th></th><th> </th></tr></thead>"
        "<tbody><tr><td>1</td></tr></tbody></table>",
        "html.parser",
    )
    remove_empty_table_headers(soup)
    assert soup.find("thead") is None
    assert soup.find("td").get_text() == "1"


def test_table_header_with_text_is_kept() -> None:
    soup = BeautifulSoup(
        "<table><thead><tr><th>A</th></tr></thead></table>", "html.parser"
    )
    remove_empty_table_headers(soup)
    assert soup.find("thead") is not None


def test_class_row_moves_onto_table() -> None:
    soup = BeautifulSoup(
        "<table><tbody><tr><td>1</td></tr>"
        '<tr><td class="grid"></td></tr></tbody></table>',
        "html.parser",
    )
    promote_table_row_classes(soup)
    table = soup.find("table")
    assert table["class"] == ["grid"]
    assert len(table.find_all("tr")) == 1


def test_clean_up_runs_every_pass() -> None:
    soup = BeautifulSoup(
        '<div><table><thead><tr><th></th></tr></thead><tbody><tr><td>x</td></tr>'
        '<tr><td class="grid"></td></tr></tbody></table>'
        '<span parent="framed"></span></div>',
        "html.parser",
    )
    clean_up(soup)
    assert soup.find("div")["class"] == ["framed"]
    assert soup.find("thead") is None
    assert soup.find("table")["class"] == ["grid"]
