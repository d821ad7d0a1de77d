"""Tests for source-level rewrites applied before parsing."""

from __future__ import annotations

from textbook_parser.config import CompilerConfig
from textbook_parser.sources import (
    add_missing_table_headers,
    prepare_source,
    rename_data_attributes,
    rewrite_asset_paths,
)


def test_relative_images_point_at_document_resources() -> None:
    source = '<img src="images/a.png"> <div style="background: url(images/b.jpg)">'
    assert rewrite_asset_paths(source, "/resources/circles/images/") == (
        '<img src="/resources/circles/images/a.png"> '
        '<div style="background: url(/resources/circles/images/b.jpg)">'
    )


def test_other_paths_are_not_rewritten() -> None:
    source = '<img src="/images/a.png"> <a href="docs/images/x">'
    assert rewrite_asset_paths(source, "/r/") == source


def test_animation_attributes_become_data_attributes() -> None:
    source = '<x-anim delay="200" animation="pop" data-when="x" duration="4">'
    assert rename_data_attributes(source) == (
        '<x-anim data-delay="200" data-animation="pop" data-when="x"'
        ' data-duration="4">'
    )


def test_headerless_table_gets_an_empty_header() -> None:
    source = "Intro\n\n| a | b |\n| c | d |\n"
    assert add_missing_table_headers(source) == (
        "Intro\n\n| | |\n| - | - |\n| a | b |\n| c | d |\n"
    )


def test_tables_with_separator_row_are_unchanged() -> None:
    source = "Intro\n\n| a | b |\n| - | - |\n| c | d |\n"
    assert add_missing_table_headers(source) == source


def test_prepare_source_normalizes_line_endings() -> None:
    prepared = prepare_source(
        'A\r\n\r\n<img src="images/x.png">', "demo", CompilerConfig()
    )
    assert prepared == 'A\n\n<img src="/resources/demo/images/x.png">'
