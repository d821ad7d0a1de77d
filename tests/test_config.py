"""Tests for compiler configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from textbook_parser.config import (
    CompilerConfig,
    CompilerConfigError,
    build_compiler_config,
    load_compiler_config,
)


def _write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "textbook.yaml"
    path.write_text(body.strip() + "\n", encoding="utf-8")
    return path


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    config = load_compiler_config(_write_config(tmp_path, ""))
    assert config == CompilerConfig()
    assert config.asset_path("circles") == "/resources/circles/images/"


def test_overrides_are_merged_with_defaults(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        """
asset_prefix: https://cdn.example.com/{doc_id}/
highlight_code: false
code_languages:
  rs: language-rust
duration:
  words_per_minute: 120
equation_cache: cache/equations.json
""",
    )
    config = load_compiler_config(path)
    assert config.asset_path("circles") == "https://cdn.example.com/circles/"
    assert config.highlight_code is False
    assert config.code_languages["rs"] == "language-rust"
    assert config.code_languages["py"] == "language-python"
    assert config.duration.words_per_minute == 120
    assert config.duration.bucket_minutes == 5
    assert config.equation_cache == tmp_path / "cache" / "equations.json"


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_compiler_config(tmp_path / "absent.yaml")


def test_non_mapping_file_raises(tmp_path: Path) -> None:
    with pytest.raises(CompilerConfigError, match="mapping"):
        load_compiler_config(_write_config(tmp_path, "- a\n- b"))


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ({"colour": "red"}, "Unknown configuration keys: colour"),
        ({"asset_prefix": "/img/{nope}/"}, "invalid placeholder"),
        ({"emoji_image": ""}, "non-empty string"),
        ({"highlight_code": "yes"}, "boolean"),
        ({"code_languages": ["py"]}, "code_languages"),
        ({"duration": {"pace": 3}}, "Unknown duration keys: pace"),
        ({"duration": {"minutes_per_goal": True}}, "must be a number"),
        ({"duration": {"baseline_minutes": -1}}, "must not be negative"),
        ({"duration": {"bucket_minutes": 0}}, "must be positive"),
        ({"equation_cache": 3}, "path string"),
    ],
)
def test_invalid_values_raise(raw: dict[str, object], message: str) -> None:
    with pytest.raises(CompilerConfigError, match=message):
        build_compiler_config(raw)


def test_absolute_cache_path_is_kept(tmp_path: Path) -> None:
    cache = tmp_path / "shared.json"
    config = build_compiler_config(
        {"equation_cache": str(cache)}, base_dir=tmp_path / "elsewhere"
    )
    assert config.equation_cache == cache
