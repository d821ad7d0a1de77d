"""Tests for the ``textbook`` console command."""

from __future__ import annotations

import typing as typ

import msgspec
import pytest

from textbook_parser import cli

if typ.TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture

CHAPTER = "# Circles\n\nHello [[world]].\n\n---\n\n> id: outro\n\nBye."


def _write_chapter(tmp_path: Path) -> Path:
    source = tmp_path / "content" / "circles.md"
    source.parent.mkdir()
    source.write_text(CHAPTER, encoding="utf-8")
    return source


def test_compile_writes_model_and_step_files(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    source = _write_chapter(tmp_path)
    output_dir = tmp_path / "build"
    cli.compile_command(source, output_dir=output_dir)

    payload = msgspec.json.decode((output_dir / "circles.json").read_bytes())
    assert payload["document"]["title"] == "Circles"
    assert [step["id"] for step in payload["document"]["steps"]] == [
        "step-0",
        "outro",
    ]
    step_html = (output_dir / "circles" / "step-0.html").read_text(encoding="utf-8")
    assert 'data-goal="blank-0"' in step_html
    assert (output_dir / "circles" / "outro.html").exists()
    printed = capsys.readouterr().out.splitlines()
    assert len(printed) == 3
    assert all(line.startswith("wrote ") for line in printed)


def test_compile_uses_doc_id_and_config(tmp_path: Path) -> None:
    source = _write_chapter(tmp_path)
    source.write_text('<img src="images/a.png">\n\nText', encoding="utf-8")
    config = tmp_path / "textbook.yaml"
    config.write_text("asset_prefix: /assets/{doc_id}/\n", encoding="utf-8")
    output_dir = tmp_path / "out"
    cli.compile_command(source, doc_id="geometry", output_dir=output_dir, config=config)
    html = (output_dir / "geometry" / "step-0.html").read_text(encoding="utf-8")
    assert 'src="/assets/geometry/a.png"' in html


def test_compile_saves_equation_cache(tmp_path: Path) -> None:
    source = _write_chapter(tmp_path)
    source.write_text("Area $x^2$", encoding="utf-8")
    cache = tmp_path / "equations.json"
    cli.compile_command(source, output_dir=tmp_path / "build", equation_cache=cache)
    assert "inline:x^2" in msgspec.json.decode(cache.read_bytes())


def test_fragment_prints_markup(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    source = tmp_path / "photon.md"
    source.write_text("A particle of [light](gloss:light).", encoding="utf-8")
    cli.fragment_command(source)
    assert capsys.readouterr().out.strip() == (
        '<p>A particle of <x-gloss xid="light">light</x-gloss>.</p>'
    )


def test_fragment_writes_output_file(tmp_path: Path) -> None:
    source = tmp_path / "photon.md"
    source.write_text("**Photon**", encoding="utf-8")
    output = tmp_path / "glossary" / "photon.html"
    cli.fragment_command(source, output=output)
    assert output.read_text(encoding="utf-8") == "<p><strong>Photon</strong></p>\n"


def test_app_parses_compile_arguments(tmp_path: Path) -> None:
    source = _write_chapter(tmp_path)
    command, bound, _ = cli.app.parse_args(
        ["compile", str(source), "--doc-id", "circles", "--verbose"]
    )
    assert command is cli.compile_command
    assert bound.arguments["doc_id"] == "circles"
    assert bound.arguments["verbose"] is True


def test_main_invokes_app(mocker: MockerFixture) -> None:
    app = mocker.patch.object(cli, "app")
    cli.main()
    app.assert_called_once_with()
