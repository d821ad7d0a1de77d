"""Cyclopts CLI entrypoint for compiling textbook chapters.

The ``textbook`` console script defined here compiles one chapter source file
into a JSON document model plus one HTML fragment per step, and renders short
Markdown snippets such as glossary entries. Typical usage runs
``textbook compile`` for each chapter of a course in CI, pointing every call
at the same equation cache so unchanged formulas are never rendered twice.

Examples
--------
Compile a chapter with the default configuration:

>>> from textbook_parser.cli import main
>>> main()  # doctest: +SKIP

Compile into a custom directory:

>>> from textbook_parser.cli import app
>>> app.run(
...     ["compile", "content/circles.md", "--output-dir", "dist"]
... )  # doctest: +SKIP
"""

from __future__ import annotations

import asyncio
import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .compiler import build_equation_renderer, compile_document_sync, compile_fragment
from .config import CompilerConfig, load_compiler_config

DEFAULT_OUTPUT_DIR = Path("build")

app = App(name="textbook", config=cyclopts.config.Env("TEXTBOOK_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _resolve_config(config: Path | None, equation_cache: Path | None) -> CompilerConfig:
    compiler_config = load_compiler_config(config) if config else CompilerConfig()
    if equation_cache is not None:
        compiler_config.equation_cache = equation_cache
    return compiler_config


@app.command(name="compile", help="Compile a chapter into JSON and step HTML files.")
def compile_command(
    source: Path,
    *,
    doc_id: typ.Annotated[
        str | None,
        Parameter(help="Document identifier (defaults to the file stem)"),
    ] = None,
    output_dir: typ.Annotated[
        Path,
        Parameter(help="Folder receiving the output", env_var="TEXTBOOK_OUTPUT_DIR"),
    ] = DEFAULT_OUTPUT_DIR,
    config: typ.Annotated[
        Path | None,
        Parameter(help="Path to compiler config", env_var="TEXTBOOK_CONFIG"),
    ] = None,
    base_dir: typ.Annotated[
        Path | None,
        Parameter(help="Folder used to resolve template includes"),
    ] = None,
    equation_cache: typ.Annotated[
        Path | None,
        Parameter(
            help="Override the equation cache file",
            env_var="TEXTBOOK_EQUATION_CACHE",
        ),
    ] = None,
    verbose: typ.Annotated[bool, Parameter(help="Log pipeline progress")] = False,
) -> None:
    """Compile one chapter and write its artifacts.

    Parameters
    ----------
    source : Path
        Chapter Markdown file.
    doc_id : str or None, optional
        Document identifier used for asset paths and output names; defaults
        to the stem of ``source``.
    output_dir : Path, optional
        Folder receiving ``<doc-id>.json`` and the ``<doc-id>/`` step folder.
    config : Path or None, optional
        Compiler configuration YAML; built-in defaults apply when omitted.
    base_dir : Path or None, optional
        Folder for ``{% include %}`` lookups; defaults to the folder holding
        ``source``.
    equation_cache : Path or None, optional
        Equation cache file, overriding the configured one.
    verbose : bool, optional
        Enable debug logging.

    Returns
    -------
    None
        Writes the JSON model and one HTML file per step, printing each path.

    Raises
    ------
    CompileError
        If the chapter is structurally invalid.
    CompilerConfigError
        If the configuration file is invalid.
    """
    _configure_logging(verbose=verbose)
    compiler_config = _resolve_config(config, equation_cache)
    document_id = doc_id or source.stem
    text = source.read_text(encoding="utf-8")
    renderer = build_equation_renderer(compiler_config)

    compiled = compile_document_sync(
        document_id,
        text,
        base_dir or source.parent,
        config=compiler_config,
        equation_renderer=renderer,
    )
    cache = getattr(renderer, "cache", None)
    if cache is not None:
        cache.save()

    output_dir.mkdir(parents=True, exist_ok=True)
    model_path = output_dir / f"{document_id}.json"
    model_path.write_bytes(compiled.to_json())
    written = [model_path]
    step_dir = output_dir / document_id
    step_dir.mkdir(parents=True, exist_ok=True)
    for step_id, markup in compiled.steps_html.items():
        step_path = step_dir / f"{step_id}.html"
        step_path.write_text(markup + "\n", encoding="utf-8")
        written.append(step_path)
    for path in written:
        print(f"wrote {_format_path(path)}")


@app.command(name="fragment", help="Compile a Markdown snippet to minified HTML.")
def fragment_command(
    source: Path,
    *,
    output: typ.Annotated[
        Path | None,
        Parameter(help="Write the markup here instead of printing it"),
    ] = None,
    config: typ.Annotated[
        Path | None,
        Parameter(help="Path to compiler config", env_var="TEXTBOOK_CONFIG"),
    ] = None,
    verbose: typ.Annotated[bool, Parameter(help="Log pipeline progress")] = False,
) -> None:
    """Compile a short snippet such as a glossary or biography entry.

    Parameters
    ----------
    source : Path
        Markdown file holding the snippet.
    output : Path or None, optional
        Destination file; the markup is printed when omitted.
    config : Path or None, optional
        Compiler configuration YAML.
    verbose : bool, optional
        Enable debug logging.

    Returns
    -------
    None
        Prints the markup, or writes it to ``output``.
    """
    _configure_logging(verbose=verbose)
    compiler_config = _resolve_config(config, None)
    markup = asyncio.run(
        compile_fragment(
            source.read_text(encoding="utf-8"),
            base_dir=source.parent,
            config=compiler_config,
        )
    )
    if output is None:
        print(markup)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(markup + "\n", encoding="utf-8")
    print(f"wrote {_format_path(output)}")


def main() -> None:
    """Invoke the Cyclopts application that powers the `textbook` console command.

    Parameters
    ----------
    None

    Returns
    -------
    None
        This function executes for its side effects of parsing CLI arguments
        and running the requested subcommand.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
