"""Text rewrites applied to chapter source before any parsing."""

from __future__ import annotations

import re
import typing as typ

if typ.TYPE_CHECKING:
    from .config import CompilerConfig

ASSET_PATH_PATTERN = re.compile(r'(url\(|src="|href="|background="|poster=")images/')
DATA_ATTRIBUTE_PATTERN = re.compile(r"(?<![\w-])(when|delay|animation|duration)=")
HEADERLESS_TABLE_PATTERN = re.compile(r"\n\n\|(.*)\n\|(.*)\n")
SEPARATOR_ROW_PATTERN = re.compile(r"^[\s|:-]+$")


def rewrite_asset_paths(source: str, prefix: str) -> str:
    """Point relative ``images/`` references at the chapter's resource prefix."""
    return ASSET_PATH_PATTERN.sub(lambda match: f"{match.group(1)}{prefix}", source)


def rename_data_attributes(source: str) -> str:
    """Rename animation attributes (``delay=``, ``when=``...) to ``data-*``."""
    return DATA_ATTRIBUTE_PATTERN.sub(r"data-\1=", source)


def add_missing_table_headers(source: str) -> str:
    """Give Markdown tables without a separator row an empty header.

    Python-Markdown only recognizes tables that start with a header row and a
    separator row. Tables written without one get a blank header, which the
    cleanup pass removes again once the markup is built.
    """

    def _replace(match: re.Match[str]) -> str:
        first, second = match.groups()
        header = ""
        if not SEPARATOR_ROW_PATTERN.match(second):
            columns = len(first.split(" | "))
            header = f"|{' |' * columns}\n|{' - |' * columns}\n"
        return f"\n\n{header}|{first}\n|{second}\n"

    return HEADERLESS_TABLE_PATTERN.sub(_replace, source)


def prepare_source(source: str, doc_id: str, config: CompilerConfig) -> str:
    """Apply every source-level rewrite in order."""
    text = source.replace("\r\n", "\n")
    text = rewrite_asset_paths(text, config.asset_path(doc_id))
    text = rename_data_attributes(text)
    return add_missing_table_headers(text)


__all__ = [
    "add_missing_table_headers",
    "prepare_source",
    "rename_data_attributes",
    "rewrite_asset_paths",
]
