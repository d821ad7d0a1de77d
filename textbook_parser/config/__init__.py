"""Load and validate compiler configuration YAML for textbook builds.

This subpackage parses an optional ``textbook.yaml`` file, merges the built-in
defaults with its overrides (asset and emoji URL templates, the code language
table, duration constants, and the equation cache location), and produces the
:class:`CompilerConfig` dataclass consumed by
:func:`textbook_parser.compile_document`. The primary entry point is
:func:`load_compiler_config`.

Examples
--------
>>> from pathlib import Path
>>> from textbook_parser.config import load_compiler_config
>>> config = load_compiler_config(Path("textbook.yaml"))  # doctest: +SKIP
>>> config.asset_path("circles")  # doctest: +SKIP
'/resources/circles/images/'
"""

from .loader import build_compiler_config, load_compiler_config
from .models import CompilerConfig, CompilerConfigError, DurationConfig

__all__ = [
    "CompilerConfig",
    "CompilerConfigError",
    "DurationConfig",
    "build_compiler_config",
    "load_compiler_config",
]
