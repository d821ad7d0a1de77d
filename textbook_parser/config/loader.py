"""Load compiler configuration YAML into typed dataclasses."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from textbook_parser._constants import CODE_LANGUAGE_CLASSES

from .models import CompilerConfig, CompilerConfigError, DurationConfig

KNOWN_KEYS = frozenset(
    {
        "asset_prefix",
        "emoji_image",
        "highlight_code",
        "code_languages",
        "duration",
        "equation_cache",
    }
)


def load_compiler_config(path: Path) -> CompilerConfig:
    """Load the YAML file describing how chapters are compiled.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``textbook.yaml``).

    Returns
    -------
    CompilerConfig
        Defaults merged with the overrides found in the file. A relative
        ``equation_cache`` path is resolved against the file's directory.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    CompilerConfigError
        If the file is not a mapping, names unknown keys, or holds values of
        the wrong shape.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from textbook_parser.config import load_compiler_config
    >>> config = load_compiler_config(Path("textbook.yaml"))  # doctest: +SKIP
    >>> config.duration.words_per_minute  # doctest: +SKIP
    75.0
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise CompilerConfigError(msg)
    return build_compiler_config(dict(loaded), base_dir=path.parent)


def build_compiler_config(
    raw: dict[str, typ.Any], *, base_dir: Path | None = None
) -> CompilerConfig:
    """Build a :class:`CompilerConfig` from an already parsed mapping."""
    unknown = sorted(set(raw) - KNOWN_KEYS)
    if unknown:
        msg = f"Unknown configuration keys: {', '.join(unknown)}."
        raise CompilerConfigError(msg)

    defaults = CompilerConfig()
    asset_prefix = _string_field(raw, "asset_prefix", defaults.asset_prefix)
    _check_template(asset_prefix, "asset_prefix", doc_id="doc")
    emoji_image = _string_field(raw, "emoji_image", defaults.emoji_image)
    _check_template(emoji_image, "emoji_image", codepoint="1f600")

    highlight = raw.get("highlight_code", defaults.highlight_code)
    if not isinstance(highlight, bool):
        msg = "highlight_code must be a boolean."
        raise CompilerConfigError(msg)

    return CompilerConfig(
        asset_prefix=asset_prefix,
        emoji_image=emoji_image,
        highlight_code=highlight,
        code_languages=_build_code_languages(raw.get("code_languages")),
        duration=_build_duration_config(raw.get("duration")),
        equation_cache=_resolve_cache_path(raw.get("equation_cache"), base_dir),
    )


def _string_field(raw: dict[str, typ.Any], key: str, default: str) -> str:
    value = raw.get(key, default)
    if not isinstance(value, str) or not value:
        msg = f"{key} must be a non-empty string."
        raise CompilerConfigError(msg)
    return value


def _check_template(template: str, key: str, **fields: str) -> None:
    """Ensure ``template`` only references the placeholders in ``fields``."""
    try:
        template.format(**fields)
    except (KeyError, IndexError, ValueError) as exc:
        msg = f"{key} has an invalid placeholder: {exc}."
        raise CompilerConfigError(msg) from exc


def _build_code_languages(payload: object) -> dict[str, str]:
    languages = dict(CODE_LANGUAGE_CLASSES)
    if payload is None:
        return languages
    if not isinstance(payload, dict):
        msg = "code_languages must map short tags to class names."
        raise CompilerConfigError(msg)
    for tag, class_name in payload.items():
        if not isinstance(class_name, str) or not class_name:
            msg = f"code_languages entry '{tag}' must be a non-empty string."
            raise CompilerConfigError(msg)
        languages[str(tag)] = class_name
    return languages


def _build_duration_config(payload: object) -> DurationConfig:
    if payload is None:
        return DurationConfig()
    if not isinstance(payload, dict):
        msg = "duration must be a mapping."
        raise CompilerConfigError(msg)
    field_names = {field.name for field in dc.fields(DurationConfig)}
    unknown = sorted(set(payload) - field_names)
    if unknown:
        msg = f"Unknown duration keys: {', '.join(unknown)}."
        raise CompilerConfigError(msg)
    values: dict[str, float] = {}
    for name, value in payload.items():
        if isinstance(value, bool) or not isinstance(value, int | float):
            msg = f"duration.{name} must be a number."
            raise CompilerConfigError(msg)
        if value < 0:
            msg = f"duration.{name} must not be negative."
            raise CompilerConfigError(msg)
        values[name] = value
    config = DurationConfig(**values)  # type: ignore[arg-type]
    if config.words_per_minute <= 0 or config.bucket_minutes <= 0:
        msg = "duration.words_per_minute and duration.bucket_minutes must be positive."
        raise CompilerConfigError(msg)
    return config


def _resolve_cache_path(value: object, base_dir: Path | None) -> Path | None:
    if value is None:
        return None
    if not isinstance(value, str) or not value:
        msg = "equation_cache must be a path string."
        raise CompilerConfigError(msg)
    path = Path(value)
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    return path


__all__ = ["build_compiler_config", "load_compiler_config"]
