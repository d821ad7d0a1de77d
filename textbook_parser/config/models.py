"""Typed dataclasses describing compiler configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path  # noqa: TC003 - used for runtime type metadata

from textbook_parser._constants import (
    CODE_LANGUAGE_CLASSES,
    DEFAULT_ASSET_PREFIX,
    DEFAULT_EMOJI_IMAGE,
)


class CompilerConfigError(ValueError):
    """Raised when the compiler configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class DurationConfig:
    """Constants used to estimate how long a section takes to work through.

    Attributes
    ----------
    baseline_minutes : float
        Fixed allowance added to every section.
    words_per_minute : float
        Reading speed applied to the visible text of the section.
    minutes_per_goal : float
        Allowance added for each interactive goal.
    bucket_minutes : int
        Estimates are rounded up to a multiple of this value.
    minimum_minutes : int
        Floor applied after rounding.
    """

    baseline_minutes: float = 1.0
    words_per_minute: float = 75.0
    minutes_per_goal: float = 0.5
    bucket_minutes: int = 5
    minimum_minutes: int = 5


@dc.dataclass(slots=True)
class CompilerConfig:
    """Settings shared by every compile call of a build."""

    asset_prefix: str = DEFAULT_ASSET_PREFIX
    emoji_image: str = DEFAULT_EMOJI_IMAGE
    highlight_code: bool = True
    code_languages: dict[str, str] = dc.field(
        default_factory=lambda: dict(CODE_LANGUAGE_CLASSES)
    )
    duration: DurationConfig = dc.field(default_factory=DurationConfig)
    equation_cache: Path | None = None

    def asset_path(self, doc_id: str) -> str:
        """Return the resource prefix that replaces ``images/`` for ``doc_id``."""
        return self.asset_prefix.format(doc_id=doc_id)


__all__ = ["CompilerConfig", "CompilerConfigError", "DurationConfig"]
