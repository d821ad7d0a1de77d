"""Derive interactive goals and duration estimates from step markup.

Goal ids are ``<kind>-<index>`` with a per-step, per-kind index, or the bare
kind for singleton widgets. Queries run in a fixed order:

========== ============================================================
kind       elements
========== ============================================================
blank      ``x-blank``, ``x-blank-input``
next       ``.next-step`` buttons
var        ``x-var``
slider     ``x-slider``
sortable   ``x-sortable``
equation   ``x-equation``
slide      ``.slide`` and ``.legend`` of each ``x-slideshow`` but the first
quill      ``x-quill`` (singleton)
gameplay   ``x-gameplay`` (singleton)
code-...   ``x-code-checker`` (singleton, kind ``code-checker``)
picker     ``x-picker .item:not([data-error])``
========== ============================================================
"""

from __future__ import annotations

import dataclasses as dc
import math
import typing as typ

if typ.TYPE_CHECKING:
    from bs4 import Tag

    from .config import DurationConfig

GOAL_ATTRIBUTE = "data-goal"


def _select(selector: str) -> typ.Callable[[Tag], list[Tag]]:
    def _find(step: Tag) -> list[Tag]:
        return list(step.select(selector))

    return _find


def _slides(step: Tag) -> list[Tag]:
    found: list[Tag] = []
    for slideshow in step.select("x-slideshow"):
        found.extend(slideshow.select(".slide, .legend")[1:])
    return found


@dc.dataclass(frozen=True, slots=True)
class GoalQuery:
    """One kind of interactive element that counts as a goal."""

    kind: str
    find: typ.Callable[[Tag], list[Tag]]
    singleton: bool = False


GOAL_QUERIES: tuple[GoalQuery, ...] = (
    GoalQuery("blank", _select("x-blank, x-blank-input")),
    GoalQuery("next", _select(".next-step")),
    GoalQuery("var", _select("x-var")),
    GoalQuery("slider", _select("x-slider")),
    GoalQuery("sortable", _select("x-sortable")),
    GoalQuery("equation", _select("x-equation")),
    GoalQuery("slide", _slides),
    GoalQuery("quill", _select("x-quill"), singleton=True),
    GoalQuery("gameplay", _select("x-gameplay"), singleton=True),
    GoalQuery("code-checker", _select("x-code-checker"), singleton=True),
    GoalQuery("picker", _select("x-picker .item:not([data-error])")),
)


def _next_goal(query: GoalQuery, used: set[str]) -> str:
    if query.singleton and query.kind not in used:
        return query.kind
    index = 1 if query.singleton else 0
    while f"{query.kind}-{index}" in used:
        index += 1
    return f"{query.kind}-{index}"


def derive_goals(step: Tag, explicit: typ.Sequence[str] = ()) -> list[str]:
    """Assign goal ids to the interactive elements of ``step``.

    Parameters
    ----------
    step : Tag
        Step container; matched elements receive a ``data-goal`` attribute.
    explicit : Sequence[str], optional
        Goal ids requested through metadata. They come first and generated
        ids never reuse them.

    Returns
    -------
    list[str]
        Explicit ids followed by one generated id per matched element. Every
        element is counted once even when several queries match it.
    """
    goals: list[str] = []
    for goal in explicit:
        if goal not in goals:
            goals.append(goal)
    used = set(goals)
    seen: set[int] = set()
    for query in GOAL_QUERIES:
        for element in query.find(step):
            if id(element) in seen:
                continue
            seen.add(id(element))
            goal = _next_goal(query, used)
            used.add(goal)
            goals.append(goal)
            element[GOAL_ATTRIBUTE] = goal
    return goals


def count_words(text: str) -> int:
    """Return the number of whitespace separated words in ``text``."""
    return len(text.split())


def estimate_duration(words: int, goals: int, settings: DurationConfig) -> int:
    """Estimate the minutes a section takes.

    The baseline, the reading time for ``words`` and the per-goal allowance
    are added up, rounded up to a multiple of the bucket size, and floored at
    the configured minimum.

    Examples
    --------
    >>> from textbook_parser.config import DurationConfig
    >>> estimate_duration(300, 4, DurationConfig())
    10
    >>> estimate_duration(0, 0, DurationConfig())
    5
    """
    minutes = (
        settings.baseline_minutes
        + words / settings.words_per_minute
        + goals * settings.minutes_per_goal
    )
    bucket = settings.bucket_minutes
    rounded = math.ceil(minutes / bucket) * bucket
    return max(int(rounded), int(settings.minimum_minutes))


__all__ = [
    "GOAL_QUERIES",
    "GoalQuery",
    "count_words",
    "derive_goals",
    "estimate_duration",
]
