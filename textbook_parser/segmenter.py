"""Finish steps and sections once the chapter markup is complete.

The Markdown engine wraps every step in an ``<x-step>`` element and records
each step's metadata in the compile context. This pass walks those elements
in order and:

* assigns step ids (``step-<index>`` unless metadata sets ``id``) and sets
  the ``id``, ``goals`` and ``class`` attributes on the container;
* opens a section at the first ``h1`` of a step, removing the heading. The
  step holding the title marker opens a section named after the document
  title when no section has started yet and the step has no ``h1``;
* validates step and section ids, which must not contain ``.`` and must be
  unique;
* derives goals for steps inside a section (steps before the first section
  carry none), sums them per section, estimates section durations, and
  records the minified markup of every step.
"""

from __future__ import annotations

import logging
import re
import typing as typ

from ._constants import STEP_TAG, TITLE_MARKER_TAG
from .context import StepState
from .errors import IdentifierError
from .goals import count_words, derive_goals, estimate_duration
from .minify import minify_markup
from .models import CompiledDocument, Document, Section, Step

if typ.TYPE_CHECKING:
    from bs4 import BeautifulSoup, Tag

    from .context import CompileContext

logger = logging.getLogger(__name__)

RESERVED_SEPARATOR = "."
SLUG_WHITESPACE_PATTERN = re.compile(r"\s")
SLUG_STRIP_PATTERN = re.compile(r"[^\w-]", re.ASCII)


def slugify_section(title: str) -> str:
    """Derive a section id from its heading text.

    Examples
    --------
    >>> slugify_section("Circles and Pi!")
    'circles-and-pi'
    """
    slug = SLUG_WHITESPACE_PATTERN.sub("-", title.strip().lower())
    return SLUG_STRIP_PATTERN.sub("", slug) or "section"


def _unique_slug(base: str, used: set[str]) -> str:
    """Generate a unique slug, appending numeric suffixes when needed."""
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


def _claim_identifier(value: str, kind: str, used: set[str]) -> str:
    """Validate an author supplied id and reserve it."""
    if RESERVED_SEPARATOR in value:
        msg = f"The {kind} id {value!r} must not contain {RESERVED_SEPARATOR!r}."
        raise IdentifierError(msg, snippet=value)
    if value in used:
        msg = f"The {kind} id {value!r} is used more than once."
        raise IdentifierError(msg, snippet=value)
    used.add(value)
    return value


def _goal_list(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list | tuple):
        return [str(item) for item in value]
    return str(value).split()


def _text(node: Tag) -> str:
    return " ".join(node.get_text(" ").split())


class _SectionBuilder:
    """Accumulate sections and their markup while steps are visited."""

    def __init__(self) -> None:
        self.sections: list[Section] = []
        self.markup: dict[str, str] = {}
        self.words: dict[str, int] = {}
        self.used_ids: set[str] = set()

    @property
    def current(self) -> Section | None:
        return self.sections[-1] if self.sections else None

    def open(self, title: str, metadata: dict[str, typ.Any]) -> Section:
        explicit = metadata.get("section")
        if explicit:
            section_id = _claim_identifier(str(explicit), "section", self.used_ids)
        else:
            section_id = _unique_slug(slugify_section(title), self.used_ids)
        section = Section(
            id=section_id,
            title=title,
            status=str(metadata.get("sectionStatus") or ""),
        )
        self.sections.append(section)
        self.markup[section_id] = ""
        self.words[section_id] = 0
        logger.debug("Opened section %s", section_id)
        return section


def segment_document(soup: BeautifulSoup, context: CompileContext) -> CompiledDocument:
    """Turn the realized chapter markup into the document model.

    Parameters
    ----------
    soup : BeautifulSoup
        Chapter markup whose top-level children are ``<x-step>`` elements.
    context : CompileContext
        Context holding per-step metadata, document metadata, and the
        cross-reference sets.

    Returns
    -------
    CompiledDocument
        Document model, per-step and per-section markup, and references.

    Raises
    ------
    IdentifierError
        If a step or section id contains ``.`` or is used twice.
    """
    title_marker = soup.find(TITLE_MARKER_TAG)
    title = _text(title_marker) if title_marker is not None else ""
    builder = _SectionBuilder()
    steps: list[Step] = []
    steps_html: dict[str, str] = {}
    used_step_ids: set[str] = set()

    for index, node in enumerate(soup.find_all(STEP_TAG, recursive=False)):
        state = context.steps[index] if index < len(context.steps) else StepState()
        metadata = state.metadata
        step_id = _claim_identifier(
            str(metadata.get("id") or f"step-{index}"), "step", used_step_ids
        )
        explicit_goals = _goal_list(metadata.get("goals"))
        class_name = str(metadata["class"]) if metadata.get("class") else None
        node["id"] = step_id
        if explicit_goals:
            node["goals"] = " ".join(explicit_goals)
        if class_name:
            node["class"] = class_name

        heading = node.find("h1")
        marker = node.find(TITLE_MARKER_TAG)
        if heading is not None:
            builder.open(_text(heading), metadata)
            heading.decompose()
        elif marker is not None and builder.current is None:
            builder.open(title, metadata)
        if marker is not None:
            marker.decompose()

        section = builder.current
        if section is not None and metadata.get("sectionBackground"):
            section.background = str(metadata["sectionBackground"])

        goals: list[str] = []
        if section is not None:
            goals = derive_goals(node, explicit_goals)
        else:
            logger.debug("Step %s precedes every section; goals ignored", step_id)
        words = count_words(node.get_text(" "))
        markup = minify_markup(node)
        steps_html[step_id] = markup
        if section is not None:
            section.step_ids.append(step_id)
            section.goal_count += len(goals)
            builder.words[section.id] += words
            builder.markup[section.id] += markup
        steps.append(
            Step(
                id=step_id,
                section_id=section.id if section is not None else None,
                goals=goals,
                rendered_markup=markup,
                class_name=class_name,
                metadata=dict(metadata),
            )
        )

    for section in builder.sections:
        section.duration_minutes = estimate_duration(
            builder.words[section.id], section.goal_count, context.config.duration
        )

    document = Document(
        title=title,
        sections=builder.sections,
        steps=steps,
        total_goals=sum(section.goal_count for section in builder.sections),
        metadata=dict(context.metadata),
    )
    return CompiledDocument(
        document=document,
        steps_html=steps_html,
        sections_html=builder.markup,
        glossary=set(context.glossary),
        bios=set(context.bios),
    )


__all__ = ["segment_document", "slugify_section"]
