"""Dataclasses describing a compiled textbook chapter."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import msgspec


@dc.dataclass(slots=True)
class Step:
    """One navigable unit of a chapter, delimited by horizontal rules.

    Attributes
    ----------
    id : str
        Step identifier; ``step-<index>`` unless set through metadata.
    section_id : str or None
        Id of the owning section; ``None`` for steps that precede every section.
    goals : list[str]
        Explicit goal ids from metadata followed by generated ones.
    rendered_markup : str
        Minified outer markup of the step container.
    class_name : str or None
        CSS class list requested through metadata.
    metadata : dict[str, Any]
        Every key merged into the step from metadata blocks.
    """

    id: str
    section_id: str | None
    goals: list[str]
    rendered_markup: str
    class_name: str | None = None
    metadata: dict[str, typ.Any] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class Section:
    """A run of consecutive steps opened by a section heading."""

    id: str
    title: str
    status: str = ""
    background: str = ""
    goal_count: int = 0
    duration_minutes: int = 0
    step_ids: list[str] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class Document:
    """Structured model of a chapter returned to the caller."""

    title: str
    sections: list[Section]
    steps: list[Step]
    total_goals: int
    metadata: dict[str, typ.Any] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class CompiledDocument:
    """Everything a single compile call produces.

    Attributes
    ----------
    document : Document
        Sections, steps, and goal totals.
    steps_html : dict[str, str]
        Rendered markup keyed by step id.
    sections_html : dict[str, str]
        Concatenated step markup keyed by section id.
    glossary : set[str]
        Glossary term ids referenced through ``gloss:`` links.
    bios : set[str]
        Biography ids referenced through ``bio:`` links.
    """

    document: Document
    steps_html: dict[str, str]
    sections_html: dict[str, str]
    glossary: set[str] = dc.field(default_factory=set)
    bios: set[str] = dc.field(default_factory=set)

    def to_json(self) -> bytes:
        """Encode the compile result as JSON with sorted cross-reference lists."""
        payload = {
            "document": self.document,
            "steps_html": self.steps_html,
            "sections_html": self.sections_html,
            "glossary": sorted(self.glossary),
            "bios": sorted(self.bios),
        }
        return msgspec.json.encode(payload)


__all__ = ["CompiledDocument", "Document", "Section", "Step"]
