"""Mutable state owned by a single compile call."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .config import CompilerConfig
from .equations import EquationTable
from .templating import TemplateRenderer


@dc.dataclass(slots=True)
class StepState:
    """Metadata collected for one step while the source is parsed."""

    metadata: dict[str, typ.Any] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class CompileContext:
    """Everything the Markdown hooks and DOM passes share for one document.

    A new context is created for every compile call, so independent documents
    can be compiled concurrently without sharing any of this state.

    Attributes
    ----------
    doc_id : str
        Identifier of the document being compiled; empty for fragments.
    config : CompilerConfig
        Build-wide settings.
    templates : TemplateRenderer
        Tag shorthand and template block renderer, including the running
        macro prelude of this document.
    equations : EquationTable
        Equation placeholders issued so far.
    glossary : set[str]
        Glossary term ids referenced through ``gloss:`` links.
    bios : set[str]
        Biography ids referenced through ``bio:`` links.
    steps : list[StepState]
        One entry per step; the source always has at least one.
    metadata : dict[str, Any]
        Metadata that precedes all content of the document.
    """

    doc_id: str = ""
    config: CompilerConfig = dc.field(default_factory=CompilerConfig)
    templates: TemplateRenderer = dc.field(default_factory=TemplateRenderer)
    equations: EquationTable = dc.field(default_factory=EquationTable)
    glossary: set[str] = dc.field(default_factory=set)
    bios: set[str] = dc.field(default_factory=set)
    steps: list[StepState] = dc.field(default_factory=lambda: [StepState()])
    metadata: dict[str, typ.Any] = dc.field(default_factory=dict)

    @property
    def current_step(self) -> StepState:
        """Return the step that is currently being parsed."""
        return self.steps[-1]

    def start_step(self) -> StepState:
        """Open a new step after a top-level horizontal rule."""
        step = StepState()
        self.steps.append(step)
        return step

    def merge_metadata(
        self, values: dict[str, typ.Any], *, document: bool = False
    ) -> None:
        """Merge ``values`` into the current step, last write winning.

        Parameters
        ----------
        values : dict[str, Any]
            Parsed metadata block.
        document : bool, optional
            Also merge into the document metadata; used for blocks that
            precede all content.
        """
        self.current_step.metadata.update(values)
        if document:
            self.metadata.update(values)


__all__ = ["CompileContext", "StepState"]
