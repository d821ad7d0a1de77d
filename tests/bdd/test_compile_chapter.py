"""Behaviour tests for compiling whole chapters.

These pytest-bdd scenarios drive :func:`textbook_parser.compile_document_sync`
through the feature file ``compile_chapter.feature``. They check the document
title, the step split on horizontal rules, goal collection for blanks, equation
substitution, and glossary bookkeeping across steps.

Usage
-----
Run ``pytest tests/bdd/test_compile_chapter.py -v`` after installing the test
extra (``pip install -e .[test]``). Equations go through the fake renderer
from ``tests/conftest.py``, so the scenarios need no notation converter.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, scenarios, then, when

from textbook_parser import compile_document_sync

if typ.TYPE_CHECKING:
    from conftest import FakeEquationRenderer

    from textbook_parser import CompiledDocument

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "compile_chapter.feature"
)
scenarios(FEATURE_FILE)


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


@given("a chapter with a title, a blank, and an equation")
def given_titled_chapter(scenario_state: dict[str, object]) -> None:
    """Store a two-step chapter with a blank and an inline equation."""
    scenario_state["source"] = "# Title\n\nHello [[world]].\n\n---\n\nBye $x+1$."


@given("a chapter that links the same glossary term on two steps")
def given_glossary_chapter(scenario_state: dict[str, object]) -> None:
    """Store a chapter that mentions one glossary term three times."""
    scenario_state["source"] = (
        "A [photon](gloss:photon) and [another](gloss:photon).\n\n---\n\n"
        "Again [light](gloss:photon)."
    )


@when("I compile the chapter")
def when_compile(
    scenario_state: dict[str, object], fake_renderer: FakeEquationRenderer
) -> None:
    """Compile the stored chapter with the fake equation renderer."""
    source = typ.cast("str", scenario_state["source"])
    scenario_state["compiled"] = compile_document_sync(
        "demo", source, equation_renderer=fake_renderer
    )


@then('the document is titled "Title"')
def then_titled(scenario_state: dict[str, object]) -> None:
    """Verify the first level-one heading became the document title."""
    compiled = typ.cast("CompiledDocument", scenario_state["compiled"])
    assert compiled.document.title == "Title"


@then("the chapter has two steps with one blank goal")
def then_two_steps(scenario_state: dict[str, object]) -> None:
    """Verify the rule split the chapter and the blank became a goal."""
    compiled = typ.cast("CompiledDocument", scenario_state["compiled"])
    steps = compiled.document.steps
    assert [step.id for step in steps] == ["step-0", "step-1"]
    assert [step.goals for step in steps] == [["blank-0"], []]
    assert compiled.document.total_goals == 1


@then("the second step shows the rendered equation")
def then_equation(scenario_state: dict[str, object]) -> None:
    """Verify the equation placeholder was swapped for rendered math."""
    compiled = typ.cast("CompiledDocument", scenario_state["compiled"])
    soup = BeautifulSoup(compiled.steps_html["step-1"], "html.parser")
    math = soup.find("math")
    assert math is not None, "expected rendered math in the second step"
    assert math.get_text() == "x+1"
    assert "XEQUATIONX" not in compiled.steps_html["step-1"]


@then("the glossary lists the term once")
def then_glossary_once(scenario_state: dict[str, object]) -> None:
    """Verify repeated glossary links produce a single glossary entry."""
    compiled = typ.cast("CompiledDocument", scenario_state["compiled"])
    assert compiled.glossary == {"photon"}
