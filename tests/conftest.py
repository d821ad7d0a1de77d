"""Shared fixtures for the textbook_parser test suite."""

from __future__ import annotations

import pytest

from textbook_parser.equations import EquationRenderError


class FakeEquationRenderer:
    """Deterministic renderer recording every expression it is asked for."""

    def __init__(self, failures: tuple[str, ...] = ()) -> None:
        self.failures = set(failures)
        self.calls: list[tuple[str, bool]] = []

    async def render(self, expression: str, *, inline: bool) -> str:
        self.calls.append((expression, inline))
        if expression in self.failures:
            msg = f"cannot render {expression}"
            raise EquationRenderError(msg)
        mode = "inline" if inline else "block"
        return f'<math display="{mode}"><mi>{expression}</mi></math>'


@pytest.fixture
def fake_renderer() -> FakeEquationRenderer:
    """Return a renderer that wraps expressions in a ``<math>`` element."""
    return FakeEquationRenderer()


@pytest.fixture
def renderer_factory() -> type[FakeEquationRenderer]:
    """Return the fake renderer class for tests that need custom failures."""
    return FakeEquationRenderer
