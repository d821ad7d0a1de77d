"""Small DOM clean-ups applied after attributes are injected."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag


def _add_classes(element: Tag, names: list[str]) -> None:
    classes = list(element.get("class") or [])
    classes.extend(name for name in names if name not in classes)
    element["class"] = classes


def propagate_parent_classes(root: Tag) -> None:
    """Move ``parent="a b"`` attributes onto the parent element as classes."""
    for element in root.select("[parent]"):
        names = str(element["parent"]).split()
        del element["parent"]
        parent = element.parent
        if isinstance(parent, Tag) and not isinstance(parent, BeautifulSoup):
            _add_classes(parent, names)


def remove_empty_table_headers(root: Tag) -> None:
    """Drop ``<thead>`` elements without visible text."""
    for thead in root.find_all("thead"):
        if not thead.get_text().strip():
            thead.decompose()


def promote_table_row_classes(root: Tag) -> None:
    """Move the class of a cell in an otherwise empty row onto its table.

    Authors set a table class by ending the table with a row whose only
    content is a ``{.class}`` shorthand; the row itself is removed.
    """
    for cell in root.select("td[class]"):
        if cell.decomposed:
            continue
        row = cell.parent
        if row is None or row.get_text().strip():
            continue
        table = row.find_parent("table")
        if table is None:
            continue
        table["class"] = cell["class"]
        row.decompose()


def clean_up(root: Tag) -> None:
    """Run every clean-up in order."""
    propagate_parent_classes(root)
    remove_empty_table_headers(root)
    promote_table_row_classes(root)


__all__ = [
    "clean_up",
    "promote_table_row_classes",
    "propagate_parent_classes",
    "remove_empty_table_headers",
]
