"""Behaviour tests for structural page edits using pytest-bdd.

These scenarios drive :class:`~page_composer.engine.CompositionEngine`
through element duplication and row layout changes, checking that each edit
yields a new document while the previous snapshot stays intact.

Usage
-----
Run ``pytest tests/bdd/test_page_editing.py -v``.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from page_composer.document import Document, iter_nodes, node_ids
from page_composer.engine import CompositionEngine
from page_composer.widths import resolve_column_widths

if typ.TYPE_CHECKING:
    from page_composer.document import Row

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "page_editing.feature"
)
scenarios(FEATURE_FILE)

ScenarioState = dict[str, typ.Any]


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Share the engine and document snapshots between steps."""
    return {}


def _document(scenario_state: ScenarioState) -> Document:
    return typ.cast("Document", scenario_state["document"])


def _row(document: Document) -> Row:
    return document.sections[0].rows[0]


def _add(scenario_state: ScenarioState, column: int, element_type: str) -> None:
    engine = typ.cast("CompositionEngine", scenario_state["engine"])
    document = _document(scenario_state)
    section = document.sections[0]
    row = _row(document)
    scenario_state["document"] = engine.add_element(
        document, section.id, row.id, row.columns[column].id, element_type
    )


@given(parsers.parse('a page with a "{layout}" row'))
def given_page(
    engine: CompositionEngine, scenario_state: ScenarioState, layout: str
) -> None:
    document = engine.add_section(Document())
    document = engine.add_row(document, document.sections[0].id, layout)
    scenario_state["engine"] = engine
    scenario_state["document"] = document


@given(parsers.parse('the first column holds a "{first}" and a "{second}"'))
def given_first_column(scenario_state: ScenarioState, first: str, second: str) -> None:
    _add(scenario_state, 0, first)
    _add(scenario_state, 0, second)


@given(parsers.parse('the second column holds a "{element_type}"'))
def given_second_column(scenario_state: ScenarioState, element_type: str) -> None:
    _add(scenario_state, 1, element_type)


@when(parsers.parse('I duplicate the "{element_type}"'))
def when_duplicate(scenario_state: ScenarioState, element_type: str) -> None:
    engine = typ.cast("CompositionEngine", scenario_state["engine"])
    document = _document(scenario_state)
    target = next(
        element
        for element in _row(document).columns[0].elements
        if element.type == element_type
    )
    scenario_state["previous"] = document
    scenario_state["document"] = engine.duplicate_element(document, target.id)


@when(parsers.parse('I change the row layout to "{layout}"'))
def when_change_layout(scenario_state: ScenarioState, layout: str) -> None:
    engine = typ.cast("CompositionEngine", scenario_state["engine"])
    document = _document(scenario_state)
    scenario_state["previous"] = document
    scenario_state["document"] = engine.change_row_layout(
        document, _row(document).id, layout
    )


@then(parsers.parse('the first column holds "{types}"'))
def then_first_column_holds(scenario_state: ScenarioState, types: str) -> None:
    elements = _row(_document(scenario_state)).columns[0].elements
    assert ", ".join(element.type for element in elements) == types


@then("every node id is unique")
def then_ids_unique(scenario_state: ScenarioState) -> None:
    ids = node_ids(_document(scenario_state))
    assert len(ids) == len(set(ids)), f"duplicate ids in {ids}"


@then("the previous document is unchanged")
def then_previous_unchanged(scenario_state: ScenarioState) -> None:
    previous = typ.cast("Document", scenario_state["previous"])
    elements = _row(previous).columns[0].elements
    assert [element.type for element in elements] == ["heading", "paragraph"]


@then(parsers.re(r"the row has (?P<count>\d+) columns?"), converters={"count": int})
def then_column_count(scenario_state: ScenarioState, count: int) -> None:
    assert len(_row(_document(scenario_state)).columns) == count


@then("the first column is the original first column")
def then_first_column_kept(scenario_state: ScenarioState) -> None:
    previous = typ.cast("Document", scenario_state["previous"])
    assert _row(_document(scenario_state)).columns[0] is _row(previous).columns[0]


@then(parsers.parse('no element of type "{element_type}" remains'))
def then_no_element(scenario_state: ScenarioState, element_type: str) -> None:
    kinds = [
        ref.node.type
        for ref in iter_nodes(_document(scenario_state))
        if ref.kind == "element"
    ]
    assert element_type not in kinds


@then(parsers.parse('the row renders at "{widths}" on "{breakpoint}"'))
def then_row_renders(scenario_state: ScenarioState, widths: str, breakpoint: str) -> None:
    engine = typ.cast("CompositionEngine", scenario_state["engine"])
    row = _row(_document(scenario_state))
    resolved = resolve_column_widths(row, breakpoint, engine.layouts)
    assert " ".join(f"{width:g}" for width in resolved) == widths
