from __future__ import annotations

import pytest

from page_composer.document import Document
from page_composer.engine import CompositionEngine
from page_composer.ids import SequentialIds


@pytest.fixture
def engine() -> CompositionEngine:
    """Return an engine with deterministic ids and anchors."""
    anchors = SequentialIds("a")
    return CompositionEngine(
        new_id=SequentialIds("n"),
        new_anchor=lambda prefix: f"{prefix}-{anchors()}",
    )


@pytest.fixture
def page(engine: CompositionEngine) -> Document:
    """One section holding a ``1-1`` row with a paragraph in the first column."""
    document = engine.add_section(Document())
    section = document.sections[0]
    document = engine.add_row(document, section.id, "1-1")
    row = document.sections[0].rows[0]
    return engine.add_element(
        document, section.id, row.id, row.columns[0].id, "paragraph"
    )
