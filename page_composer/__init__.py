"""Immutable page composition core for a visual storefront page builder.

The package turns editing intents (add an element, change a row layout, set a
mobile font size) into new document snapshots, resolves responsive style
inheritance and keeps column widths summing to 100%.

Exports
-------
- ``CompositionEngine``: pure document-to-document mutations.
- ``EditingSession``: selection, breakpoint context and undo history.
- ``Document``: the root of the composed page tree.
- ``app``: Cyclopts application behind the ``pages-compose`` command.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from page_composer import CompositionEngine, Document
>>> engine = CompositionEngine()
>>> doc = engine.add_section(Document())
>>> len(doc.sections)
1
"""

from __future__ import annotations

from .cli import app, main
from .document import Document
from .engine import CompositionEngine
from .session import EditingSession

__all__ = ["CompositionEngine", "Document", "EditingSession", "app", "main"]
