"""Track the node being edited and route panel changes to the engine."""

from __future__ import annotations

import collections
import collections.abc as cabc
import logging
import typing as typ

from . import responsive
from ._constants import BREAKPOINTS, DESKTOP
from .document import Document, find_node
from .engine import CompositionEngine
from .widths import resolve_column_widths

if typ.TYPE_CHECKING:
    from ._constants import Breakpoint, InheritanceSource
    from .document import NodeRef, Row
    from .engine import Patch

logger = logging.getLogger(__name__)

ChangeCallback = cabc.Callable[[Document], None]


class EditingSession:
    """One user's editing context over a sequence of document snapshots.

    The session owns the most recent :class:`Document` and applies intents to
    it strictly in the order they arrive. It also carries the UI context the
    engine deliberately does not know about: the selected node, the active
    breakpoint and whether the surface is in preview mode.

    Parameters
    ----------
    document : Document, optional
        Starting snapshot; an empty document by default.
    engine : CompositionEngine, optional
        Engine used for every mutation.
    breakpoint : {"desktop", "tablet", "mobile"}, optional
        Breakpoint style reads and writes address initially.
    history_limit : int, optional
        Maximum number of undo steps retained.
    on_change : callable, optional
        Called with each newly produced document (including undo and redo).
    """

    def __init__(
        self,
        document: Document | None = None,
        *,
        engine: CompositionEngine | None = None,
        breakpoint: Breakpoint = DESKTOP,
        history_limit: int = 100,
        on_change: ChangeCallback | None = None,
    ) -> None:
        self.engine = engine or CompositionEngine()
        self._document = document if document is not None else Document()
        self._undo: collections.deque[Document] = collections.deque(
            maxlen=max(history_limit, 0)
        )
        self._redo: list[Document] = []
        self._selection: str | None = None
        self._preview = False
        self._on_change = on_change
        self._breakpoint: Breakpoint = DESKTOP
        self.set_breakpoint(breakpoint)

    @property
    def document(self) -> Document:
        return self._document

    @property
    def breakpoint(self) -> Breakpoint:
        return self._breakpoint

    def set_breakpoint(self, breakpoint: Breakpoint) -> None:
        """Switch the breakpoint that style reads and writes address."""
        if breakpoint not in BREAKPOINTS:
            msg = f"Unknown breakpoint '{breakpoint}'; expected one of {BREAKPOINTS}."
            raise ValueError(msg)
        self._breakpoint = breakpoint

    # -- mutation and history ------------------------------------------

    def apply(
        self,
        operation: str | cabc.Callable[..., Document],
        *args: typ.Any,
        **kwargs: typ.Any,
    ) -> Document:
        """Run an engine operation against the current snapshot.

        ``operation`` is an engine method name (``"add_row"``) or any callable
        taking the document first. History is recorded only when a new
        document comes back; a no-op leaves history and listeners untouched.
        """
        action = operation
        if isinstance(operation, str):
            action = getattr(self.engine, operation)
        updated = action(self._document, *args, **kwargs)
        if updated is self._document:
            logger.debug("Operation %r produced no change", operation)
            return updated
        if self._undo.maxlen:
            self._undo.append(self._document)
        self._redo.clear()
        self._replace(updated)
        return updated

    def _replace(self, document: Document) -> None:
        self._document = document
        if self._selection is not None and find_node(document, self._selection) is None:
            self._selection = None
        if self._on_change is not None:
            self._on_change(document)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo(self) -> Document:
        if not self._undo:
            return self._document
        self._redo.append(self._document)
        self._replace(self._undo.pop())
        return self._document

    def redo(self) -> Document:
        if not self._redo:
            return self._document
        self._undo.append(self._document)
        self._replace(self._redo.pop())
        return self._document

    # -- selection ------------------------------------------------------

    @property
    def selection(self) -> str | None:
        return self._selection

    @property
    def selected_node(self) -> NodeRef | None:
        if self._selection is None:
            return None
        return find_node(self._document, self._selection)

    def select(self, node_id: str) -> bool:
        """Select ``node_id``; returns ``False`` in preview mode or for unknown ids."""
        if self._preview or find_node(self._document, node_id) is None:
            return False
        self._selection = node_id
        return True

    def clear_selection(self) -> None:
        self._selection = None

    @property
    def preview(self) -> bool:
        return self._preview

    def set_preview(self, enabled: bool) -> None:
        """Toggle preview mode; entering it drops the selection."""
        self._preview = enabled
        if enabled:
            self._selection = None

    # -- style routing --------------------------------------------------

    def style_value(self, property_name: str, fallback: typ.Any = None) -> typ.Any:
        """Return the selected node's effective value at the active breakpoint."""
        ref = self.selected_node
        if ref is None:
            return fallback
        return responsive.get_effective_value(
            ref.node, property_name, self._breakpoint, fallback
        )

    def style_source(self, property_name: str) -> InheritanceSource:
        ref = self.selected_node
        if ref is None:
            return "none"
        return responsive.inheritance_source(ref.node, property_name, self._breakpoint)

    def style_label(self, property_name: str) -> str:
        return responsive.inheritance_label(self.style_source(property_name))

    def has_style_override(self, property_name: str) -> bool:
        ref = self.selected_node
        if ref is None:
            return False
        return responsive.has_override(ref.node, property_name, self._breakpoint)

    def set_style(self, property_name: str, value: typ.Any) -> Document:
        """Write an override for the selected node at the active breakpoint."""
        if self._selection is None:
            return self._document
        return self.apply(
            "set_style", self._selection, property_name, value, self._breakpoint
        )

    def reset_style(self, property_name: str) -> Document:
        """Drop the active breakpoint's override so the value inherits again."""
        if self._selection is None:
            return self._document
        return self.apply(
            "clear_style", self._selection, property_name, self._breakpoint
        )

    # -- content and width routing -------------------------------------

    def update_content(self, patch: Patch) -> Document:
        """Merge ``patch`` into the selected element's content."""
        ref = self.selected_node
        if ref is None or ref.kind != "element":
            return self._document
        return self.apply("update_element", ref.node.id, {"content": dict(patch)})

    def _selected_row(self) -> Row | None:
        ref = self.selected_node
        if ref is None:
            return None
        if ref.kind == "row":
            return typ.cast("Row", ref.node)
        if ref.kind == "column":
            row_ref = find_node(self._document, ref.path[1])
            return typ.cast("Row", row_ref.node) if row_ref else None
        return None

    def column_widths(self) -> list[float]:
        """Return the widths rendered for the selected row at the active breakpoint."""
        row = self._selected_row()
        if row is None:
            return []
        return resolve_column_widths(row, self._breakpoint, self.engine.layouts)

    def set_column_width(self, index: int, width: object) -> Document:
        """Resize one column of the selected row at the active breakpoint."""
        row = self._selected_row()
        if row is None:
            return self._document
        return self.apply("set_column_width", row.id, index, width, self._breakpoint)


__all__ = ["ChangeCallback", "EditingSession"]
