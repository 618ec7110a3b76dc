"""Mutation operations that turn one document snapshot into the next.

:class:`CompositionEngine` is the only sanctioned way to change a
:class:`~page_composer.document.Document`. Every method takes the current
document and returns a new one; nothing is modified in place. Subtrees an
operation does not touch keep their identity, so callers can detect changes
with ``is`` and undo by holding on to the previous snapshot.

Lookups that find nothing (a stale id, an unknown layout code or content
type, a column limit) are no-ops: the method returns the very same document
object and logs the reason at DEBUG level. The host compares references to
notice that nothing happened.

Examples
--------
>>> from page_composer.document import Document
>>> engine = CompositionEngine()
>>> doc = engine.add_section(Document())
>>> section = doc.sections[0]
>>> doc = engine.add_row(doc, section.id, "1-1")
>>> len(doc.sections[0].rows[0].columns)
2
>>> engine.delete_element(doc, "missing") is doc
True
"""

from __future__ import annotations

import collections.abc as cabc
import copy
import dataclasses as dc
import logging
import typing as typ

from . import responsive
from ._constants import DESKTOP, SECTION_WIDTHS
from .config import ComposerConfig
from .document import (
    Column,
    Document,
    Element,
    Row,
    Section,
    StyleBag,
    Visibility,
    find_element,
    find_node,
    find_row,
)
from .ids import build_anchor, generate_id
from .widths import coerce_width, redistribute, resolve_column_widths

if typ.TYPE_CHECKING:
    from ._constants import Breakpoint
    from .document import Node
    from .ids import AnchorFactory, IdFactory

logger = logging.getLogger(__name__)

T = typ.TypeVar("T")
N = typ.TypeVar("N", Section, Row, Column, Element)
Patch = cabc.Mapping[str, typ.Any]

_NODE_FIELDS: dict[type, frozenset[str]] = {
    Section: frozenset({"width", "custom_width", "anchor"}),
    Row: frozenset({"anchor"}),
    Column: frozenset({"custom_width", "anchor"}),
    Element: frozenset({"anchor"}),
}


def _rebuild(items: tuple[T, ...], fn: cabc.Callable[[T], T]) -> tuple[T, ...]:
    """Apply ``fn`` to each item, returning ``items`` itself if none changed."""
    changed = False
    rebuilt: list[T] = []
    for item in items:
        updated = fn(item)
        changed = changed or updated is not item
        rebuilt.append(updated)
    return tuple(rebuilt) if changed else items


def _insert(items: tuple[T, ...], item: T, index: int | None) -> tuple[T, ...]:
    """Insert ``item`` at ``index`` (clamped); ``None`` appends."""
    if index is None:
        return (*items, item)
    position = min(max(index, 0), len(items))
    return (*items[:position], item, *items[position:])


def _without(items: tuple[N, ...], node_id: str) -> tuple[N, ...]:
    if not any(item.id == node_id for item in items):
        return items
    return tuple(item for item in items if item.id != node_id)


def _index_of(items: tuple[N, ...], node_id: str) -> int:
    return next((index for index, item in enumerate(items) if item.id == node_id), -1)


def _map_sections(
    document: Document, fn: cabc.Callable[[Section], Section]
) -> Document:
    sections = _rebuild(document.sections, fn)
    if sections is document.sections:
        return document
    return dc.replace(document, sections=sections)


def _map_rows(document: Document, fn: cabc.Callable[[Row], Row]) -> Document:
    def on_section(section: Section) -> Section:
        rows = _rebuild(section.rows, fn)
        return section if rows is section.rows else dc.replace(section, rows=rows)

    return _map_sections(document, on_section)


def _map_columns(document: Document, fn: cabc.Callable[[Column], Column]) -> Document:
    def on_row(row: Row) -> Row:
        columns = _rebuild(row.columns, fn)
        return row if columns is row.columns else dc.replace(row, columns=columns)

    return _map_rows(document, on_row)


def _map_element_lists(
    document: Document,
    fn: cabc.Callable[[tuple[Element, ...]], tuple[Element, ...]],
) -> Document:
    def on_column(column: Column) -> Column:
        elements = fn(column.elements)
        if elements is column.elements:
            return column
        return dc.replace(column, elements=elements)

    return _map_columns(document, on_column)


def _map_node(
    document: Document, node_id: str, fn: cabc.Callable[[Node], Node]
) -> Document:
    """Replace the node with ``node_id`` wherever it sits in the tree."""

    def on_element(element: Element) -> Element:
        return typ.cast("Element", fn(element)) if element.id == node_id else element

    def on_column(column: Column) -> Column:
        if column.id == node_id:
            return typ.cast("Column", fn(column))
        elements = _rebuild(column.elements, on_element)
        if elements is column.elements:
            return column
        return dc.replace(column, elements=elements)

    def on_row(row: Row) -> Row:
        if row.id == node_id:
            return typ.cast("Row", fn(row))
        columns = _rebuild(row.columns, on_column)
        return row if columns is row.columns else dc.replace(row, columns=columns)

    def on_section(section: Section) -> Section:
        if section.id == node_id:
            return typ.cast("Section", fn(section))
        rows = _rebuild(section.rows, on_row)
        return section if rows is section.rows else dc.replace(section, rows=rows)

    return _map_sections(document, on_section)


def _copy_bag(bag: StyleBag) -> StyleBag:
    return StyleBag(
        base=copy.deepcopy(bag.base),
        responsive={key: copy.deepcopy(value) for key, value in bag.responsive.items()},
    )


def _merge_styles(bag: StyleBag, patch: Patch) -> StyleBag:
    """Merge a persisted-shape ``styles`` patch into ``bag`` per property."""
    incoming = StyleBag.from_mapping(patch)
    responsive_buckets = dict(bag.responsive)
    for breakpoint, bucket in incoming.responsive.items():
        responsive_buckets[breakpoint] = {**bag.bucket(breakpoint), **bucket}
    return StyleBag(base={**bag.base, **incoming.base}, responsive=responsive_buckets)


def _merge_visibility(visibility: Visibility, patch: object) -> Visibility:
    if not isinstance(patch, cabc.Mapping):
        return visibility
    flags = {
        key: bool(value)
        for key, value in patch.items()
        if key in {"desktop", "tablet", "mobile"}
    }
    return dc.replace(visibility, **flags)


def _matching_widths(
    custom: cabc.Mapping[str, tuple[float, ...]], count: int
) -> dict[str, tuple[float, ...]]:
    """Keep only the custom width arrays still parallel to ``count`` columns."""
    return {
        breakpoint: widths
        for breakpoint, widths in custom.items()
        if len(widths) == count
    }


class CompositionEngine:
    """Apply editing intents to immutable documents.

    Parameters
    ----------
    config : ComposerConfig, optional
        Layout codes, the content-type registry and defaults for new nodes.
        Defaults to :meth:`ComposerConfig.default`.
    new_id : IdFactory, optional
        Callable returning fresh node ids; swap in
        :class:`~page_composer.ids.SequentialIds` for deterministic output.
    new_anchor : AnchorFactory, optional
        Callable building a deep-link anchor from a prefix.
    """

    def __init__(
        self,
        config: ComposerConfig | None = None,
        *,
        new_id: IdFactory = generate_id,
        new_anchor: AnchorFactory = build_anchor,
    ) -> None:
        self.config = config or ComposerConfig.default()
        self._new_id = new_id
        self._new_anchor = new_anchor

    @property
    def layouts(self) -> dict[str, tuple[int, ...]]:
        return self.config.layouts

    def is_known_type(self, element_type: str) -> bool:
        """Return whether ``element_type`` is a registered content type."""
        return self.config.get_element_type(element_type) is not None

    # -- node factories -------------------------------------------------

    def _new_column(self, fraction: int) -> Column:
        return Column(
            id=self._new_id(),
            width=fraction,
            styles=StyleBag(base=dict(self.config.defaults.column_styles)),
            anchor=self._new_anchor("col"),
        )

    def _clone_element(self, element: Element) -> Element:
        return dc.replace(
            element,
            id=self._new_id(),
            content=copy.deepcopy(element.content),
            styles=_copy_bag(element.styles),
            anchor=self._new_anchor(element.type) if element.anchor else None,
        )

    def _clone_column(self, column: Column) -> Column:
        return dc.replace(
            column,
            id=self._new_id(),
            elements=tuple(self._clone_element(item) for item in column.elements),
            styles=_copy_bag(column.styles),
            anchor=self._new_anchor("col"),
        )

    def _clone_row(self, row: Row) -> Row:
        return dc.replace(
            row,
            id=self._new_id(),
            columns=tuple(self._clone_column(column) for column in row.columns),
            custom_column_widths=dict(row.custom_column_widths),
            styles=_copy_bag(row.styles),
            anchor=self._new_anchor("row"),
        )

    def _clone_section(self, section: Section) -> Section:
        return dc.replace(
            section,
            id=self._new_id(),
            rows=tuple(self._clone_row(row) for row in section.rows),
            styles=_copy_bag(section.styles),
            anchor=self._new_anchor("section"),
        )

    def _relayout(self, row: Row, columns: tuple[Column, ...]) -> Row | None:
        """Return ``row`` holding ``columns`` under the balanced layout code."""
        layout = self.config.balanced_layout(len(columns))
        if layout is None:
            logger.debug("No balanced layout for %d columns", len(columns))
            return None
        return dc.replace(
            row,
            column_layout=layout,
            columns=columns,
            custom_column_widths=_matching_widths(
                row.custom_column_widths, len(columns)
            ),
        )

    # -- sections -------------------------------------------------------

    def add_section(
        self,
        document: Document,
        width: str | None = None,
        *,
        index: int | None = None,
    ) -> Document:
        """Insert an empty section (appended unless ``index`` is given).

        An unknown width preset falls back to the configured default width.
        """
        preset = width if width in SECTION_WIDTHS else self.config.defaults.section_width
        section = Section(
            id=self._new_id(),
            width=preset,
            styles=StyleBag(base=dict(self.config.defaults.section_styles)),
            anchor=self._new_anchor("section"),
        )
        return dc.replace(
            document, sections=_insert(document.sections, section, index)
        )

    def delete_section(self, document: Document, section_id: str) -> Document:
        sections = _without(document.sections, section_id)
        if sections is document.sections:
            logger.debug("Section %s not found; nothing deleted", section_id)
            return document
        return dc.replace(document, sections=sections)

    def duplicate_section(self, document: Document, section_id: str) -> Document:
        """Insert a deep copy with fresh ids right after the original section."""
        position = _index_of(document.sections, section_id)
        if position < 0:
            logger.debug("Section %s not found; nothing duplicated", section_id)
            return document
        clone = self._clone_section(document.sections[position])
        return dc.replace(
            document, sections=_insert(document.sections, clone, position + 1)
        )

    def move_section(
        self, document: Document, section_id: str, index: int
    ) -> Document:
        """Move a section to ``index`` within the list that remains after removal."""
        position = _index_of(document.sections, section_id)
        if position < 0:
            logger.debug("Section %s not found; nothing moved", section_id)
            return document
        section = document.sections[position]
        remaining = _without(document.sections, section_id)
        sections = _insert(remaining, section, index)
        if sections == document.sections:
            return document
        return dc.replace(document, sections=sections)

    def shift_section(
        self, document: Document, section_id: str, offset: int
    ) -> Document:
        """Move a section ``offset`` places up (negative) or down (positive)."""
        position = _index_of(document.sections, section_id)
        if position < 0:
            return document
        return self.move_section(document, section_id, position + offset)

    # -- rows -----------------------------------------------------------

    def add_row(
        self,
        document: Document,
        section_id: str,
        column_layout: str,
        *,
        index: int | None = None,
    ) -> Document:
        """Insert a row whose columns follow ``column_layout``.

        One empty column is created per fraction of the layout code. Unknown
        layout codes and unknown sections leave the document unchanged.
        """
        fractions = self.layouts.get(column_layout)
        if fractions is None:
            logger.debug("Layout %r is not registered; row not added", column_layout)
            return document
        if _index_of(document.sections, section_id) < 0:
            logger.debug("Section %s not found; row not added", section_id)
            return document
        row = Row(
            id=self._new_id(),
            column_layout=column_layout,
            columns=tuple(self._new_column(fraction) for fraction in fractions),
            styles=StyleBag(base=dict(self.config.defaults.row_styles)),
            anchor=self._new_anchor("row"),
        )

        def on_section(section: Section) -> Section:
            if section.id != section_id:
                return section
            return dc.replace(section, rows=_insert(section.rows, row, index))

        return _map_sections(document, on_section)

    def delete_row(self, document: Document, row_id: str) -> Document:
        def on_section(section: Section) -> Section:
            rows = _without(section.rows, row_id)
            return section if rows is section.rows else dc.replace(section, rows=rows)

        return _map_sections(document, on_section)

    def duplicate_row(self, document: Document, row_id: str) -> Document:
        """Insert a deep copy with fresh ids right after the original row."""

        def on_section(section: Section) -> Section:
            position = _index_of(section.rows, row_id)
            if position < 0:
                return section
            clone = self._clone_row(section.rows[position])
            return dc.replace(section, rows=_insert(section.rows, clone, position + 1))

        return _map_sections(document, on_section)

    def move_row(
        self,
        document: Document,
        row_id: str,
        target_section_id: str,
        index: int,
    ) -> Document:
        """Move a row into ``target_section_id`` at ``index``.

        Both the row and the target section must exist, otherwise nothing
        moves.
        """
        ref = find_node(document, row_id)
        if ref is None or ref.kind != "row":
            logger.debug("Row %s not found; nothing moved", row_id)
            return document
        if _index_of(document.sections, target_section_id) < 0:
            logger.debug("Section %s not found; row not moved", target_section_id)
            return document
        row = typ.cast("Row", ref.node)
        removed = self.delete_row(document, row_id)

        def on_section(section: Section) -> Section:
            if section.id != target_section_id:
                return section
            return dc.replace(section, rows=_insert(section.rows, row, index))

        moved = _map_sections(removed, on_section)
        return document if moved == document else moved

    def shift_row(self, document: Document, row_id: str, offset: int) -> Document:
        """Move a row ``offset`` places within its own section."""
        ref = find_node(document, row_id)
        if ref is None or ref.kind != "row":
            return document
        section_id = ref.path[0]
        section = document.sections[_index_of(document.sections, section_id)]
        position = _index_of(section.rows, row_id)
        return self.move_row(document, row_id, section_id, position + offset)

    def change_row_layout(
        self, document: Document, row_id: str, new_layout: str
    ) -> Document:
        """Switch a row to ``new_layout``, keeping columns by position.

        Columns up to ``min(old, new)`` keep their identity (and elements);
        missing slots get new empty columns; surplus columns and their
        elements are dropped. Custom width arrays whose length no longer
        matches are discarded.
        """
        fractions = self.layouts.get(new_layout)
        if fractions is None:
            logger.debug("Layout %r is not registered; row unchanged", new_layout)
            return document

        def on_row(row: Row) -> Row:
            if row.id != row_id or row.column_layout == new_layout:
                return row
            kept = row.columns[: len(fractions)]
            added = tuple(
                self._new_column(fraction) for fraction in fractions[len(kept) :]
            )
            columns = kept + added
            return dc.replace(
                row,
                column_layout=new_layout,
                columns=columns,
                custom_column_widths=_matching_widths(
                    row.custom_column_widths, len(columns)
                ),
            )

        return _map_rows(document, on_row)

    # -- columns --------------------------------------------------------

    def add_column(self, document: Document, row_id: str) -> Document:
        """Append an empty column and switch the row to the equal layout."""
        max_columns = self.config.max_columns

        def on_row(row: Row) -> Row:
            if row.id != row_id:
                return row
            if len(row.columns) >= max_columns:
                logger.debug("Row %s already has %d columns", row_id, max_columns)
                return row
            layout = self.config.balanced_layout(len(row.columns) + 1)
            fractions = self.layouts.get(layout or "", ())
            fraction = fractions[-1] if fractions else 1
            columns = (*row.columns, self._new_column(fraction))
            return self._relayout(row, columns) or row

        return _map_rows(document, on_row)

    def duplicate_column(
        self, document: Document, row_id: str, column_id: str
    ) -> Document:
        """Insert a deep copy after ``column_id`` and rebalance the layout."""
        max_columns = self.config.max_columns

        def on_row(row: Row) -> Row:
            if row.id != row_id:
                return row
            position = _index_of(row.columns, column_id)
            if position < 0 or len(row.columns) >= max_columns:
                return row
            clone = self._clone_column(row.columns[position])
            columns = _insert(row.columns, clone, position + 1)
            return self._relayout(row, columns) or row

        return _map_rows(document, on_row)

    def delete_column(
        self, document: Document, row_id: str, column_id: str
    ) -> Document:
        """Remove a column, moving its elements to a neighbour.

        Elements are appended to the previous column (the next one when the
        first column is deleted). Deleting a row's only column deletes the
        row.
        """
        row = find_row(document, row_id)
        if row is None:
            return document
        position = _index_of(row.columns, column_id)
        if position < 0:
            return document
        if len(row.columns) == 1:
            return self.delete_row(document, row_id)
        doomed = row.columns[position]
        target = position - 1 if position > 0 else position + 1

        def merge(column: Column) -> Column:
            if column is not row.columns[target]:
                return column
            return dc.replace(column, elements=column.elements + doomed.elements)

        columns = tuple(merge(column) for column in row.columns if column is not doomed)
        relaid = self._relayout(row, columns)
        if relaid is None:
            return document
        return _map_rows(document, lambda item: relaid if item.id == row_id else item)

    def move_column(
        self, document: Document, row_id: str, column_id: str, offset: int
    ) -> Document:
        """Swap a column with the neighbour ``offset`` places away.

        Custom widths travel with their columns.
        """

        def on_row(row: Row) -> Row:
            if row.id != row_id:
                return row
            position = _index_of(row.columns, column_id)
            destination = position + offset
            if position < 0 or not 0 <= destination < len(row.columns):
                return row
            order = list(range(len(row.columns)))
            order[position], order[destination] = order[destination], order[position]
            return dc.replace(
                row,
                columns=tuple(row.columns[item] for item in order),
                custom_column_widths={
                    breakpoint: tuple(widths[item] for item in order)
                    for breakpoint, widths in _matching_widths(
                        row.custom_column_widths, len(row.columns)
                    ).items()
                },
            )

        return _map_rows(document, on_row)

    def set_column_width(
        self,
        document: Document,
        row_id: str,
        index: int,
        width: object,
        breakpoint: Breakpoint = DESKTOP,
    ) -> Document:
        """Set one column's width for ``breakpoint`` and rebalance its siblings.

        The redistribution starts from the widths currently rendered for that
        breakpoint and is stored as the row's custom widths for it. ``width``
        may be a number or UI text such as ``"40%"``; it is clamped to
        ``[0, 100]`` and unparseable input keeps the current width.
        """

        def on_row(row: Row) -> Row:
            if row.id != row_id or not 0 <= index < len(row.columns):
                return row
            current = resolve_column_widths(row, breakpoint, self.layouts)
            target = coerce_width(width, current[index])
            widths = tuple(redistribute(current, index, target))
            if row.custom_column_widths.get(breakpoint) == widths:
                return row
            return dc.replace(
                row,
                custom_column_widths={**row.custom_column_widths, breakpoint: widths},
            )

        return _map_rows(document, on_row)

    def reset_column_widths(
        self,
        document: Document,
        row_id: str,
        breakpoint: Breakpoint | None = None,
    ) -> Document:
        """Drop custom widths for ``breakpoint`` (every breakpoint when ``None``)."""

        def on_row(row: Row) -> Row:
            if row.id != row_id or not row.custom_column_widths:
                return row
            if breakpoint is None:
                return dc.replace(row, custom_column_widths={})
            if breakpoint not in row.custom_column_widths:
                return row
            remaining = {
                key: value
                for key, value in row.custom_column_widths.items()
                if key != breakpoint
            }
            return dc.replace(row, custom_column_widths=remaining)

        return _map_rows(document, on_row)

    # -- elements -------------------------------------------------------

    def add_element(
        self,
        document: Document,
        section_id: str,
        row_id: str,
        column_id: str,
        element_type: str,
        *,
        index: int | None = None,
    ) -> Document:
        """Add a new element of ``element_type`` to the addressed column.

        The element starts with the registered default content and styles.
        Unknown content types and unknown paths leave the document unchanged.
        """
        registered = self.config.get_element_type(element_type)
        if registered is None:
            logger.debug("Element type %r not found in registry", element_type)
            return document
        element = Element(
            id=self._new_id(),
            type=element_type,
            content=copy.deepcopy(registered.content),
            styles=StyleBag(base=copy.deepcopy(registered.styles)),
            anchor=self._new_anchor(element_type),
        )

        def on_column(column: Column) -> Column:
            if column.id != column_id:
                return column
            return dc.replace(column, elements=_insert(column.elements, element, index))

        def on_row(row: Row) -> Row:
            if row.id != row_id:
                return row
            columns = _rebuild(row.columns, on_column)
            return row if columns is row.columns else dc.replace(row, columns=columns)

        def on_section(section: Section) -> Section:
            if section.id != section_id:
                return section
            rows = _rebuild(section.rows, on_row)
            return section if rows is section.rows else dc.replace(section, rows=rows)

        updated = _map_sections(document, on_section)
        if updated is document:
            logger.debug(
                "Column %s/%s/%s not found; element not added",
                section_id,
                row_id,
                column_id,
            )
        return updated

    def update_element(
        self, document: Document, element_id: str, patch: Patch
    ) -> Document:
        """Merge ``patch`` into the element with ``element_id``.

        Recognised keys: ``content`` (merged key by key), ``styles`` (persisted
        shape; base properties and each responsive bucket merged per
        property), ``anchor`` and ``visibility`` (per-breakpoint booleans).
        ``id`` and ``type`` are immutable and ignored.
        """

        def apply(node: Node) -> Node:
            element = typ.cast("Element", node)
            updated = element
            if isinstance(patch.get("content"), cabc.Mapping):
                content = {**updated.content, **patch["content"]}
                updated = dc.replace(updated, content=content)
            if isinstance(patch.get("styles"), cabc.Mapping):
                updated = dc.replace(
                    updated, styles=_merge_styles(updated.styles, patch["styles"])
                )
            if "anchor" in patch:
                updated = dc.replace(updated, anchor=patch["anchor"] or None)
            if "visibility" in patch:
                updated = dc.replace(
                    updated,
                    visibility=_merge_visibility(updated.visibility, patch["visibility"]),
                )
            return element if updated == element else updated

        if find_element(document, element_id) is None:
            logger.debug("Element %s not found; nothing updated", element_id)
            return document
        return _map_node(document, element_id, apply)

    def delete_element(self, document: Document, element_id: str) -> Document:
        return _map_element_lists(
            document, lambda elements: _without(elements, element_id)
        )

    def duplicate_element(self, document: Document, element_id: str) -> Document:
        """Insert a copy with a fresh id immediately after the original."""

        def on_elements(elements: tuple[Element, ...]) -> tuple[Element, ...]:
            position = _index_of(elements, element_id)
            if position < 0:
                return elements
            clone = self._clone_element(elements[position])
            return _insert(elements, clone, position + 1)

        return _map_element_lists(document, on_elements)

    def move_element(
        self,
        document: Document,
        element_id: str,
        section_id: str,
        row_id: str,
        column_id: str,
        index: int,
    ) -> Document:
        """Move an element into the addressed column at ``index``.

        ``index`` counts positions after the element has been removed from its
        old place. A missing element or target column leaves the document
        unchanged.
        """
        element = find_element(document, element_id)
        target = find_node(document, column_id)
        if (
            element is None
            or target is None
            or target.kind != "column"
            or target.path != (section_id, row_id)
        ):
            logger.debug("Cannot move element %s to %s", element_id, column_id)
            return document
        removed = self.delete_element(document, element_id)

        def on_column(column: Column) -> Column:
            if column.id != column_id:
                return column
            return dc.replace(column, elements=_insert(column.elements, element, index))

        moved = _map_columns(removed, on_column)
        return document if moved == document else moved

    def shift_element(
        self, document: Document, element_id: str, offset: int
    ) -> Document:
        """Move an element ``offset`` places within its own column."""
        ref = find_node(document, element_id)
        if ref is None or ref.kind != "element":
            return document
        section_id, row_id, column_id = ref.path
        row = find_row(document, row_id)
        if row is None:
            return document
        column = row.columns[_index_of(row.columns, column_id)]
        position = _index_of(column.elements, element_id)
        destination = position + offset
        if not 0 <= destination < len(column.elements):
            return document
        return self.move_element(
            document, element_id, section_id, row_id, column_id, destination
        )

    # -- generic node updates ------------------------------------------

    def update_node(self, document: Document, node_id: str, patch: Patch) -> Document:
        """Apply plain attribute changes to any node.

        Sections accept ``width`` (a preset, which clears any custom width),
        ``custom_width`` and ``anchor``; columns accept ``custom_width`` and
        ``anchor``; rows and elements accept ``anchor``. Other keys and invalid
        presets are ignored.
        """

        def apply(node: Node) -> Node:
            allowed = _NODE_FIELDS[type(node)]
            changes = {key: value for key, value in patch.items() if key in allowed}
            if "width" in changes:
                if changes["width"] in SECTION_WIDTHS:
                    changes.setdefault("custom_width", None)
                else:
                    del changes["width"]
            for key in ("custom_width", "anchor"):
                if key in changes and not changes[key]:
                    changes[key] = None
            if not changes:
                return node
            updated = dc.replace(node, **changes)
            return node if updated == node else updated

        return _map_node(document, node_id, apply)

    def _update_kind(
        self, document: Document, kind: str, node_id: str, patch: Patch
    ) -> Document:
        ref = find_node(document, node_id)
        if ref is None or ref.kind != kind:
            logger.debug("No %s with id %s; nothing updated", kind, node_id)
            return document
        return self.update_node(document, node_id, patch)

    def update_section(
        self, document: Document, section_id: str, patch: Patch
    ) -> Document:
        return self._update_kind(document, "section", section_id, patch)

    def update_row(self, document: Document, row_id: str, patch: Patch) -> Document:
        return self._update_kind(document, "row", row_id, patch)

    def update_column(
        self, document: Document, column_id: str, patch: Patch
    ) -> Document:
        return self._update_kind(document, "column", column_id, patch)

    def update_styles(
        self,
        document: Document,
        node_id: str,
        fn: cabc.Callable[[StyleBag], StyleBag],
    ) -> Document:
        """Replace a node's style bag with ``fn(bag)``; the generic style primitive."""

        def apply(node: Node) -> Node:
            styles = fn(node.styles)
            return node if styles is node.styles else dc.replace(node, styles=styles)

        return _map_node(document, node_id, apply)

    def set_style(
        self,
        document: Document,
        node_id: str,
        property_name: str,
        value: typ.Any,
        breakpoint: Breakpoint | None = None,
    ) -> Document:
        """Write one style property; ``breakpoint=None`` targets the base bag."""
        if breakpoint is None:
            return self.update_styles(
                document,
                node_id,
                lambda bag: responsive.set_base_value(bag, property_name, value),
            )
        return self.update_styles(
            document,
            node_id,
            lambda bag: responsive.set_override(bag, property_name, value, breakpoint),
        )

    def clear_style(
        self,
        document: Document,
        node_id: str,
        property_name: str,
        breakpoint: Breakpoint | None = None,
    ) -> Document:
        """Remove one style property; ``breakpoint=None`` targets the base bag."""
        if breakpoint is None:
            return self.update_styles(
                document,
                node_id,
                lambda bag: responsive.clear_base_value(bag, property_name),
            )
        return self.update_styles(
            document,
            node_id,
            lambda bag: responsive.clear_override(bag, property_name, breakpoint),
        )

    def set_visibility(
        self,
        document: Document,
        node_id: str,
        breakpoint: Breakpoint,
        *,
        visible: bool,
    ) -> Document:
        def apply(node: Node) -> Node:
            if node.visibility.is_visible(breakpoint) == visible:
                return node
            return dc.replace(
                node,
                visibility=node.visibility.with_breakpoint(breakpoint, visible=visible),
            )

        return _map_node(document, node_id, apply)

    def ensure_anchors(self, document: Document) -> Document:
        """Give every node without an anchor a freshly generated one."""

        def anchored(node: N, prefix: str) -> N:
            if node.anchor:
                return node
            return dc.replace(node, anchor=self._new_anchor(prefix))

        def on_element(element: Element) -> Element:
            return anchored(element, element.type)

        def on_column(column: Column) -> Column:
            elements = _rebuild(column.elements, on_element)
            if elements is not column.elements:
                column = dc.replace(column, elements=elements)
            return anchored(column, "col")

        def on_row(row: Row) -> Row:
            columns = _rebuild(row.columns, on_column)
            if columns is not row.columns:
                row = dc.replace(row, columns=columns)
            return anchored(row, "row")

        def on_section(section: Section) -> Section:
            rows = _rebuild(section.rows, on_row)
            if rows is not section.rows:
                section = dc.replace(section, rows=rows)
            return anchored(section, "section")

        return _map_sections(document, on_section)


__all__ = ["CompositionEngine", "Patch"]
