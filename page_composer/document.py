"""Immutable dataclasses describing a composed storefront page.

A :class:`Document` holds sections; sections hold rows; rows hold columns;
columns hold elements. Every node owns a :class:`StyleBag` and visibility
flags. Instances are frozen and their children live in tuples, so a snapshot
can be shared freely between readers while the engine builds the next one,
reusing every subtree it did not touch.

Nothing outside :mod:`page_composer.engine` (and the codec, when loading a
persisted tree) is expected to construct nodes directly.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

from ._constants import (
    BREAKPOINTS,
    DEFAULT_SECTION_WIDTH,
    RESPONSIVE_KEY,
    SECTION_WIDTHS,
    WIDTH_TOTAL,
)

if typ.TYPE_CHECKING:
    from ._constants import Breakpoint

NodeKind = typ.Literal["section", "row", "column", "element"]


@dc.dataclass(frozen=True, slots=True)
class StyleBag:
    """Base (desktop) style properties plus per-breakpoint overrides.

    Attributes
    ----------
    base : dict[str, Any]
        Flat property map used when no responsive value applies.
    responsive : dict[str, dict[str, Any]]
        Optional ``desktop``/``tablet``/``mobile`` buckets of override values.
        Empty buckets are never stored.
    """

    base: dict[str, typ.Any] = dc.field(default_factory=dict)
    responsive: dict[str, dict[str, typ.Any]] = dc.field(default_factory=dict)

    def bucket(self, breakpoint: Breakpoint) -> cabc.Mapping[str, typ.Any]:
        """Return the override bucket for ``breakpoint`` (empty when absent)."""
        return self.responsive.get(breakpoint, {})

    def is_empty(self) -> bool:
        return not self.base and not any(self.responsive.values())

    @classmethod
    def from_mapping(cls, payload: cabc.Mapping[str, typ.Any] | None) -> StyleBag:
        """Split a persisted ``styles`` mapping into base and responsive parts."""
        if not payload:
            return cls()
        base = {key: value for key, value in payload.items() if key != RESPONSIVE_KEY}
        responsive: dict[str, dict[str, typ.Any]] = {}
        raw_responsive = payload.get(RESPONSIVE_KEY)
        if isinstance(raw_responsive, cabc.Mapping):
            for breakpoint in BREAKPOINTS:
                bucket = raw_responsive.get(breakpoint)
                if isinstance(bucket, cabc.Mapping) and bucket:
                    responsive[breakpoint] = dict(bucket)
        return cls(base=base, responsive=responsive)

    def to_mapping(self) -> dict[str, typ.Any]:
        """Return the persisted ``styles`` shape (``responsive`` nested inside)."""
        payload = dict(self.base)
        buckets = {
            breakpoint: dict(self.responsive[breakpoint])
            for breakpoint in BREAKPOINTS
            if self.responsive.get(breakpoint)
        }
        if buckets:
            payload[RESPONSIVE_KEY] = buckets
        return payload


@dc.dataclass(frozen=True, slots=True)
class Visibility:
    """Per-breakpoint visibility flags; every breakpoint is visible by default."""

    desktop: bool = True
    tablet: bool = True
    mobile: bool = True

    def is_visible(self, breakpoint: Breakpoint) -> bool:
        return bool(getattr(self, breakpoint))

    def with_breakpoint(self, breakpoint: Breakpoint, *, visible: bool) -> Visibility:
        return dc.replace(self, **{breakpoint: visible})

    def is_default(self) -> bool:
        return self.desktop and self.tablet and self.mobile


@dc.dataclass(frozen=True, slots=True)
class Element:
    """An opaque content unit: a type discriminator plus a payload.

    The ``content`` mapping is owned by the widget registry; the core copies
    and merges it but never interprets it.
    """

    id: str
    type: str
    content: dict[str, typ.Any] = dc.field(default_factory=dict)
    styles: StyleBag = dc.field(default_factory=StyleBag)
    anchor: str | None = None
    visibility: Visibility = dc.field(default_factory=Visibility)


@dc.dataclass(frozen=True, slots=True)
class Column:
    """A vertical slot inside a row.

    ``width`` holds the grid fraction taken from the row's layout code when
    the column was created. Render-time widths come from
    :func:`page_composer.widths.resolve_column_widths`.
    """

    id: str
    width: int
    elements: tuple[Element, ...] = ()
    custom_width: str | None = None
    styles: StyleBag = dc.field(default_factory=StyleBag)
    anchor: str | None = None
    visibility: Visibility = dc.field(default_factory=Visibility)


@dc.dataclass(frozen=True, slots=True)
class Row:
    """A horizontal band of columns laid out by ``column_layout``.

    Attributes
    ----------
    column_layout : str
        Layout code such as ``"1-1"`` or ``"1-2-1"``.
    custom_column_widths : dict[str, tuple[float, ...]]
        Optional per-breakpoint percentages, parallel to ``columns``.
    """

    id: str
    column_layout: str
    columns: tuple[Column, ...] = ()
    custom_column_widths: dict[str, tuple[float, ...]] = dc.field(
        default_factory=dict
    )
    styles: StyleBag = dc.field(default_factory=StyleBag)
    anchor: str | None = None
    visibility: Visibility = dc.field(default_factory=Visibility)


@dc.dataclass(frozen=True, slots=True)
class Section:
    """A full-width page band holding rows."""

    id: str
    width: str = DEFAULT_SECTION_WIDTH
    rows: tuple[Row, ...] = ()
    custom_width: str | None = None
    styles: StyleBag = dc.field(default_factory=StyleBag)
    anchor: str | None = None
    visibility: Visibility = dc.field(default_factory=Visibility)

    def resolved_width(self) -> str:
        """Return the CSS width to render; a custom width beats the preset."""
        if self.custom_width:
            return self.custom_width
        return SECTION_WIDTHS.get(self.width, SECTION_WIDTHS[DEFAULT_SECTION_WIDTH])


@dc.dataclass(frozen=True, slots=True)
class Document:
    """The root of a composed page."""

    sections: tuple[Section, ...] = ()


Node = Section | Row | Column | Element


@dc.dataclass(frozen=True, slots=True)
class NodeRef:
    """Locate a node: its kind, the node itself and the ids of its ancestors."""

    kind: NodeKind
    node: Node
    path: tuple[str, ...] = ()


def iter_nodes(document: Document) -> cabc.Iterator[NodeRef]:
    """Yield every node of ``document`` depth-first, parents before children."""
    for section in document.sections:
        yield NodeRef("section", section, ())
        for row in section.rows:
            yield NodeRef("row", row, (section.id,))
            for column in row.columns:
                yield NodeRef("column", column, (section.id, row.id))
                for element in column.elements:
                    yield NodeRef(
                        "element", element, (section.id, row.id, column.id)
                    )


def find_node(document: Document, node_id: str) -> NodeRef | None:
    """Return the first node whose id is ``node_id`` or ``None``."""
    return next((ref for ref in iter_nodes(document) if ref.node.id == node_id), None)


def find_element(document: Document, element_id: str) -> Element | None:
    ref = find_node(document, element_id)
    if ref is None or ref.kind != "element":
        return None
    return typ.cast("Element", ref.node)


def find_row(document: Document, row_id: str) -> Row | None:
    ref = find_node(document, row_id)
    if ref is None or ref.kind != "row":
        return None
    return typ.cast("Row", ref.node)


def node_ids(document: Document) -> list[str]:
    """Return every node id in document order."""
    return [ref.node.id for ref in iter_nodes(document)]


def check_invariants(
    document: Document, layouts: cabc.Mapping[str, cabc.Sequence[int]]
) -> list[str]:
    """Describe every structural invariant the document violates.

    Checks that ids are unique, that each row's column count matches its
    layout code and that every stored custom width array is parallel to the
    columns and sums to 100. An empty list means the document is sound.
    """
    problems: list[str] = []
    seen: set[str] = set()
    for ref in iter_nodes(document):
        if ref.node.id in seen:
            problems.append(f"Duplicate id '{ref.node.id}'.")
        seen.add(ref.node.id)
        if ref.kind != "row":
            continue
        row = typ.cast("Row", ref.node)
        fractions = layouts.get(row.column_layout)
        if fractions is None:
            problems.append(
                f"Row '{row.id}' uses unknown layout '{row.column_layout}'."
            )
        elif len(fractions) != len(row.columns):
            problems.append(
                f"Row '{row.id}' has {len(row.columns)} columns but layout "
                f"'{row.column_layout}' expects {len(fractions)}."
            )
        for breakpoint, widths in row.custom_column_widths.items():
            if len(widths) != len(row.columns):
                problems.append(
                    f"Row '{row.id}' {breakpoint} widths do not match its columns."
                )
            elif round(sum(widths) * 100) != WIDTH_TOTAL * 100:
                problems.append(
                    f"Row '{row.id}' {breakpoint} widths sum to {sum(widths):.2f}."
                )
    return problems


__all__ = [
    "Column",
    "Document",
    "Element",
    "Node",
    "NodeKind",
    "NodeRef",
    "Row",
    "Section",
    "StyleBag",
    "Visibility",
    "check_invariants",
    "find_element",
    "find_node",
    "find_row",
    "iter_nodes",
    "node_ids",
]
