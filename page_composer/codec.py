"""Convert documents to and from their persisted JSON shape.

The renderer and the storage layer both consume the camelCase tree below, so
keys and nesting here are a contract::

    Document := {sections: Section[]}
    Section  := {id, width, customWidth?, rows, styles, anchor?, visibility?}
    Row      := {id, columnLayout, columns, customColumnWidths?, styles,
                 anchor?, visibility?}
    Column   := {id, width, customWidth?, elements, styles, anchor?,
                 visibility?}
    Element  := {id, type, content, styles, anchor?, visibility?}

Optional keys are omitted when unset and responsive overrides live under
``styles.responsive``. JSON bytes are produced and parsed with
:mod:`msgspec.json`.
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import typing as typ
from pathlib import Path

import msgspec
import msgspec.json as msgspec_json

from ._constants import BREAKPOINTS, DEFAULT_SECTION_WIDTH
from .document import Column, Document, Element, Row, Section, StyleBag, Visibility

logger = logging.getLogger(__name__)

Payload = dict[str, typ.Any]


class DocumentFormatError(ValueError):
    """Raised when a persisted document does not have the expected shape."""


def _optional(payload: Payload, key: str, value: object) -> None:
    if value:
        payload[key] = value


def _visibility_to_dict(visibility: Visibility) -> Payload | None:
    if visibility.is_default():
        return None
    return {
        "desktop": visibility.desktop,
        "tablet": visibility.tablet,
        "mobile": visibility.mobile,
    }


def _common(payload: Payload, node: Section | Row | Column | Element) -> Payload:
    payload["styles"] = node.styles.to_mapping()
    _optional(payload, "anchor", node.anchor)
    _optional(payload, "visibility", _visibility_to_dict(node.visibility))
    return payload


def _element_to_dict(element: Element) -> Payload:
    payload: Payload = {
        "id": element.id,
        "type": element.type,
        "content": dict(element.content),
    }
    return _common(payload, element)


def _column_to_dict(column: Column) -> Payload:
    payload: Payload = {"id": column.id, "width": column.width}
    _optional(payload, "customWidth", column.custom_width)
    payload["elements"] = [_element_to_dict(item) for item in column.elements]
    return _common(payload, column)


def _row_to_dict(row: Row) -> Payload:
    payload: Payload = {
        "id": row.id,
        "columnLayout": row.column_layout,
        "columns": [_column_to_dict(column) for column in row.columns],
    }
    custom = {
        breakpoint: list(row.custom_column_widths[breakpoint])
        for breakpoint in BREAKPOINTS
        if breakpoint in row.custom_column_widths
    }
    _optional(payload, "customColumnWidths", custom)
    return _common(payload, row)


def _section_to_dict(section: Section) -> Payload:
    payload: Payload = {"id": section.id, "width": section.width}
    _optional(payload, "customWidth", section.custom_width)
    payload["rows"] = [_row_to_dict(row) for row in section.rows]
    return _common(payload, section)


def document_to_dict(document: Document) -> Payload:
    """Return the persisted mapping for ``document``."""
    return {"sections": [_section_to_dict(section) for section in document.sections]}


def _require_mapping(value: object, where: str) -> cabc.Mapping[str, typ.Any]:
    if not isinstance(value, cabc.Mapping):
        msg = f"{where} must be an object."
        raise DocumentFormatError(msg)
    return value


def _require_list(value: object, where: str) -> list[typ.Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        msg = f"{where} must be an array."
        raise DocumentFormatError(msg)
    return value


def _require_str(payload: cabc.Mapping[str, typ.Any], key: str, where: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        msg = f"{where} is missing '{key}'."
        raise DocumentFormatError(msg)
    return value


def _optional_str(payload: cabc.Mapping[str, typ.Any], key: str) -> str | None:
    value = payload.get(key)
    return value if isinstance(value, str) and value else None


def _styles_from(payload: cabc.Mapping[str, typ.Any], where: str) -> StyleBag:
    raw = payload.get("styles")
    if raw is None:
        return StyleBag()
    return StyleBag.from_mapping(_require_mapping(raw, f"{where}.styles"))


def _visibility_from(payload: cabc.Mapping[str, typ.Any]) -> Visibility:
    raw = payload.get("visibility")
    if not isinstance(raw, cabc.Mapping):
        return Visibility()
    return Visibility(
        desktop=raw.get("desktop", True) is not False,
        tablet=raw.get("tablet", True) is not False,
        mobile=raw.get("mobile", True) is not False,
    )


def _element_from(raw: object, where: str) -> Element:
    payload = _require_mapping(raw, where)
    content = payload.get("content") or {}
    return Element(
        id=_require_str(payload, "id", where),
        type=_require_str(payload, "type", where),
        content=dict(_require_mapping(content, f"{where}.content")),
        styles=_styles_from(payload, where),
        anchor=_optional_str(payload, "anchor"),
        visibility=_visibility_from(payload),
    )


def _column_from(raw: object, where: str) -> Column:
    payload = _require_mapping(raw, where)
    width = payload.get("width", 0)
    if isinstance(width, bool) or not isinstance(width, int | float):
        msg = f"{where}.width must be a number."
        raise DocumentFormatError(msg)
    elements = _require_list(payload.get("elements"), f"{where}.elements")
    return Column(
        id=_require_str(payload, "id", where),
        width=int(width),
        elements=tuple(
            _element_from(item, f"{where}.elements[{index}]")
            for index, item in enumerate(elements)
        ),
        custom_width=_optional_str(payload, "customWidth"),
        styles=_styles_from(payload, where),
        anchor=_optional_str(payload, "anchor"),
        visibility=_visibility_from(payload),
    )


def _custom_widths_from(raw: object, where: str) -> dict[str, tuple[float, ...]]:
    if raw is None:
        return {}
    mapping = _require_mapping(raw, where)
    widths: dict[str, tuple[float, ...]] = {}
    for breakpoint in BREAKPOINTS:
        values = mapping.get(breakpoint)
        if values is None:
            continue
        items = _require_list(values, f"{where}.{breakpoint}")
        if not all(
            isinstance(item, int | float) and not isinstance(item, bool)
            for item in items
        ):
            msg = f"{where}.{breakpoint} must contain numbers only."
            raise DocumentFormatError(msg)
        widths[breakpoint] = tuple(float(item) for item in items)
    return widths


def _row_from(raw: object, where: str) -> Row:
    payload = _require_mapping(raw, where)
    columns = _require_list(payload.get("columns"), f"{where}.columns")
    return Row(
        id=_require_str(payload, "id", where),
        column_layout=_require_str(payload, "columnLayout", where),
        columns=tuple(
            _column_from(item, f"{where}.columns[{index}]")
            for index, item in enumerate(columns)
        ),
        custom_column_widths=_custom_widths_from(
            payload.get("customColumnWidths"), f"{where}.customColumnWidths"
        ),
        styles=_styles_from(payload, where),
        anchor=_optional_str(payload, "anchor"),
        visibility=_visibility_from(payload),
    )


def _section_from(raw: object, where: str) -> Section:
    payload = _require_mapping(raw, where)
    rows = _require_list(payload.get("rows"), f"{where}.rows")
    return Section(
        id=_require_str(payload, "id", where),
        width=_optional_str(payload, "width") or DEFAULT_SECTION_WIDTH,
        rows=tuple(
            _row_from(item, f"{where}.rows[{index}]") for index, item in enumerate(rows)
        ),
        custom_width=_optional_str(payload, "customWidth"),
        styles=_styles_from(payload, where),
        anchor=_optional_str(payload, "anchor"),
        visibility=_visibility_from(payload),
    )


def document_from_dict(payload: object) -> Document:
    """Build a :class:`Document` from its persisted mapping.

    Raises
    ------
    DocumentFormatError
        If required keys are missing or have the wrong type.
    """
    root = _require_mapping(payload, "document")
    sections = _require_list(root.get("sections"), "sections")
    return Document(
        sections=tuple(
            _section_from(item, f"sections[{index}]")
            for index, item in enumerate(sections)
        )
    )


def dumps(document: Document) -> bytes:
    """Encode ``document`` as compact JSON bytes."""
    return msgspec_json.encode(document_to_dict(document))


def loads(data: bytes | str) -> Document:
    """Decode JSON produced by :func:`dumps` (or any conforming writer)."""
    try:
        payload = msgspec_json.decode(data)
    except msgspec.DecodeError as exc:
        msg = f"Document is not valid JSON: {exc}"
        raise DocumentFormatError(msg) from exc
    return document_from_dict(payload)


def load_document(path: Path) -> Document:
    document = loads(path.read_bytes())
    logger.debug("Loaded %d sections from %s", len(document.sections), path)
    return document


def save_document(path: Path, document: Document) -> Path:
    """Write ``document`` to ``path`` as indented JSON and return the path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(msgspec_json.format(dumps(document), indent=2) + b"\n")
    return path


__all__ = [
    "DocumentFormatError",
    "document_from_dict",
    "document_to_dict",
    "dumps",
    "load_document",
    "loads",
    "save_document",
]
