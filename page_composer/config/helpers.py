"""Utility helpers and built-in defaults shared by the composer config loader."""

from __future__ import annotations

import typing as typ

from .models import ComposerConfigError, ElementTypeConfig

_HEADLINE = "Large Call to Action Headline"
_PARAGRAPH = (
    "Your paragraph text goes here. Lorem ipsum dolor sit amet, consectetur "
    "adipisicing elit."
)
_BOX_PADDING = {
    "paddingTop": "10px",
    "paddingRight": "10px",
    "paddingBottom": "10px",
    "paddingLeft": "10px",
}

DEFAULT_NODE_STYLES: dict[str, dict[str, str]] = {
    "section": {"paddingTop": "20px", "paddingBottom": "20px"},
    "row": {
        "paddingTop": "10px",
        "paddingBottom": "10px",
        "paddingLeft": "5px",
        "paddingRight": "5px",
    },
    "column": {
        "paddingTop": "10px",
        "paddingRight": "5px",
        "paddingLeft": "5px",
        "paddingBottom": "10px",
    },
}

DEFAULT_ELEMENT_TYPES: dict[str, dict[str, typ.Any]] = {
    "heading": {
        "label": "Heading",
        "content": {"text": _HEADLINE, "level": 1},
        "styles": {"textAlign": "center"},
    },
    "heading-h1": {"label": "Heading H1", "content": {"text": _HEADLINE, "level": 1}},
    "heading-h2": {"label": "Heading H2", "content": {"text": _HEADLINE, "level": 2}},
    "heading-h3": {"label": "Heading H3", "content": {"text": _HEADLINE, "level": 3}},
    "text": {
        "label": "Text Editor",
        "content": {"text": _PARAGRAPH},
        "styles": {"textAlign": "center"},
    },
    "paragraph": {"label": "Paragraph", "content": {"text": _PARAGRAPH}},
    "button": {
        "label": "Button",
        "content": {"text": "Click Me", "variant": "default", "size": "default", "url": "#"},
        "styles": {
            "backgroundColor": "hsl(142.1 76.2% 36.3%)",
            "color": "hsl(0 0% 100%)",
            "paddingTop": "12px",
            "paddingRight": "24px",
            "paddingBottom": "12px",
            "paddingLeft": "24px",
            "borderRadius": "6px",
            "fontWeight": "600",
            "textAlign": "center",
        },
    },
    "image": {
        "label": "Image",
        "category": "media",
        "content": {"src": "", "alt": "Image", "width": "100%", "height": "auto"},
    },
    "video": {
        "label": "Video",
        "category": "media",
        "content": {"src": "", "autoplay": False, "controls": True},
        "styles": _BOX_PADDING,
    },
    "spacer": {"label": "Spacer", "content": {"height": "50px"}},
    "divider": {
        "label": "Divider",
        "content": {"style": "solid", "width": "100%", "color": "#e5e7eb"},
    },
    "list": {
        "label": "List",
        "content": {"items": ["Item 1", "Item 2", "Item 3"], "ordered": False},
    },
}


def _as_mapping(value: object, what: str) -> dict[str, typ.Any]:
    """Return ``value`` as a dict, treating ``None`` as empty."""
    match value:
        case None:
            return {}
        case dict():
            return dict(value)
        case _:
            msg = f"{what} must be a mapping."
            raise ComposerConfigError(msg)


def _build_layouts(
    base: typ.Mapping[str, tuple[int, ...]], payload: typ.Mapping[str, typ.Any]
) -> dict[str, tuple[int, ...]]:
    """Merge layout code overrides into ``base`` after validating fractions."""
    layouts = dict(base)
    for code, fractions in payload.items():
        match fractions:
            case list() if fractions and all(
                isinstance(part, int) and not isinstance(part, bool) and part > 0
                for part in fractions
            ):
                layouts[str(code)] = tuple(fractions)
            case _:
                msg = f"Layout '{code}' must be a non-empty list of positive integers."
                raise ComposerConfigError(msg)
    if not layouts:  # pragma: no cover - defaults always provide layouts
        msg = "No column layouts defined."
        raise ComposerConfigError(msg)
    return layouts


def _build_element_type(name: str, payload: typ.Mapping[str, typ.Any]) -> ElementTypeConfig:
    label = payload.get("label") or name.replace("-", " ").title()
    return ElementTypeConfig(
        name=name,
        label=str(label),
        category=str(payload.get("category", "basic")),
        content=_as_mapping(payload.get("content"), f"Element type '{name}' content"),
        styles=_as_mapping(payload.get("styles"), f"Element type '{name}' styles"),
    )


def _build_element_types(
    payload: typ.Mapping[str, typ.Any],
) -> dict[str, ElementTypeConfig]:
    """Build the content-type registry from defaults plus ``payload`` entries."""
    combined: dict[str, typ.Any] = dict(DEFAULT_ELEMENT_TYPES)
    combined.update(payload)
    registry: dict[str, ElementTypeConfig] = {}
    for name, entry in combined.items():
        match entry:
            case dict():
                registry[str(name)] = _build_element_type(str(name), entry)
            case None:
                continue
            case _:
                msg = f"Element type '{name}' must be a mapping."
                raise ComposerConfigError(msg)
    return registry


__all__ = [
    "DEFAULT_ELEMENT_TYPES",
    "DEFAULT_NODE_STYLES",
    "_as_mapping",
    "_build_element_types",
    "_build_layouts",
]
