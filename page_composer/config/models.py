"""Typed dataclasses describing the composer's layout and content registries."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .._constants import DEFAULT_LAYOUTS, DEFAULT_SECTION_WIDTH


class ComposerConfigError(ValueError):
    """Raised when the composer configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class ElementTypeConfig:
    """A registered content type and the payload new elements start with."""

    name: str
    label: str
    category: str = "basic"
    content: dict[str, typ.Any] = dc.field(default_factory=dict)
    styles: dict[str, typ.Any] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class NodeDefaults:
    """Styles and presets applied to freshly created structural nodes."""

    section_width: str = DEFAULT_SECTION_WIDTH
    section_styles: dict[str, typ.Any] = dc.field(default_factory=dict)
    row_styles: dict[str, typ.Any] = dc.field(default_factory=dict)
    column_styles: dict[str, typ.Any] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class ComposerConfig:
    """Layout codes, the content-type registry and node defaults."""

    layouts: dict[str, tuple[int, ...]] = dc.field(
        default_factory=lambda: dict(DEFAULT_LAYOUTS)
    )
    element_types: dict[str, ElementTypeConfig] = dc.field(default_factory=dict)
    defaults: NodeDefaults = dc.field(default_factory=NodeDefaults)

    @classmethod
    def default(cls) -> ComposerConfig:
        """Return the built-in registry used when no YAML file is supplied."""
        from .helpers import DEFAULT_NODE_STYLES, _build_element_types

        return cls(
            layouts=dict(DEFAULT_LAYOUTS),
            element_types=_build_element_types({}),
            defaults=NodeDefaults(
                section_width=DEFAULT_SECTION_WIDTH,
                section_styles=dict(DEFAULT_NODE_STYLES["section"]),
                row_styles=dict(DEFAULT_NODE_STYLES["row"]),
                column_styles=dict(DEFAULT_NODE_STYLES["column"]),
            ),
        )

    @property
    def max_columns(self) -> int:
        """Return the widest column count any layout code allows."""
        return max((len(fractions) for fractions in self.layouts.values()), default=1)

    def get_element_type(self, name: str) -> ElementTypeConfig | None:
        return self.element_types.get(name)

    def balanced_layout(self, count: int) -> str | None:
        """Return the equal-split layout code for ``count`` columns, if any.

        Prefers the conventional ``"1-1-..."`` code and otherwise any layout
        whose fractions are all equal.
        """
        if count <= 0:
            return None
        code = "-".join(["1"] * count)
        if code in self.layouts:
            return code
        for candidate, fractions in self.layouts.items():
            if len(fractions) == count and len(set(fractions)) == 1:
                return candidate
        return None


__all__ = [
    "ComposerConfig",
    "ComposerConfigError",
    "ElementTypeConfig",
    "NodeDefaults",
]
