"""Load the composer registry YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ

from ruamel.yaml import YAML

from .._constants import SECTION_WIDTHS
from .helpers import _as_mapping, _build_element_types, _build_layouts
from .models import ComposerConfig, ComposerConfigError, NodeDefaults

if typ.TYPE_CHECKING:
    from pathlib import Path


def load_composer_config(path: Path) -> ComposerConfig:
    """Load layout codes, content types and node defaults from YAML.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML registry (for example
        ``config/composer.yaml``).

    Returns
    -------
    ComposerConfig
        Built-in defaults with the file's ``layouts``, ``element_types`` and
        ``defaults`` merged on top. Setting an element type to ``null`` removes
        it from the registry.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    ComposerConfigError
        If a section has the wrong shape, a layout code is not a list of
        positive integers or the default section width is unknown.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> config = load_composer_config(Path("config/composer.yaml"))  # doctest: +SKIP
    >>> config.layouts["1-2-1"]  # doctest: +SKIP
    (3, 6, 3)
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    raw = _as_mapping(loaded, "Top-level YAML structure")

    base = ComposerConfig.default()
    layouts = _build_layouts(base.layouts, _as_mapping(raw.get("layouts"), "layouts"))
    element_types = _build_element_types(
        _as_mapping(raw.get("element_types"), "element_types")
    )
    defaults = _build_node_defaults(
        base.defaults, _as_mapping(raw.get("defaults"), "defaults")
    )
    return ComposerConfig(
        layouts=layouts, element_types=element_types, defaults=defaults
    )


def _build_node_defaults(
    base: NodeDefaults, payload: typ.Mapping[str, typ.Any]
) -> NodeDefaults:
    """Merge the ``defaults`` block over the built-in node defaults."""
    section_width = str(payload.get("section_width", base.section_width))
    if section_width not in SECTION_WIDTHS:
        known = ", ".join(sorted(SECTION_WIDTHS))
        msg = f"Unknown section_width '{section_width}'. Known widths: {known}"
        raise ComposerConfigError(msg)
    return NodeDefaults(
        section_width=section_width,
        section_styles=_styles_override(base.section_styles, payload, "section_styles"),
        row_styles=_styles_override(base.row_styles, payload, "row_styles"),
        column_styles=_styles_override(base.column_styles, payload, "column_styles"),
    )


def _styles_override(
    base: dict[str, typ.Any], payload: typ.Mapping[str, typ.Any], key: str
) -> dict[str, typ.Any]:
    """Return the file's style block when given, otherwise the built-in one."""
    if key not in payload:
        return dict(base)
    return _as_mapping(payload[key], key)


__all__ = ["load_composer_config"]
