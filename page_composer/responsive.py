"""Per-property responsive style resolution.

Every style control in the editor reads and writes through these functions so
inheritance behaves the same on sections, rows, columns and elements:

* desktop is the base;
* tablet falls back to the desktop override;
* mobile falls back to the tablet override, then the desktop override;
* every breakpoint finally falls back to the node's base (non-responsive)
  property and then to a caller-supplied fallback.

Resolution is per property. Overriding ``fontSize`` on mobile leaves the
inheritance of ``color`` untouched, and compound values such as margins are
stored as four independent longhand properties rather than merged objects.

A value counts as *set* only when it is present, not ``None`` and not the
empty string.

Examples
--------
>>> from page_composer.document import StyleBag
>>> bag = StyleBag(responsive={"desktop": {"color": "red"}})
>>> get_effective_value(bag, "color", "mobile", "black")
'red'
>>> inheritance_source(bag, "color", "mobile")
'desktop'
>>> bag = set_override(bag, "fontSize", "14px", "mobile")
>>> inheritance_source(bag, "color", "mobile")
'desktop'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

from ._constants import BREAKPOINTS, DESKTOP, MOBILE, TABLET
from .document import StyleBag

if typ.TYPE_CHECKING:
    from ._constants import Breakpoint, InheritanceSource


class _HasStyles(typ.Protocol):
    @property
    def styles(self) -> StyleBag: ...


StyleTarget = StyleBag | _HasStyles

_LABELS: dict[str, str] = {
    "tablet": "Inherited from Tablet",
    "desktop": "Inherited from Desktop",
    "base": "Base Style",
}
_SPACING_PROPERTIES = ("margin", "padding")
_SIDES = ("Top", "Right", "Bottom", "Left")


def is_set(value: object) -> bool:
    """Return ``True`` unless ``value`` is ``None`` or an empty string."""
    return value is not None and value != ""


def _bag(target: StyleTarget) -> StyleBag:
    if isinstance(target, StyleBag):
        return target
    return target.styles


def _fallback_chain(breakpoint: Breakpoint) -> tuple[Breakpoint, ...]:
    """Return the responsive buckets consulted after ``breakpoint`` itself."""
    if breakpoint == MOBILE:
        return (TABLET, DESKTOP)
    if breakpoint == TABLET:
        return (DESKTOP,)
    return ()


def _lookup(
    bag: StyleBag, property_name: str, breakpoint: Breakpoint
) -> tuple[InheritanceSource, typ.Any]:
    value = bag.bucket(breakpoint).get(property_name)
    if is_set(value):
        return "current", value
    for inherited in _fallback_chain(breakpoint):
        value = bag.bucket(inherited).get(property_name)
        if is_set(value):
            return typ.cast("InheritanceSource", inherited), value
    value = bag.base.get(property_name)
    if is_set(value):
        return "base", value
    return "none", None


def get_effective_value(
    target: StyleTarget,
    property_name: str,
    breakpoint: Breakpoint,
    fallback: typ.Any = None,
) -> typ.Any:
    """Return the value ``property_name`` resolves to at ``breakpoint``.

    Parameters
    ----------
    target : StyleBag or node
        A style bag or any node exposing ``styles``.
    property_name : str
        Longhand property name, e.g. ``"fontSize"`` or ``"marginTop"``.
    breakpoint : {"desktop", "tablet", "mobile"}
        Breakpoint being rendered or edited.
    fallback : Any, optional
        Returned when nothing in the inheritance chain is set.

    Returns
    -------
    Any
        The explicit override for ``breakpoint``; for mobile the tablet
        override; for mobile and tablet the desktop override; the base value;
        otherwise ``fallback``.
    """
    source, value = _lookup(_bag(target), property_name, breakpoint)
    if source == "none":
        return fallback
    return value


def has_override(
    target: StyleTarget, property_name: str, breakpoint: Breakpoint
) -> bool:
    """Return whether ``breakpoint`` itself carries an explicit value.

    Inherited values are not overrides; this drives "reset" affordances.
    """
    return is_set(_bag(target).bucket(breakpoint).get(property_name))


def inheritance_source(
    target: StyleTarget, property_name: str, breakpoint: Breakpoint
) -> InheritanceSource:
    """Report which step of the lookup supplied the effective value.

    Returns one of ``"current"``, ``"tablet"``, ``"desktop"``, ``"base"`` or
    ``"none"``. Meant for UI disclosure only.
    """
    source, _value = _lookup(_bag(target), property_name, breakpoint)
    return source


def inheritance_label(source: InheritanceSource) -> str:
    """Return the hint shown next to a control for ``source``.

    >>> inheritance_label("desktop")
    'Inherited from Desktop'
    >>> inheritance_label("current")
    ''
    """
    return _LABELS.get(source, "")


def set_override(
    target: StyleTarget,
    property_name: str,
    value: typ.Any,
    breakpoint: Breakpoint,
) -> StyleBag:
    """Return a bag with ``value`` written to ``responsive[breakpoint]``.

    The bucket is created when missing; other breakpoints are untouched.
    """
    bag = _bag(target)
    bucket = dict(bag.bucket(breakpoint))
    bucket[property_name] = value
    responsive = dict(bag.responsive)
    responsive[breakpoint] = bucket
    return dc.replace(bag, responsive=responsive)


def clear_override(
    target: StyleTarget, property_name: str, breakpoint: Breakpoint
) -> StyleBag:
    """Return a bag without ``property_name`` in the ``breakpoint`` bucket.

    A bucket left empty is dropped so the bag stays minimal. When nothing is
    stored the original bag is returned unchanged.
    """
    bag = _bag(target)
    current = bag.bucket(breakpoint)
    if property_name not in current:
        return bag
    bucket = {key: value for key, value in current.items() if key != property_name}
    responsive = dict(bag.responsive)
    if bucket:
        responsive[breakpoint] = bucket
    else:
        responsive.pop(breakpoint, None)
    return dc.replace(bag, responsive=responsive)


def set_base_value(
    target: StyleTarget, property_name: str, value: typ.Any
) -> StyleBag:
    """Return a bag with ``value`` stored as the base property."""
    bag = _bag(target)
    return dc.replace(bag, base={**bag.base, property_name: value})


def clear_base_value(target: StyleTarget, property_name: str) -> StyleBag:
    """Return a bag without the base ``property_name``."""
    bag = _bag(target)
    if property_name not in bag.base:
        return bag
    base = {key: value for key, value in bag.base.items() if key != property_name}
    return dc.replace(bag, base=base)


def parse_shorthand_spacing(value: object) -> dict[str, str]:
    """Split a CSS margin/padding shorthand into its four sides.

    >>> parse_shorthand_spacing("10px 20px")
    {'top': '10px', 'right': '20px', 'bottom': '10px', 'left': '20px'}
    >>> parse_shorthand_spacing("1px 2px 3px 4px 5px")
    {}
    """
    if not isinstance(value, str):
        return {}
    parts = value.split()
    match parts:
        case [every]:
            top = right = bottom = left = every
        case [vertical, horizontal]:
            top, right, bottom, left = vertical, horizontal, vertical, horizontal
        case [top, horizontal, bottom]:
            right = left = horizontal
        case [top, right, bottom, left]:
            pass
        case _:
            return {}
    return {"top": top, "right": right, "bottom": bottom, "left": left}


def _expand_spacing(styles: cabc.Mapping[str, typ.Any]) -> dict[str, typ.Any]:
    """Return ``styles`` with margin/padding shorthands split into longhands.

    A longhand stored next to its shorthand in the same mapping wins.
    """
    expanded = dict(styles)
    for shorthand in _SPACING_PROPERTIES:
        value = expanded.get(shorthand)
        if not isinstance(value, str) or not value:
            continue
        del expanded[shorthand]
        sides = parse_shorthand_spacing(value)
        for side in _SIDES:
            part = sides.get(side.lower())
            if part and not is_set(expanded.get(f"{shorthand}{side}")):
                expanded[f"{shorthand}{side}"] = part
    return expanded


def resolve_styles(
    target: StyleTarget,
    breakpoint: Breakpoint,
    defaults: cabc.Mapping[str, typ.Any] | None = None,
) -> dict[str, typ.Any]:
    """Return every property of ``target`` resolved for ``breakpoint``.

    The renderer calls this once per node and breakpoint. ``defaults`` are
    applied first, then base properties, then each responsive property
    resolved through the same chain as :func:`get_effective_value`.

    Margin and padding shorthands are split into longhands inside each bucket
    before resolution, so every side inherits on its own: a desktop
    ``margin: 10px`` never hides a mobile ``marginTop: 0``.
    """
    original = _bag(target)
    bag = StyleBag(
        base=_expand_spacing(original.base),
        responsive={
            name: _expand_spacing(bucket)
            for name, bucket in original.responsive.items()
        },
    )
    resolved = _expand_spacing(defaults or {})
    resolved.update(bag.base)
    properties: dict[str, None] = {}
    for bucket_name in BREAKPOINTS:
        properties.update(dict.fromkeys(bag.bucket(bucket_name)))
    for property_name in properties:
        source, value = _lookup(bag, property_name, breakpoint)
        if source not in {"none", "base"}:
            resolved[property_name] = value
    return resolved


__all__ = [
    "StyleTarget",
    "clear_base_value",
    "clear_override",
    "get_effective_value",
    "has_override",
    "inheritance_label",
    "inheritance_source",
    "is_set",
    "parse_shorthand_spacing",
    "resolve_styles",
    "set_base_value",
    "set_override",
]
