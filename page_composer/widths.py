"""Percentage arithmetic for the columns of a row.

Every function here is pure and works on plain sequences of numbers so the
same helpers serve the engine (when a user drags or types a column width),
the renderer (when it asks for the widths to paint) and the CLI.

Widths are percentages of the row. Arrays produced by :func:`normalize`,
:func:`redistribute` and :func:`fractions_to_percentages` always sum to
exactly ``100.00`` once expressed in hundredths: values are rounded half-up
to two decimals and the remaining rounding error is assigned to the largest
entry (the first one on ties).

Examples
--------
>>> redistribute([50, 50], 0, 70)
[70.0, 30.0]
>>> redistribute([100, 0, 0], 1, 40)
[30.0, 40.0, 30.0]
>>> fractions_to_percentages([4, 4, 4])
[33.34, 33.33, 33.33]
"""

from __future__ import annotations

import collections.abc as cabc
import decimal
import math
import re
import typing as typ

from ._constants import DESKTOP, WIDTH_TOTAL

if typ.TYPE_CHECKING:
    from ._constants import Breakpoint
    from .document import Row

_HUNDREDTHS = WIDTH_TOTAL * 100
_CENT = decimal.Decimal("0.01")
_NUMBER_PATTERN = re.compile(r"^\s*(-?\d+(?:\.\d+)?|-?\.\d+)\s*%?\s*$")


def _to_hundredths(value: float) -> int:
    """Round ``value`` half-up to two decimals and return it in hundredths."""
    quantized = decimal.Decimal(str(value)).quantize(
        _CENT, rounding=decimal.ROUND_HALF_UP
    )
    return int(quantized * 100)


def clamp_width(value: float) -> float:
    """Clamp ``value`` into the ``[0, 100]`` percentage range.

    ``NaN`` clamps to ``0``.
    """
    if math.isnan(value):
        return 0.0
    return float(min(max(value, 0), WIDTH_TOTAL))


def _usable(width: float) -> float:
    """Return ``width`` as a float, with negative or non-finite values as 0."""
    number = float(width)
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _largest_index(values: cabc.Sequence[int]) -> int:
    return max(range(len(values)), key=values.__getitem__)


def normalize(widths: cabc.Sequence[float]) -> list[float]:
    """Round widths to two decimals and force the array to sum to 100.

    Parameters
    ----------
    widths : Sequence[float]
        Column percentages. Negative, infinite and ``NaN`` entries are treated
        as ``0``; the input does not need to sum to 100.

    Returns
    -------
    list[float]
        Rounded widths whose sum is exactly ``100.00`` in hundredths. The whole
        rounding error is added to the largest entry, ties broken by the first
        occurrence. An empty input yields an empty list.

    Examples
    --------
    >>> normalize([33.333, 33.333, 33.333])
    [33.34, 33.33, 33.33]
    >>> normalize([30, 30, 30])
    [40.0, 30.0, 30.0]
    """
    if not widths:
        return []
    cents = [_to_hundredths(_usable(width)) for width in widths]
    error = _HUNDREDTHS - sum(cents)
    if error:
        cents[_largest_index(cents)] += error
    return [cent / 100 for cent in cents]


def equal_split(count: int) -> list[float]:
    """Return ``count`` equal percentages normalised to sum to 100."""
    if count <= 0:
        return []
    return normalize([WIDTH_TOTAL / count] * count)


def redistribute(
    current_widths: cabc.Sequence[float], changed_index: int, new_width: float
) -> list[float]:
    """Set one column width and share the remainder among its siblings.

    Parameters
    ----------
    current_widths : Sequence[float]
        Present sibling percentages.
    changed_index : int
        Position of the column the user edited.
    new_width : float
        Requested width for that column, clamped to ``[0, 100]``.

    Returns
    -------
    list[float]
        Normalised widths. When every sibling has a positive width they keep
        their relative proportions (the largest sibling gains or loses the
        most). When any sibling sits at zero the remaining budget is split
        equally between all siblings, which revives collapsed columns. A single
        column always stays at ``100``; an out-of-range index returns the
        current widths normalised.

    Examples
    --------
    >>> redistribute([50, 50], 0, 100)
    [100.0, 0.0]
    >>> redistribute([50, 50], 0, 0)
    [0.0, 100.0]
    >>> redistribute([100], 0, 30)
    [100.0]
    """
    count = len(current_widths)
    if count == 0:
        return []
    if count == 1:
        return [float(WIDTH_TOTAL)]
    if not 0 <= changed_index < count:
        return normalize(current_widths)

    target = clamp_width(new_width)
    remaining = WIDTH_TOTAL - target
    others = [
        _usable(width)
        for index, width in enumerate(current_widths)
        if index != changed_index
    ]
    if all(width > 0 for width in others):
        scale = remaining / sum(others)
        shared = [width * scale for width in others]
    else:
        shared = [remaining / len(others)] * len(others)

    result = list(shared)
    result.insert(changed_index, target)
    return normalize(result)


def fractions_to_percentages(fractions: cabc.Sequence[int]) -> list[float]:
    """Convert grid fractions such as ``[3, 6, 3]`` into percentages.

    Empty or all-zero fraction lists fall back to an equal split.

    >>> fractions_to_percentages([3, 6, 3])
    [25.0, 50.0, 25.0]
    >>> fractions_to_percentages([12])
    [100.0]
    """
    total = sum(max(fraction, 0) for fraction in fractions)
    if total <= 0:
        return equal_split(len(fractions))
    return normalize(
        [max(fraction, 0) * WIDTH_TOTAL / total for fraction in fractions]
    )


def coerce_width(value: object, current: float) -> float:
    """Turn UI input into a clamped percentage.

    Numbers are clamped to ``[0, 100]``; strings like ``"70"`` or ``"62.5%"``
    are parsed first. Anything else (``None``, ``"abc"``, booleans, ``NaN``,
    infinities) coerces to ``current`` so a half-typed value never disturbs
    the row mid-edit.

    >>> coerce_width("62.5%", 50)
    62.5
    >>> coerce_width("wide", 50)
    50.0
    >>> coerce_width(140, 50)
    100.0
    """
    match value:
        case bool():
            return clamp_width(current)
        case int() | float() if math.isfinite(value):
            return clamp_width(value)
        case str() as text:
            found = _NUMBER_PATTERN.match(text)
            if found is None:
                return clamp_width(current)
            return clamp_width(float(found.group(1)))
        case _:
            return clamp_width(current)


def _matching(
    widths: cabc.Sequence[float] | None, count: int
) -> list[float] | None:
    if widths is None or len(widths) != count:
        return None
    return [float(width) for width in widths]


def resolve_column_widths(
    row: Row,
    breakpoint: Breakpoint,
    layouts: cabc.Mapping[str, cabc.Sequence[int]],
) -> list[float]:
    """Return the percentages to render for each column of ``row``.

    Resolution order: custom widths for ``breakpoint``; for tablet and mobile,
    the desktop custom widths; the layout code's fractions as percentages;
    finally an equal split across the row's columns. Custom arrays whose
    length no longer matches the column count are ignored.
    """
    count = len(row.columns)
    if count == 0:
        return []
    custom = row.custom_column_widths
    own = _matching(custom.get(breakpoint), count)
    if own is not None:
        return own
    if breakpoint != DESKTOP:
        inherited = _matching(custom.get(DESKTOP), count)
        if inherited is not None:
            return inherited
    fractions = layouts.get(row.column_layout)
    if fractions is not None and len(fractions) == count:
        return fractions_to_percentages(fractions)
    return equal_split(count)


__all__ = [
    "clamp_width",
    "coerce_width",
    "equal_split",
    "fractions_to_percentages",
    "normalize",
    "redistribute",
    "resolve_column_widths",
]
