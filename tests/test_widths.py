from __future__ import annotations

import pytest

from page_composer.document import Column, Row
from page_composer.widths import (
    clamp_width,
    coerce_width,
    equal_split,
    fractions_to_percentages,
    normalize,
    redistribute,
    resolve_column_widths,
)
from page_composer._constants import DEFAULT_LAYOUTS


def _cents(widths: list[float]) -> int:
    return round(sum(widths) * 100)


@pytest.mark.parametrize(
    ("current", "index", "new", "expected"),
    [
        ([50, 50], 0, 70, [70.0, 30.0]),
        ([50, 50], 0, 100, [100.0, 0.0]),
        ([50, 50], 0, 0, [0.0, 100.0]),
        ([100, 0, 0], 1, 40, [30.0, 40.0, 30.0]),
        ([25, 50, 25], 1, 30, [35.0, 30.0, 35.0]),
        ([20, 30, 50], 0, 40, [40.0, 22.5, 37.5]),
        ([50, 50], 1, 150, [0.0, 100.0]),
        ([50, 50], 1, -20, [100.0, 0.0]),
    ],
)
def test_redistribute_examples(
    current: list[float], index: int, new: float, expected: list[float]
) -> None:
    assert redistribute(current, index, new) == pytest.approx(expected)


def test_redistribute_single_column_stays_full() -> None:
    assert redistribute([100], 0, 30) == [100.0]


def test_redistribute_out_of_range_returns_current_normalised() -> None:
    assert redistribute([30, 30, 30], 5, 10) == [40.0, 30.0, 30.0]


def test_redistribute_empty() -> None:
    assert redistribute([], 0, 50) == []


@pytest.mark.parametrize(
    ("current", "index", "new"),
    [
        ([33.33, 33.33, 33.34], 2, 10),
        ([25, 25, 25, 25], 3, 33.333),
        ([10, 20, 70], 1, 55.555),
        ([0, 0, 100], 2, 99.99),
    ],
)
def test_redistribute_always_sums_to_one_hundred(
    current: list[float], index: int, new: float
) -> None:
    result = redistribute(current, index, new)
    assert _cents(result) == 10000, f"{result} does not sum to 100"
    assert all(width >= 0 for width in result)


def test_redistribute_keeps_target_when_siblings_absorb_change() -> None:
    result = redistribute([25, 25, 25, 25], 0, 40)
    assert result[0] == 40.0
    assert result[1:] == [20.0, 20.0, 20.0]


def test_redistribute_splits_equally_when_a_sibling_is_collapsed() -> None:
    """Collapsed siblings share the remainder equally instead of by proportion.

    A purely proportional rule would turn ``[50, 50, 0]`` with the first
    column set to 60 into ``[60, 40, 0]``. That same rule cannot satisfy
    ``redistribute([100, 0, 0], 1, 40) == [30, 40, 30]``: with one sibling
    at 100 and another at 0, proportions would give ``[60, 40, 0]``. The
    equal split whenever any sibling is at zero is what makes both the
    proportional cases and the collapsed-column revival hold, so keep it.
    """
    assert redistribute([50, 50, 0], 0, 60) == [60.0, 20.0, 20.0]
    assert redistribute([100, 0, 0], 1, 40) == [30.0, 40.0, 30.0]
    assert redistribute([60, 40, 0], 2, 10) == [54.0, 36.0, 10.0]


def test_redistribute_ignores_non_finite_input() -> None:
    assert redistribute([50, 50], 0, float("nan")) == [0.0, 100.0]
    assert redistribute([float("inf"), 50], 1, 40) == [60.0, 40.0]
    assert redistribute([float("nan"), 50, 50], 0, 20) == [20.0, 40.0, 40.0]


def test_normalize_assigns_rounding_error_to_first_largest() -> None:
    assert normalize([33.333, 33.333, 33.333]) == [33.34, 33.33, 33.33]
    assert normalize([30, 30, 30]) == [40.0, 30.0, 30.0]
    assert normalize([10, 60, 20]) == [10.0, 70.0, 20.0]


def test_normalize_treats_negative_as_zero() -> None:
    assert normalize([-10, 50]) == [0.0, 100.0]


def test_normalize_treats_non_finite_as_zero() -> None:
    assert normalize([float("inf"), 10]) == [0.0, 100.0]
    assert normalize([float("nan"), 40, 40]) == [0.0, 60.0, 40.0]


@pytest.mark.parametrize(
    "widths",
    [
        [33.333, 33.333, 33.333],
        [10, 20, 30],
        [12.345, 67.891],
        [0, 0, 100.004],
        [25, 25, 25, 25],
    ],
)
def test_normalize_is_idempotent(widths: list[float]) -> None:
    once = normalize(widths)
    assert normalize(once) == once


def test_normalize_empty() -> None:
    assert normalize([]) == []


@pytest.mark.parametrize(
    ("fractions", "expected"),
    [
        ([12], [100.0]),
        ([6, 6], [50.0, 50.0]),
        ([4, 8], [33.33, 66.67]),
        ([3, 6, 3], [25.0, 50.0, 25.0]),
        ([4, 4, 4], [33.34, 33.33, 33.33]),
        ([0, 0], [50.0, 50.0]),
    ],
)
def test_fractions_to_percentages(fractions: list[int], expected: list[float]) -> None:
    assert fractions_to_percentages(fractions) == expected


def test_equal_split() -> None:
    assert equal_split(4) == [25.0, 25.0, 25.0, 25.0]
    assert equal_split(3) == [33.34, 33.33, 33.33]
    assert equal_split(0) == []


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (70, 70.0),
        ("62.5%", 62.5),
        (" 40 ", 40.0),
        (140, 100.0),
        (-5, 0.0),
        ("wide", 50.0),
        (None, 50.0),
        (True, 50.0),
        (float("nan"), 50.0),
        (float("inf"), 50.0),
        (float("-inf"), 50.0),
    ],
)
def test_coerce_width(value: object, expected: float) -> None:
    assert coerce_width(value, 50) == expected


def test_clamp_width() -> None:
    assert clamp_width(101) == 100.0
    assert clamp_width(-1) == 0.0
    assert clamp_width(float("nan")) == 0.0
    assert clamp_width(float("inf")) == 100.0


def _row(layout: str, count: int, **custom: tuple[float, ...]) -> Row:
    columns = tuple(Column(id=f"c{index}", width=0) for index in range(count))
    return Row(
        id="r", column_layout=layout, columns=columns, custom_column_widths=custom
    )


def test_resolve_widths_from_layout() -> None:
    row = _row("1-2", 2)
    assert resolve_column_widths(row, "desktop", DEFAULT_LAYOUTS) == [33.33, 66.67]


def test_resolve_widths_tablet_and_mobile_inherit_desktop_custom() -> None:
    row = _row("1-1", 2, desktop=(70.0, 30.0))
    assert resolve_column_widths(row, "tablet", DEFAULT_LAYOUTS) == [70.0, 30.0]
    assert resolve_column_widths(row, "mobile", DEFAULT_LAYOUTS) == [70.0, 30.0]


def test_resolve_widths_prefers_breakpoint_custom() -> None:
    row = _row("1-1", 2, desktop=(70.0, 30.0), mobile=(100.0, 0.0))
    assert resolve_column_widths(row, "mobile", DEFAULT_LAYOUTS) == [100.0, 0.0]
    assert resolve_column_widths(row, "desktop", DEFAULT_LAYOUTS) == [70.0, 30.0]


def test_resolve_widths_ignores_mismatched_custom_arrays() -> None:
    row = _row("1-1", 2, desktop=(20.0, 30.0, 50.0))
    assert resolve_column_widths(row, "desktop", DEFAULT_LAYOUTS) == [50.0, 50.0]


def test_resolve_widths_unknown_layout_splits_equally() -> None:
    row = _row("9-9-9", 3)
    assert resolve_column_widths(row, "desktop", DEFAULT_LAYOUTS) == [
        33.34,
        33.33,
        33.33,
    ]
