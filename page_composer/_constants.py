"""Common literal values used across page_composer.

Breakpoint names, the built-in column layout table and the section width
presets live here so the width math, the engine, the configuration loader
and tests all import the same values.

Examples
--------
>>> from page_composer import _constants
>>> _constants.DEFAULT_LAYOUTS["1-2-1"]
(3, 6, 3)
>>> _constants.BREAKPOINTS
('desktop', 'tablet', 'mobile')
"""

from __future__ import annotations

import typing as typ

Breakpoint = typ.Literal["desktop", "tablet", "mobile"]
InheritanceSource = typ.Literal["current", "tablet", "desktop", "base", "none"]
SectionWidth = typ.Literal["full", "wide", "medium", "small"]

DESKTOP: Breakpoint = "desktop"
TABLET: Breakpoint = "tablet"
MOBILE: Breakpoint = "mobile"
BREAKPOINTS: tuple[Breakpoint, ...] = (DESKTOP, TABLET, MOBILE)

RESPONSIVE_KEY = "responsive"
WIDTH_TOTAL = 100

# Grid fractions out of 12 for each layout code.
DEFAULT_LAYOUTS: dict[str, tuple[int, ...]] = {
    "1": (12,),
    "1-1": (6, 6),
    "1-2": (4, 8),
    "2-1": (8, 4),
    "1-1-1": (4, 4, 4),
    "1-2-1": (3, 6, 3),
    "2-1-1": (6, 3, 3),
    "1-1-1-1": (3, 3, 3, 3),
}

SECTION_WIDTHS: dict[str, str] = {
    "full": "100%",
    "wide": "1200px",
    "medium": "800px",
    "small": "600px",
}
DEFAULT_SECTION_WIDTH: SectionWidth = "wide"

ID_PREFIX = "pb"
