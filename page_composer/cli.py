"""Cyclopts CLI for inspecting and scaffolding composed page documents.

The ``pages-compose`` console script is a developer aid around the
composition core: it lists the configured layout codes, scaffolds a new
document, prints a document tree as a given breakpoint would render it,
checks structural invariants and previews column width redistribution.

Examples
--------
Scaffold a page with a two-column row and inspect it on mobile:

>>> from page_composer.cli import app
>>> app.meta(["new", "page.json", "--layout", "1-1"])  # doctest: +SKIP
>>> app.meta(["inspect", "page.json", "--breakpoint", "mobile"])  # doctest: +SKIP

Preview how the remaining columns shrink when the first one grows:

>>> app.meta(["redistribute", "50", "50", "--index", "0", "--width", "70"])  # doctest: +SKIP
70 30
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from ._constants import DESKTOP
from .codec import load_document, save_document
from .config import ComposerConfig, load_composer_config
from .document import Document, check_invariants
from .engine import CompositionEngine
from .widths import redistribute as redistribute_widths
from .widths import fractions_to_percentages, resolve_column_widths

if typ.TYPE_CHECKING:
    from ._constants import Breakpoint
    from .document import Column, Element, Row, Section, Visibility

DEFAULT_CONFIG = Path("config/composer.yaml")
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

app = App(name="pages-compose", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]

logger = logging.getLogger(__name__)

ConfigOption = typ.Annotated[
    Path, Parameter(help="Path to composer config", env_var="INPUT_CONFIG")
]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _load_config(path: Path) -> ComposerConfig:
    """Load ``path``, using built-in defaults when the default file is absent."""
    if path == DEFAULT_CONFIG and not path.exists():
        logger.debug("No %s found; using built-in registry", path)
        return ComposerConfig.default()
    return load_composer_config(path)


def _format_widths(widths: typ.Iterable[float]) -> str:
    return " ".join(f"{width:g}" for width in widths)


def _hidden(visibility: Visibility, breakpoint: Breakpoint) -> str:
    return "" if visibility.is_visible(breakpoint) else " (hidden)"


@app.command(help="List the configured column layout codes.")
def layouts(*, config: ConfigOption = DEFAULT_CONFIG) -> None:
    """Print each layout code with its fractions and percentages."""
    composer_config = _load_config(config)
    for code, fractions in composer_config.layouts.items():
        fraction_text = ",".join(str(fraction) for fraction in fractions)
        percentages = _format_widths(fractions_to_percentages(fractions))
        print(f"{code}: [{fraction_text}] -> {percentages}")


@app.command(help="Write a new document with one section and one row.")
def new(
    output: Path,
    /,
    *,
    layout: typ.Annotated[
        str, Parameter(help="Column layout code for the first row")
    ] = "1",
    config: ConfigOption = DEFAULT_CONFIG,
) -> None:
    """Scaffold a document at ``output``.

    Parameters
    ----------
    output : Path
        Destination JSON file; parent directories are created.
    layout : str, optional
        Layout code of the first row, ``"1"`` by default.
    config : Path, optional
        Path to the composer config (overridable via ``INPUT_CONFIG``).

    Raises
    ------
    ValueError
        If ``layout`` is not a configured layout code.
    """
    composer_config = _load_config(config)
    if layout not in composer_config.layouts:
        known = ", ".join(composer_config.layouts)
        msg = f"Unknown layout '{layout}'. Known layouts: {known}."
        raise ValueError(msg)
    engine = CompositionEngine(composer_config)
    document = engine.add_section(Document())
    document = engine.add_row(document, document.sections[0].id, layout)
    save_document(output, document)
    print(f"wrote {_format_path(output)}")


def _describe_element(element: Element, breakpoint: Breakpoint) -> str:
    hidden = _hidden(element.visibility, breakpoint)
    return f"      element {element.id} {element.type}{hidden}"


def _describe_column(
    column: Column, width: float, breakpoint: Breakpoint
) -> list[str]:
    hidden = _hidden(column.visibility, breakpoint)
    lines = [f"    column {column.id} {width:g}%{hidden}"]
    lines.extend(_describe_element(item, breakpoint) for item in column.elements)
    return lines


def _width_source(row: Row, breakpoint: Breakpoint) -> str:
    """Name where the widths rendered at ``breakpoint`` come from."""
    count = len(row.columns)
    candidates = (breakpoint,) if breakpoint == DESKTOP else (breakpoint, DESKTOP)
    for candidate in candidates:
        widths = row.custom_column_widths.get(candidate)
        if widths is not None and len(widths) == count:
            return "custom" if candidate == breakpoint else f"{candidate} custom"
    return "layout"


def _describe_row(
    row: Row, breakpoint: Breakpoint, composer_config: ComposerConfig
) -> list[str]:
    widths = resolve_column_widths(row, breakpoint, composer_config.layouts)
    source = _width_source(row, breakpoint)
    lines = [
        f"  row {row.id} {row.column_layout} ({source})"
        f"{_hidden(row.visibility, breakpoint)}"
    ]
    for column, width in zip(row.columns, widths, strict=False):
        lines.extend(_describe_column(column, width, breakpoint))
    return lines


def _describe_section(
    section: Section, breakpoint: Breakpoint, composer_config: ComposerConfig
) -> list[str]:
    lines = [
        f"section {section.id} {section.width} {section.resolved_width()}"
        f"{_hidden(section.visibility, breakpoint)}"
    ]
    for row in section.rows:
        lines.extend(_describe_row(row, breakpoint, composer_config))
    return lines


@app.command(help="Print a document tree as rendered at a breakpoint.")
def inspect(
    document: Path,
    /,
    *,
    breakpoint: typ.Annotated[
        typ.Literal["desktop", "tablet", "mobile"],
        Parameter(help="Breakpoint to resolve widths and visibility for"),
    ] = DESKTOP,
    config: ConfigOption = DEFAULT_CONFIG,
) -> None:
    """Print sections, rows, columns and elements with resolved widths."""
    composer_config = _load_config(config)
    loaded = load_document(document)
    for section in loaded.sections:
        for line in _describe_section(section, breakpoint, composer_config):
            print(line)


@app.command(help="Check a document for structural problems.")
def check(document: Path, /, *, config: ConfigOption = DEFAULT_CONFIG) -> None:
    """Print every invariant violation; exit with status 1 when there are any."""
    composer_config = _load_config(config)
    problems = check_invariants(load_document(document), composer_config.layouts)
    if not problems:
        print(f"{_format_path(document)}: ok")
        return
    for problem in problems:
        print(f"{_format_path(document)}: {problem}")
    raise SystemExit(1)


@app.command(name="redistribute", help="Preview a column width redistribution.")
def redistribute_command(
    widths: list[float],
    /,
    *,
    index: typ.Annotated[int, Parameter(help="Column being resized")],
    width: typ.Annotated[float, Parameter(help="Requested width in percent")],
) -> None:
    """Print the widths after setting column ``index`` to ``width``."""
    print(_format_widths(redistribute_widths(widths, index, width)))


@app.meta.default
def launcher(
    *tokens: typ.Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: typ.Annotated[
        str, Parameter(help="Logging level", env_var="INPUT_LOG_LEVEL")
    ] = "WARNING",
) -> None:
    """Configure logging, then dispatch to the requested subcommand."""
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT)
    app(tokens)


def main() -> None:
    """Invoke the Cyclopts application behind the ``pages-compose`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app.meta()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
