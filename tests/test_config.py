from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from page_composer.config import (
    ComposerConfig,
    ComposerConfigError,
    load_composer_config,
)

REPO_ROOT = Path(__file__).resolve().parents[1]


def _write(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "composer.yaml"
    path.write_text(dedent(body).strip() + "\n", encoding="utf-8")
    return path


def test_default_registry() -> None:
    config = ComposerConfig.default()
    assert config.layouts["1-2-1"] == (3, 6, 3)
    assert config.max_columns == 4
    assert config.defaults.section_width == "wide"
    heading = config.get_element_type("heading")
    assert heading.content["level"] == 1
    assert heading.styles == {"textAlign": "center"}
    assert config.get_element_type("carousel") is None


@pytest.mark.parametrize(
    ("count", "expected"),
    [(1, "1"), (2, "1-1"), (3, "1-1-1"), (4, "1-1-1-1"), (5, None), (0, None)],
)
def test_balanced_layout(count: int, expected: str | None) -> None:
    assert ComposerConfig.default().balanced_layout(count) == expected


def test_balanced_layout_falls_back_to_equal_fractions() -> None:
    config = ComposerConfig(layouts={"halves": (6, 6), "1-2": (4, 8)})
    assert config.balanced_layout(2) == "halves"


def test_repository_config_loads() -> None:
    config = load_composer_config(REPO_ROOT / "config" / "composer.yaml")
    assert config.get_element_type("testimonial").category == "content"
    assert config.get_element_type("paragraph") is not None
    assert config.layouts["2-1-1"] == (6, 3, 3)


def test_file_merges_over_defaults(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
        defaults:
          section_width: medium
          row_styles:
            gap: 12px
        layouts:
          "1-1-1-1-1": [2, 2, 2, 2, 4]
        element_types:
          video: null
          badge:
            content:
              text: New
        """,
    )
    config = load_composer_config(path)

    assert config.layouts["1-1"] == (6, 6)
    assert config.layouts["1-1-1-1-1"] == (2, 2, 2, 2, 4)
    assert config.max_columns == 5
    assert config.get_element_type("video") is None
    badge = config.get_element_type("badge")
    assert badge.label == "Badge"
    assert badge.content == {"text": "New"}
    assert config.defaults.section_width == "medium"
    assert config.defaults.row_styles == {"gap": "12px"}
    assert config.defaults.section_styles["paddingTop"] == "20px"


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    config = load_composer_config(_write(tmp_path, "# nothing here"))
    assert config.layouts == ComposerConfig.default().layouts


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="not found"):
        load_composer_config(tmp_path / "absent.yaml")


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("- just\n- a list", "Top-level YAML structure must be a mapping"),
        ("layouts:\n  bad: []", "Layout 'bad'"),
        ("layouts:\n  bad: [6, -6]", "positive integers"),
        ("layouts: [1, 2]", "layouts must be a mapping"),
        ("element_types:\n  text: plain", "Element type 'text' must be a mapping"),
        ("defaults:\n  section_width: huge", "Unknown section_width 'huge'"),
    ],
)
def test_invalid_config(tmp_path: Path, body: str, message: str) -> None:
    with pytest.raises(ComposerConfigError, match=message):
        load_composer_config(_write(tmp_path, body))
