from __future__ import annotations

from pathlib import Path

import pytest

from page_composer import cli
from page_composer.codec import load_document, save_document
from page_composer.document import Document
from page_composer.engine import CompositionEngine


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from an empty directory so the built-in registry is used."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_layouts_lists_percentages(capsys: pytest.CaptureFixture[str]) -> None:
    cli.layouts()
    output = capsys.readouterr().out.splitlines()
    assert "1-2-1: [3,6,3] -> 25 50 25" in output
    assert "1-2: [4,8] -> 33.33 66.67" in output


def test_new_writes_valid_document(
    isolated_cwd: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    output = isolated_cwd / "out" / "page.json"
    cli.new(output, layout="1-2-1")

    assert "wrote out/page.json" in capsys.readouterr().out
    document = load_document(output)
    assert document.sections[0].rows[0].column_layout == "1-2-1"

    cli.check(output)
    assert capsys.readouterr().out.strip() == "out/page.json: ok"


def test_new_rejects_unknown_layout(isolated_cwd: Path) -> None:
    with pytest.raises(ValueError, match="Unknown layout '9-9'"):
        cli.new(isolated_cwd / "page.json", layout="9-9")
    assert not (isolated_cwd / "page.json").exists()


def test_inspect_prints_resolved_widths(
    isolated_cwd: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    output = isolated_cwd / "page.json"
    cli.new(output, layout="1-2")
    capsys.readouterr()

    cli.inspect(output, breakpoint="mobile")
    lines = capsys.readouterr().out.splitlines()

    assert lines[0].startswith("section ")
    assert lines[0].endswith("wide 1200px")
    assert lines[1].endswith("1-2 (layout)")
    assert lines[2].endswith("33.33%")
    assert lines[3].endswith("66.67%")


def test_inspect_labels_widths_by_resolved_breakpoint(
    isolated_cwd: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    engine = CompositionEngine()
    document = engine.add_section(Document())
    document = engine.add_row(document, document.sections[0].id, "1-1")
    row_id = document.sections[0].rows[0].id
    document = engine.set_column_width(document, row_id, 0, 80, "mobile")
    output = isolated_cwd / "page.json"
    save_document(output, document)

    cli.inspect(output, breakpoint="desktop")
    desktop = capsys.readouterr().out.splitlines()
    assert desktop[1].endswith("1-1 (layout)")
    assert desktop[2].endswith("50%")

    cli.inspect(output, breakpoint="mobile")
    mobile = capsys.readouterr().out.splitlines()
    assert mobile[1].endswith("1-1 (custom)")
    assert mobile[2].endswith("80%")

    document = engine.set_column_width(document, row_id, 0, 60)
    save_document(output, document)
    cli.inspect(output, breakpoint="tablet")
    tablet = capsys.readouterr().out.splitlines()
    assert tablet[1].endswith("1-1 (desktop custom)")
    assert tablet[2].endswith("60%")


def test_check_reports_problems(
    isolated_cwd: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = isolated_cwd / "broken.json"
    path.write_text(
        '{"sections": [{"id": "s", "width": "wide", "styles": {}, "rows": ['
        '{"id": "r", "columnLayout": "1-1", "styles": {}, "columns": ['
        '{"id": "c", "width": 12, "elements": [], "styles": {}}]}]}]}',
        encoding="utf-8",
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.check(path)

    assert excinfo.value.code == 1
    assert "expects 2" in capsys.readouterr().out


def test_explicit_config_is_used(
    isolated_cwd: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config = isolated_cwd / "composer.yaml"
    config.write_text('layouts:\n  "5": [1, 1, 1, 1, 1]\n', encoding="utf-8")
    cli.layouts(config=config)
    assert "5: [1,1,1,1,1] -> 20 20 20 20 20" in capsys.readouterr().out


def test_explicit_missing_config_raises(isolated_cwd: Path) -> None:
    with pytest.raises(FileNotFoundError):
        cli.layouts(config=isolated_cwd / "nope.yaml")


def test_redistribute_command(capsys: pytest.CaptureFixture[str]) -> None:
    cli.redistribute_command([50, 50], index=0, width=70)
    assert capsys.readouterr().out.strip() == "70 30"


def test_redistribute_command_revives_collapsed_columns(
    capsys: pytest.CaptureFixture[str],
) -> None:
    cli.redistribute_command([100, 0, 0], index=1, width=40)
    assert capsys.readouterr().out.strip() == "30 40 30"
