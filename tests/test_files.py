from __future__ import annotations

from pathlib import Path

import pytest

from xtask import CI
from xtask.files import DifferencesFound, update_file


def test_update_file_creates_parent_directories(tmp_path: Path) -> None:
    path = tmp_path / "a" / "b" / "file.txt"
    update_file(path, "hello\n", check=False)
    assert path.read_bytes() == b"hello\n"


def test_check_passes_on_identical_content(tmp_path: Path) -> None:
    path = tmp_path / "file.txt"
    update_file(path, "one\ntwo\n", check=False)
    update_file(path, "one\ntwo\n", check=True)


def test_check_ignores_windows_line_endings(tmp_path: Path) -> None:
    path = tmp_path / "file.txt"
    path.write_bytes(b"one\r\ntwo\r\n")
    update_file(path, "one\ntwo\n", check=True)


def test_check_reports_differences_and_leaves_file_alone(tmp_path: Path) -> None:
    path = tmp_path / "file.txt"
    path.write_text("old\n", encoding="utf-8")

    with pytest.raises(DifferencesFound) as excinfo:
        update_file(path, "new\n", check=True)

    assert str(path) in str(excinfo.value)
    assert excinfo.value.kind == "differences_found"
    assert path.read_text(encoding="utf-8") == "old\n"


def test_check_on_missing_file_is_an_io_error(tmp_path: Path) -> None:
    path = tmp_path / "missing.txt"

    with pytest.raises(FileNotFoundError) as excinfo:
        update_file(path, "x\n", check=True)

    assert str(path) in str(excinfo.value)
    assert not path.exists()


def test_workflow_write_then_check(tmp_path: Path) -> None:
    ci = CI.standard_workflow()

    path = ci.write(check=False, root=tmp_path)

    assert path == tmp_path / ".github" / "workflows" / "ci-tests.yml"
    assert path.read_text(encoding="utf-8") == ci.render()
    CI.standard_workflow().write(check=True, root=tmp_path)


def test_workflow_check_detects_drift(tmp_path: Path) -> None:
    path = CI.standard_workflow().write(check=False, root=tmp_path)
    edited = path.read_text(encoding="utf-8").replace("cargo doc", "cargo doc --no-deps")
    path.write_text(edited, encoding="utf-8")

    with pytest.raises(DifferencesFound, match="ci-tests.yml"):
        CI.standard_workflow().write(check=True, root=tmp_path)

    assert path.read_text(encoding="utf-8") == edited


@pytest.mark.parametrize("separator", ["\x0c", "\u2028", "\x85"])
def test_check_detects_other_line_separators_as_drift(tmp_path: Path, separator: str) -> None:
    path = tmp_path / "file.txt"
    path.write_text("one\ntwo\n", encoding="utf-8")

    with pytest.raises(DifferencesFound):
        update_file(path, f"one{separator}two\n", check=True)


def test_check_ignores_only_a_single_missing_final_newline(tmp_path: Path) -> None:
    path = tmp_path / "file.txt"
    path.write_text("one\ntwo", encoding="utf-8")

    update_file(path, "one\ntwo\n", check=True)
    with pytest.raises(DifferencesFound):
        update_file(path, "one\ntwo\n\n", check=True)


def test_check_detects_a_lone_carriage_return(tmp_path: Path) -> None:
    path = tmp_path / "file.txt"
    path.write_bytes(b"one\rtwo\n")

    with pytest.raises(DifferencesFound):
        update_file(path, "one\ntwo\n", check=True)
