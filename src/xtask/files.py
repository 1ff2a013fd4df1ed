# files.py
# The single "render, then check-or-write" primitive shared by every
# generated file (workflows, README, licenses, configs).
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .runner import CIError
from .ui.console import get_console


@dataclass
class DifferencesFound(CIError):
    """Check mode found on-disk content that differs from the generated content."""

    @classmethod
    def for_path(cls, path: Path) -> DifferencesFound:
        return cls(
            kind="differences_found",
            job="",
            step=None,
            message=f'Differences found in file "{path}"',
            details={"hint": "Run `cargo xtask codegen` to regenerate it."},
        )


def _normalized(text: str) -> str:
    # Only "\n" separates lines; a trailing "\r" and one final newline are ignored
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return "\n".join(line[:-1] if line.endswith("\r") else line for line in lines)


def update_file(path: str | Path, contents: str, check: bool) -> None:
    """
    Write `contents` to `path`, or with `check` verify the file already holds
    exactly that content. Check mode never touches the filesystem.
    """
    path = Path(path)
    console = get_console()

    if check:
        with open(path, encoding="utf-8", newline="") as f:
            existing = f.read()
        if _normalized(existing) != _normalized(contents):
            raise DifferencesFound.for_path(path)
        console.print_file_checked(str(path))
        return

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(contents)
    console.print_file_written(str(path))
