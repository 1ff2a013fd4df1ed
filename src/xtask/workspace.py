# workspace.py
# Locating the cargo workspace and switching into it.
# All cargo metadata lookups go through `_cargo` so the rest of the code never
# shells out to cargo directly for information.

from __future__ import annotations

import json
import os
import subprocess
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional


def _cargo(args: list[str], cwd: Optional[str] = None) -> str:
    """
    Execute a cargo command and return its stdout.

    A non-zero exit raises `subprocess.CalledProcessError`, which is what we
    want for tooling: no workspace, no xtask.
    """
    return subprocess.check_output(["cargo", *args], cwd=cwd, text=True)


@dataclass(frozen=True)
class Workspace:
    """Metadata about the cargo workspace."""
    root: Path
    target_dir: Path

    @classmethod
    def from_metadata(cls, metadata: dict) -> Workspace:
        return cls(
            root=Path(metadata["workspace_root"]),
            target_dir=Path(metadata["target_directory"]),
        )

    @classmethod
    def from_directory(cls, root: str | Path) -> Workspace:
        """A workspace rooted at `root` using cargo's default `target` directory."""
        root = Path(root).resolve()
        return cls(root=root, target_dir=root / "target")


def cargo_metadata(cwd: Optional[str] = None) -> Workspace:
    """
    Ask cargo where the workspace lives.

    `--no-deps` keeps this fast: we only need the workspace root and the
    target directory, not the resolved dependency graph.
    """
    out = _cargo(["metadata", "--format-version", "1", "--no-deps"], cwd=cwd)
    return Workspace.from_metadata(json.loads(out))


@contextmanager
def pushd(directory: str | Path) -> Iterator[Path]:
    """Change into `directory`, restoring the previous directory on every exit path."""
    original_cwd = os.getcwd()
    os.chdir(directory)
    try:
        yield Path(directory)
    finally:
        os.chdir(original_cwd)


@contextmanager
def in_workspace(workspace: Optional[Workspace] = None) -> Iterator[Workspace]:
    """Run the enclosed block from the workspace root."""
    workspace = workspace or cargo_metadata()
    with pushd(workspace.root):
        yield workspace
