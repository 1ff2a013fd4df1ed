from __future__ import annotations

from typing import Iterator, Optional, Sequence

import pytest

from xtask.runner import ProcessRunner, set_runner
from xtask.ui.console import Console, set_console


class RecordingRunner(ProcessRunner):
    """Records every argument vector instead of spawning a process."""

    def __init__(self, exit_codes: Optional[dict[str, int]] = None) -> None:
        self.calls: list[tuple[list[str], Optional[str]]] = []
        self.exit_codes = dict(exit_codes or {})

    def run(self, argv: Sequence[str], cwd: Optional[str] = None) -> int:
        self.calls.append((list(argv), cwd))
        return self.exit_codes.get(" ".join(argv), 0)

    @property
    def argvs(self) -> list[list[str]]:
        return [argv for argv, _cwd in self.calls]


@pytest.fixture(autouse=True)
def _reset_globals() -> Iterator[None]:
    set_console(Console())
    yield
    set_runner(None)
    set_console(Console())


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def on_linux(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("xtask.model.host_os", lambda: "linux")


@pytest.fixture
def on_macos(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("xtask.model.host_os", lambda: "darwin")
