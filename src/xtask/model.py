# model.py
from __future__ import annotations

import shlex
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union


# ---------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------

@dataclass
class Cmd:
    """A program plus its arguments."""
    program: str
    args: List[str] = field(default_factory=list)

    @classmethod
    def from_argv(cls, argv: Iterable[str]) -> Cmd:
        argv = [str(a) for a in argv]
        if not argv:
            raise ValueError("Can't extract executable from empty argument list")
        return cls(program=argv[0], args=argv[1:])

    def arg(self, arg: str) -> Cmd:
        self.args.append(str(arg))
        return self

    def argv(self) -> List[str]:
        return [self.program, *self.args]

    def __str__(self) -> str:
        # Quoted so the CI shell splits it back into the same argv
        return shlex.join(self.argv())


# ---------------------------------------------------------------------
# Steps (closed union: Empty | Multi | Action | Run)
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Empty:
    """A step that renders nothing and runs nothing."""


@dataclass
class Multi:
    """An ordered group of steps, flattened on render and execution."""
    steps: List[Step] = field(default_factory=list)


@dataclass
class Action:
    """
    A `uses:` step. Parameters keep insertion order and duplicates are kept,
    so `with_("a", 1).with_("a", 2)` renders both lines.
    """
    uses: str
    with_params: List[Tuple[str, str]] = field(default_factory=list)
    env_vars: List[Tuple[str, str]] = field(default_factory=list)

    def with_(self, key: str, value) -> Action:
        self.with_params.append((key, format_value(value)))
        return self

    def env(self, key: str, value) -> Action:
        self.env_vars.append((key, format_value(value)))
        return self


@dataclass
class Run:
    """
    One or more commands sharing a working directory.

    `multi` distinguishes `run: |` scripts from single `run:` lines, even when
    a script happens to hold a single command.
    """
    commands: List[Cmd]
    multi: bool = False
    directory: Optional[str] = None

    def dir(self, directory: str) -> Run:
        self.directory = str(directory)
        return self


Step = Union[Empty, Multi, Action, Run]


def format_value(value) -> str:
    # YAML spells booleans in lower case
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# ---------------------------------------------------------------------
# Toolchain
# ---------------------------------------------------------------------

NIGHTLY_MARKER = "nightly"


@dataclass
class Rust:
    """Rust toolchain selection for a job."""
    toolchain: str
    profile: Optional[str] = None
    default: bool = False
    components: List[str] = field(default_factory=list)
    targets: Optional[List[str]] = None

    @property
    def is_nightly(self) -> bool:
        return self.toolchain.startswith(NIGHTLY_MARKER)

    def minimal(self) -> Rust:
        self.profile = "minimal"
        return self

    def set_default(self) -> Rust:
        self.default = True
        return self

    def clippy(self) -> Rust:
        self.components.append("clippy")
        return self

    def rustfmt(self) -> Rust:
        self.components.append("rustfmt")
        return self

    def wasm(self) -> Rust:
        return self.target("wasm32-unknown-unknown")

    def target(self, triple: str) -> Rust:
        if self.targets is None:
            self.targets = []
        self.targets.append(triple)
        return self

    def to_step(self) -> Action:
        action = Action("ructions/toolchain@v2").with_("toolchain", self.toolchain)

        if self.profile is not None:
            action.with_("profile", self.profile)
        if self.default:
            action.with_("default", True)
        if self.components:
            action.with_("components", ", ".join(self.components))
        if self.targets is not None:
            action.with_("target", ", ".join(self.targets))

        return action


# ---------------------------------------------------------------------
# Platform
# ---------------------------------------------------------------------

def host_os() -> str:
    """The operating system this process runs on (`sys.platform`)."""
    return sys.platform


_HOST_PREFIXES = {
    "linux": "ubuntu-latest",
    "darwin": "macos-latest",
    "win32": "windows-latest",
    "cygwin": "windows-latest",
}


class Platform(Enum):
    UBUNTU_LATEST = "ubuntu-latest"
    MACOS_LATEST = "macos-latest"
    WINDOWS_LATEST = "windows-latest"

    @classmethod
    def latest(cls) -> List[Platform]:
        return [cls.UBUNTU_LATEST, cls.MACOS_LATEST, cls.WINDOWS_LATEST]

    @classmethod
    def current(cls) -> Platform:
        name = host_os()
        for prefix, slug in _HOST_PREFIXES.items():
            if name.startswith(prefix):
                return cls(slug)
        raise ValueError(f"Unknown platform: {name}")

    def is_current(self) -> bool:
        try:
            return self is Platform.current()
        except ValueError:
            return False

    def as_str(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------

@dataclass
class Push:
    branches: List[str] = field(default_factory=list)

    def branch(self, branch: str) -> Push:
        self.branches.append(branch)
        return self


@dataclass(frozen=True)
class PullRequest:
    pass


Event = Union[Push, PullRequest]
