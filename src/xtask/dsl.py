# src/xtask/dsl.py
from __future__ import annotations

import shlex
from typing import Iterable

from .model import Action, Cmd, Empty, Multi, PullRequest, Push, Run, Rust, Step


# ---------------------------------------------------------------------
# Step helpers
# ---------------------------------------------------------------------

def action(uses: str) -> Action:
    """Create an action step with no parameters."""
    return Action(uses)


def cmd(program: str, args: Iterable[str] = ()) -> Run:
    """Create a single command step: cmd("cargo", ["test"])."""
    return Run(commands=[Cmd(program=str(program), args=[str(a) for a in args])])


def run(command_line: str) -> Run:
    """Create a single command step from a shell-like line: run("cargo test")."""
    return Run(commands=[Cmd.from_argv(shlex.split(command_line))])


def script(lines: Iterable[Iterable[str]]) -> Run:
    """
    Create a multi-command step. Each line is an argument list whose first
    element is the program:

        script([["cargo", "build"], ["cargo", "test"]])
    """
    return Run(commands=[Cmd.from_argv(line) for line in lines], multi=True)


def multi_step(steps: Iterable[Step]) -> Multi:
    return Multi(list(steps))


def when(condition: bool, step: Step) -> Step:
    """`step` if `condition` holds, otherwise an empty step."""
    return step if condition else Empty()


# ---------------------------------------------------------------------
# Common actions
# ---------------------------------------------------------------------

def checkout() -> Action:
    return action("actions/checkout@v3")


def rust_cache() -> Action:
    return action("Swatinem/rust-cache@v2")


def upload_artifact(name: str, path: str) -> Action:
    return action("actions/upload-artifact@v3").with_("name", name).with_("path", path)


def install(crate_name: str, version: str) -> Run:
    """`cargo install` a pinned version of a crate."""
    return cmd("cargo", ["install", crate_name, "--locked", "--version", version])


def rust_toolchain(version: str) -> Rust:
    return Rust(toolchain=version)


def install_rust(rust: Rust) -> Multi:
    """Checkout, select the toolchain and restore the cargo cache."""
    return Multi([checkout(), rust.to_step(), rust_cache()])


# ---------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------

def push() -> Push:
    return Push()


def pull_request() -> PullRequest:
    return PullRequest()
