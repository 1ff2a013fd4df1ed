# runner.py
from __future__ import annotations

import runpy
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from .model import Action, Cmd, Empty, Multi, Run, Step
from .ui.console import get_console


@dataclass
class CIError(Exception):
    """
    Structured error with enough context for:
      - clean CLI output
      - a hint about how to fix the environment
      - debugging without full tracebacks
    """
    kind: str
    job: str
    step: str | None
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.job:
            lines.append(f"job={self.job}")
        if self.step:
            lines.append(f"step={self.step}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


TOOL_HINTS = {
    "cargo": "Install Rust with rustup (https://rustup.rs) or fix PATH.",
    "rustup": "Install rustup (https://rustup.rs) or fix PATH.",
    "less": "Install less or fix PATH.",
    "cargo-expand": "Install cargo-expand (cargo install cargo-expand).",
}

NIGHTLY_WRAPPER = ["rustup", "run", "nightly"]


@dataclass
class StepFailure(Exception):
    job: str
    step: str
    cmd: str
    exit_code: int

    def __str__(self) -> str:
        return f"[{self.job}] step '{self.step}' failed (exit={self.exit_code}): {self.cmd}"


# ----------------------------------------------------------------------
# Process runner
# ----------------------------------------------------------------------

class ProcessRunner:
    """
    Runs one program at a time, inheriting stdout/stderr so cargo output
    streams straight to the terminal.
    """

    def run(self, argv: Sequence[str], cwd: Optional[str] = None) -> int:
        if cwd is not None and not Path(cwd).is_dir():
            raise FileNotFoundError(f"working directory not found: {Path(cwd).resolve()}")

        try:
            proc = subprocess.run(list(argv), cwd=cwd)
        except (FileNotFoundError, PermissionError) as e:
            program = argv[0]
            raise CIError(
                kind="spawn_failed",
                job="",
                step=" ".join(argv),
                message=f"could not start {program}",
                details={
                    "hint": TOOL_HINTS.get(program, f"Install {program} or fix PATH."),
                    "error": e.strerror or str(e),
                },
            ) from e

        return proc.returncode

    def pipe(self, first: Sequence[str], second: Sequence[str]) -> int:
        """Run `first | second`; the exit code is the first non-zero one."""
        producer = subprocess.Popen(list(first), stdout=subprocess.PIPE)
        try:
            consumer = subprocess.run(list(second), stdin=producer.stdout)
        finally:
            producer.stdout.close()
            producer.wait()
        return producer.returncode or consumer.returncode


_runner: Optional[ProcessRunner] = None


def get_runner() -> ProcessRunner:
    """Get the global process runner."""
    global _runner
    if _runner is None:
        _runner = ProcessRunner()
    return _runner


def set_runner(runner: Optional[ProcessRunner]) -> None:
    """Replace the global process runner (None restores the default)."""
    global _runner
    _runner = runner


# ----------------------------------------------------------------------
# Execution primitives
# ----------------------------------------------------------------------

def invocation(command: Cmd, *, nightly: bool) -> List[str]:
    """
    The argument vector used to run `command` locally.

    Rendered workflows select the toolchain once per job, so locally a
    nightly job has to go through `rustup run nightly` for every command.
    """
    if nightly:
        return [*NIGHTLY_WRAPPER, *command.argv()]
    return command.argv()


def run_command(
    command: Cmd,
    *,
    directory: Optional[str] = None,
    nightly: bool = False,
    job: str = "",
    runner: Optional[ProcessRunner] = None,
) -> None:
    runner = runner or get_runner()
    argv = invocation(command, nightly=nightly)

    get_console().print_step(" ".join(argv), directory)
    exit_code = runner.run(argv, cwd=directory)

    if exit_code != 0:
        raise StepFailure(job=job, step=str(command), cmd=" ".join(argv), exit_code=exit_code)


def execute_step(
    step: Step,
    *,
    nightly: bool = False,
    job: str = "",
    runner: Optional[ProcessRunner] = None,
) -> None:
    """Run the commands in `step`. Actions have no local meaning and are skipped."""
    if isinstance(step, (Empty, Action)):
        return
    if isinstance(step, Multi):
        for child in step.steps:
            execute_step(child, nightly=nightly, job=job, runner=runner)
    elif isinstance(step, Run):
        for command in step.commands:
            run_command(
                command,
                directory=step.directory,
                nightly=nightly,
                job=job,
                runner=runner,
            )
    else:
        raise TypeError(f"Not a step: {step!r}")


# ----------------------------------------------------------------------
# Workflow loading (local file)
# ----------------------------------------------------------------------

DEFAULT_WORKFLOW_FILE = "xtask_workflow.py"


def load_workflow(path: str | Path):
    """
    Load a CI definition from a python file path.

    The file must define either:
      - workflow() -> CI
      - CI_WORKFLOW = CI(...)
    """
    # Import here to avoid circular import
    from .ci import CI

    wf_path = Path(path).expanduser().resolve()
    if not wf_path.exists():
        raise FileNotFoundError(f"Workflow file not found: {wf_path}")
    if wf_path.suffix != ".py":
        raise ValueError(f"Workflow must be a .py file, got: {wf_path.name}")

    module_name = f"xtask_workflow_{wf_path.stem}"
    globals_dict = runpy.run_path(str(wf_path), run_name=module_name)

    ci = None
    if "workflow" in globals_dict and callable(globals_dict["workflow"]):
        ci = globals_dict["workflow"]()
    elif "CI_WORKFLOW" in globals_dict:
        ci = globals_dict["CI_WORKFLOW"]

    if not isinstance(ci, CI):
        raise TypeError(
            "Workflow must return/define a CI. "
            "Define workflow() -> CI or CI_WORKFLOW = CI.standard_workflow()."
        )

    return ci
