# ci.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from . import config
from .dsl import cmd, install, install_rust, multi_step, pull_request, push, rust_toolchain, script
from .model import Event, Platform, Run, Rust, Step
from .runner import ProcessRunner, execute_step
from .ui.console import get_console
from .workflow import Workflow

SetupFactory = Callable[[], Iterable[Step]]


@dataclass(frozen=True)
class Task:
    """One entry of a task list. Setup entries only exist in the rendered workflow."""
    step: Step
    setup: bool = False


class Tasks:
    """
    A named, platform-scoped list of steps: one row of the CI matrix.

    Steps keep the order they were added in, setup steps included. Rendering
    shows every step; `execute()` only runs the non-setup ones, and only when
    `platform` is the machine we're running on.
    """

    def __init__(self, name: str, platform: Platform, rust: Optional[Rust]):
        self.name = name
        self.platform = platform
        self.is_nightly = rust.is_nightly if rust is not None else False
        self.tasks: List[Task] = []

        if rust is not None:
            self.setup(install_rust(rust))

    @property
    def key(self) -> str:
        return f"{self.name}-{self.platform.as_str()}"

    # ---- builder ----

    def setup(self, step: Step):
        self.tasks.append(Task(step, setup=True))
        return self

    def setup_when(self, condition: bool, step: Step):
        if condition:
            self.setup(step)
        return self

    def step(self, step: Step):
        self.tasks.append(Task(step))
        return self

    def step_when(self, condition: bool, step: Step):
        if condition:
            self.step(step)
        return self

    def run(self, run: Run):
        """Append an already built `Run`, e.g. `dsl.run("cargo test").dir("web")`."""
        return self.step(run)

    def cmd(self, program: str, args: Iterable[str] = (), *, directory: str | None = None):
        run = cmd(program, args)
        if directory is not None:
            run.dir(directory)
        return self.step(run)

    def cmd_when(self, condition: bool, program: str, args: Iterable[str] = ()):
        if condition:
            self.cmd(program, args)
        return self

    def script(self, lines: Iterable[Iterable[str]], *, directory: str | None = None):
        run = script(lines)
        if directory is not None:
            run.dir(directory)
        return self.step(run)

    def cmd_in_dirs(self, program: str, args: Sequence[str], dirs: Iterable[str] = ()):
        """Run a command at the workspace root, then once per extra workspace dir."""
        self.cmd(program, args)
        for directory in dirs:
            self.cmd(program, args, directory=directory)
        return self

    # ---- presets ----

    def tests(self, dirs: Iterable[str] = ()):
        dirs = list(dirs)
        return (
            self.cmd_in_dirs("cargo", ["xtask", "codegen", "--check"], dirs)
            .cmd_in_dirs(
                "cargo",
                ["clippy", "--all-targets", "--", "-D", "warnings", "-D", "clippy::all"],
                dirs,
            )
            .cmd_in_dirs("cargo", ["test"], dirs)
            .cmd_in_dirs("cargo", ["build", "--all-targets"], dirs)
            .cmd_in_dirs("cargo", ["doc"], dirs)
        )

    def release_tests(self, dirs: Iterable[str] = ()):
        return self.cmd_in_dirs("cargo", ["test", "--benches", "--tests", "--release"], dirs)

    def lints(self, udeps_version: str, dirs: Iterable[str] = ()):
        dirs = list(dirs)
        return (
            self.cmd_in_dirs("cargo", ["fmt", "--all", "--", "--check"], dirs)
            .setup(install("cargo-udeps", udeps_version))
            .cmd_in_dirs("cargo", ["udeps", "--all-targets"], dirs)
        )

    # ---- terminal operations ----

    def steps(self) -> List[Step]:
        return [task.step for task in self.tasks]

    def execute(self, runner: Optional[ProcessRunner] = None) -> None:
        """
        Run this task's commands if it targets the current platform.

        Tasks for other platforms succeed without doing anything, which is
        how one matrix definition only runs the row for this machine.
        """
        console = get_console()

        if not self.platform.is_current():
            console.print_task_skipped(self.key, "not current platform")
            return

        console.print_task_start(self.key)
        for task in self.tasks:
            if task.setup:
                continue
            execute_step(task.step, nightly=self.is_nightly, job=self.key, runner=runner)
        console.print_success(self.key)


def _setup_steps(setup: Optional[SetupFactory]) -> Step:
    return multi_step(setup() if setup is not None else ())


@dataclass
class CI:
    """
    The whole CI definition: rendered to one workflow file, or executed locally.
    """
    name: str = config.WORKFLOW_NAME
    triggers: List[Event] = field(default_factory=lambda: [push(), pull_request()])
    tasks: List[Tasks] = field(default_factory=list)

    @classmethod
    def standard_workflow(
        cls,
        stable_version: str = config.RUSTC_STABLE_VERSION,
        nightly_version: str = config.RUSTC_NIGHTLY_VERSION,
        udeps_version: str = config.UDEPS_VERSION,
        extra_workspace_dirs: Sequence[str] = (),
    ) -> CI:
        return (
            cls()
            .standard_tests(stable_version, extra_workspace_dirs)
            .standard_release_tests(stable_version, extra_workspace_dirs)
            .standard_lints(nightly_version, udeps_version, extra_workspace_dirs)
        )

    def standard_tests(
        self,
        rustc_version: str,
        extra_workspace_dirs: Sequence[str] = (),
        setup: Optional[SetupFactory] = None,
    ) -> CI:
        for platform in Platform.latest():
            self.add_job(
                Tasks("tests", platform, rust_toolchain(rustc_version).minimal().set_default().clippy())
                .setup(_setup_steps(setup))
                .tests(extra_workspace_dirs)
            )
        return self

    def standard_release_tests(
        self,
        rustc_version: str,
        extra_workspace_dirs: Sequence[str] = (),
        setup: Optional[SetupFactory] = None,
    ) -> CI:
        for platform in Platform.latest():
            self.add_job(
                Tasks("release-tests", platform, rust_toolchain(rustc_version).minimal().set_default())
                .setup(_setup_steps(setup))
                .release_tests(extra_workspace_dirs)
            )
        return self

    def standard_lints(
        self,
        rustc_version: str,
        udeps_version: str,
        extra_workspace_dirs: Sequence[str] = (),
        setup: Iterable[Step] = (),
    ) -> CI:
        return self.job(
            Tasks("lints", Platform.UBUNTU_LATEST, rust_toolchain(rustc_version).minimal().set_default().rustfmt())
            .setup(multi_step(setup))
            .lints(udeps_version, extra_workspace_dirs)
        )

    def job(self, tasks: Tasks) -> CI:
        self.add_job(tasks)
        return self

    def add_job(self, tasks: Tasks) -> None:
        self.tasks.append(tasks)

    # ---- terminal operations ----

    def into_workflow(self) -> Workflow:
        wf = Workflow(name=self.name).on(*self.triggers)
        for tasks in self.tasks:
            wf.add_job(tasks.name, tasks.platform, tasks.steps())
        return wf

    def render(self) -> str:
        return self.into_workflow().render()

    def write(self, check: bool, root: str | Path = ".") -> Path:
        return self.into_workflow().write(check, root=root)

    def execute(self, runner: Optional[ProcessRunner] = None) -> None:
        for tasks in self.tasks:
            tasks.execute(runner=runner)
