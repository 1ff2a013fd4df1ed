# workflow.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

from .files import update_file
from .model import Event, Platform, Step
from .render import render_workflow

WORKFLOWS_DIR = Path(".github") / "workflows"


@dataclass
class Job:
    """A rendered job: keyed as `{name}-{runs_on}` in the workflow file."""
    name: str
    runs_on: Platform
    steps: List[Step] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.name}-{self.runs_on.as_str()}"


@dataclass
class Workflow:
    """
    A GitHub Actions workflow: name, triggers and jobs.

    Job keys are not checked for uniqueness; two jobs with the same name and
    platform render the same key.
    """
    name: str
    triggers: List[Event] = field(default_factory=list)
    jobs: List[Job] = field(default_factory=list)

    def on(self, *events: Event) -> Workflow:
        self.triggers.extend(events)
        return self

    def add_job(self, name: str, runs_on: Platform, steps: Iterable[Step]) -> Job:
        job = Job(name=name, runs_on=runs_on, steps=list(steps))
        self.jobs.append(job)
        return job

    def job(self, name: str, runs_on: Platform, steps: Iterable[Step]) -> Workflow:
        self.add_job(name, runs_on, steps)
        return self

    @property
    def path(self) -> Path:
        return WORKFLOWS_DIR / f"{self.name}.yml"

    def render(self) -> str:
        return render_workflow(self)

    def write(self, check: bool, root: str | Path = ".") -> Path:
        path = Path(root) / self.path
        update_file(path, self.render(), check)
        return path

    def __str__(self) -> str:
        return self.render()


def workflow(name: str) -> Workflow:
    return Workflow(name=name)
