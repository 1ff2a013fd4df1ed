# render.py
# Turns the in-memory step/job/workflow model into GitHub Actions YAML.
# Output is produced line by line so it is byte-for-byte deterministic.
from __future__ import annotations

from typing import List, Sequence, Tuple

from .model import Action, Empty, Event, Multi, PullRequest, Push, Run, Step

HEADER = (
    "# This file was generated by [xtask-base](https://github.com/simon-bourne/rust-xtask-base).\n"
    "# Please do not edit!\n"
)


def _key_values(name: str, pairs: Sequence[Tuple[str, str]], out: List[str]) -> None:
    if not pairs:
        return
    out.append(f"      {name}:\n")
    for key, value in pairs:
        out.append(f"        {key}: {value}\n")


def _render_action(action: Action, out: List[str]) -> None:
    out.append(f"    - uses: {action.uses}\n")
    _key_values("with", action.with_params, out)
    _key_values("env", action.env_vars, out)


def _render_run(step: Run, out: List[str]) -> None:
    prefix = "    - "
    if step.directory is not None:
        out.append(f"{prefix}working-directory: {step.directory}\n")
        prefix = "      "

    if step.multi:
        out.append(f"{prefix}run: |\n")
        for command in step.commands:
            out.append(f"        {command}\n")
    else:
        out.append(f"{prefix}run: {step.commands[0]}\n")


def render_step_into(step: Step, out: List[str]) -> None:
    if isinstance(step, Empty):
        return
    if isinstance(step, Multi):
        for child in step.steps:
            render_step_into(child, out)
    elif isinstance(step, Action):
        _render_action(step, out)
    elif isinstance(step, Run):
        _render_run(step, out)
    else:
        raise TypeError(f"Not a step: {step!r}")


def render_step(step: Step) -> str:
    out: List[str] = []
    render_step_into(step, out)
    return "".join(out)


def render_event(event: Event) -> str:
    if isinstance(event, Push):
        lines = ["  push:\n"]
        if event.branches:
            lines.append("    branches:\n")
            lines.extend(f"    - {branch}\n" for branch in event.branches)
        return "".join(lines)
    if isinstance(event, PullRequest):
        return "  pull_request:\n"
    raise TypeError(f"Not an event: {event!r}")


def render_job(name: str, runs_on: str, steps: Sequence[Step]) -> str:
    out = [
        f"  {name}-{runs_on}:\n",
        f"    runs-on: {runs_on}\n",
        "    steps:\n",
    ]
    for step in steps:
        render_step_into(step, out)
    return "".join(out)


def render_workflow(workflow) -> str:
    """Render a `xtask.workflow.Workflow` to the contents of its YAML file."""
    out = [HEADER, f"name: {workflow.name}\n", "on:\n"]
    out.extend(render_event(event) for event in workflow.triggers)
    out.append("jobs:\n")
    out.extend(render_job(job.name, job.runs_on.as_str(), job.steps) for job in workflow.jobs)
    return "".join(out)
