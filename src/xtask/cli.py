# cli.py
from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Callable

import click
from click.shell_completion import get_completion_class

from xtask import config
from xtask.ci import CI
from xtask.files import DifferencesFound, update_file
from xtask.model import Cmd
from xtask.runner import DEFAULT_WORKFLOW_FILE, StepFailure, get_runner, load_workflow, run_command
from xtask.template import build_readme, generate_cargo_config, generate_open_source_files
from xtask.ui.console import Console, get_console, set_console
from xtask.workspace import Workspace, cargo_metadata, in_workspace

PROG_NAME = "cargo-xtask"
SHELLS = ("bash", "zsh", "fish")


def discover_workflow(ctx: click.Context) -> CI:
    """
    Pick the CI definition to use, in order:
      - the --workflow file, if given
      - xtask_workflow.py in the workspace root, if present
      - the standard workflow built from the version options
    """
    console = get_console()
    opts = ctx.obj

    workflow_arg = opts["workflow"]
    if workflow_arg:
        console.print_debug(f"Loading workflow from {workflow_arg}")
        return load_workflow(workflow_arg)

    default_workflow = Path(DEFAULT_WORKFLOW_FILE)
    if default_workflow.exists():
        console.print_debug(f"Loading workflow from {default_workflow}")
        return load_workflow(default_workflow)

    return CI.standard_workflow(
        stable_version=opts["stable_version"],
        nightly_version=opts["nightly_version"],
        udeps_version=opts["udeps_version"],
        extra_workspace_dirs=opts["workspace_dirs"],
    )


def _workspace(ctx: click.Context) -> Workspace:
    root = ctx.obj["root"]
    if root:
        return Workspace.from_directory(root)
    return cargo_metadata()


def run_in_workspace(ctx: click.Context, f: Callable[[Workspace], None]) -> None:
    """
    Run `f` from the workspace root.

    Errors are printed in a human friendly way and the process exits with
    code 1.
    """
    console = get_console()

    try:
        with in_workspace(_workspace(ctx)) as workspace:
            f(workspace)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except DifferencesFound as e:
        console.print_error(
            "Generated files are out of date",
            e.message,
            suggestion="Regenerate them:\n  cargo xtask codegen",
        )
        sys.exit(1)
    except StepFailure as e:
        console.print_error(
            "Step failed",
            f"{e.cmd}",
            details=[f"task: {e.job}", f"exit code: {e.exit_code}"],
        )
        sys.exit(1)
    except subprocess.CalledProcessError as e:
        console.print_error(
            "Could not read cargo metadata",
            f"{' '.join(e.cmd)} exited with code {e.returncode}",
            suggestion="Run xtask from inside a cargo workspace, or pass --root.",
        )
        sys.exit(1)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    envvar=config.ENV_DEBUG,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.option(
    "--root",
    default=None,
    type=click.Path(file_okay=False, exists=True),
    help="Workspace root (defaults to the root reported by `cargo metadata`)",
)
@click.option(
    "--workflow",
    default=None,
    type=click.Path(dir_okay=False, resolve_path=True),
    help=f"Workflow file path (defaults to {DEFAULT_WORKFLOW_FILE} if present)",
)
@click.option(
    "--stable-version",
    default=config.RUSTC_STABLE_VERSION,
    envvar=config.ENV_STABLE_VERSION,
    show_default=True,
    help="Stable rustc version for the test jobs",
)
@click.option(
    "--nightly-version",
    default=config.RUSTC_NIGHTLY_VERSION,
    envvar=config.ENV_NIGHTLY_VERSION,
    show_default=True,
    help="Nightly rustc version for the lint job",
)
@click.option(
    "--udeps-version",
    default=config.UDEPS_VERSION,
    envvar=config.ENV_UDEPS_VERSION,
    show_default=True,
    help="cargo-udeps version installed by the lint job",
)
@click.option(
    "--workspace-dir",
    "workspace_dirs",
    multiple=True,
    envvar=config.ENV_WORKSPACE_DIRS,
    help="Extra workspace directory to run every check in (repeatable)",
)
@click.pass_context
def cli(ctx, debug, root, workflow, stable_version, nightly_version, udeps_version, workspace_dirs):
    """xtask: generate project files and run CI locally."""
    set_console(Console(debug=debug))
    ctx.ensure_object(dict)
    ctx.obj.update(
        debug=debug,
        root=root,
        workflow=workflow,
        stable_version=stable_version,
        nightly_version=nightly_version,
        udeps_version=udeps_version,
        workspace_dirs=list(workspace_dirs),
    )


@cli.command()
@click.pass_context
def ci(ctx):
    """Run CI checks for this platform."""

    def _ci(_workspace: Workspace) -> None:
        discover_workflow(ctx).execute()

    run_in_workspace(ctx, _ci)


@cli.command()
@click.option("--check", is_flag=True, default=False, help="Check the files wouldn't change. Don't actually generate them.")
@click.option("--readme/--no-readme", default=True, show_default=True, help="Build README.md from README.tmpl.md if present")
@click.option("--start-year", type=int, default=None, help="First copyright year; generates rustfmt.toml and licenses")
@click.option("--copyright-holder", default="the project authors", show_default=True, help="Name used in the licenses")
@click.pass_context
def codegen(ctx, check, readme, start_year, copyright_holder):
    """Generate derived files. Existing content will be overwritten."""

    def _codegen(_workspace: Workspace) -> None:
        generate_cargo_config(check)
        discover_workflow(ctx).write(check)
        if readme and Path("README.tmpl.md").exists():
            build_readme(".", check)
        if start_year is not None:
            generate_open_source_files(start_year, copyright_holder, check)

    run_in_workspace(ctx, _codegen)


@cli.command()
@click.pass_context
def fmt(ctx):
    """Format all code."""

    def _fmt(_workspace: Workspace) -> None:
        command = Cmd("cargo", ["+nightly", "fmt", "--all"])
        for directory in ctx.obj["workspace_dirs"]:
            run_command(command, directory=directory, job="fmt")
        run_command(command, job="fmt")

    run_in_workspace(ctx, _fmt)


@cli.command()
@click.pass_context
def udeps(ctx):
    """Check all dependencies are used."""
    run_in_workspace(
        ctx,
        lambda _workspace: run_command(Cmd("cargo", ["+nightly", "udeps", "--all-targets"]), job="udeps"),
    )


@cli.command("macro-expand")
@click.argument("package")
@click.pass_context
def macro_expand(ctx, package):
    """Show expanded macros."""

    def _expand(_workspace: Workspace) -> None:
        expand = ["cargo", "expand", "--color=always", "--package", package]
        exit_code = get_runner().pipe(expand, ["less", "-r"])
        if exit_code != 0:
            raise StepFailure(job="macro-expand", step=package, cmd=" ".join(expand), exit_code=exit_code)

    run_in_workspace(ctx, _expand)


@cli.command("shell-completion")
@click.argument("shell", type=click.Choice(SHELLS))
@click.pass_context
def shell_completion(ctx, shell):
    """Generate shell completions."""
    console = get_console()

    def _completion(workspace: Workspace) -> None:
        complete_var = "_CARGO_XTASK_COMPLETE"
        source = get_completion_class(shell)(cli, {}, PROG_NAME, complete_var).source()
        update_file(workspace.target_dir / f"{PROG_NAME}.{shell}", source, check=False)
        console.print_info(f"Completions file generated in `{workspace.target_dir}`")

    run_in_workspace(ctx, _completion)


if __name__ == "__main__":
    cli()
