from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner

from xtask.cli import cli
from xtask.runner import set_runner


def _invoke(*args: str):
    return CliRunner().invoke(cli, list(args))


def test_ci_runs_standard_workflow_for_this_platform(tmp_path: Path, on_linux: None, runner) -> None:
    set_runner(runner)

    result = _invoke("--root", str(tmp_path), "ci")

    assert result.exit_code == 0, result.output
    assert runner.argvs[0] == ["cargo", "xtask", "codegen", "--check"]
    assert runner.argvs[-1] == ["rustup", "run", "nightly", "cargo", "udeps", "--all-targets"]
    assert "TASK STARTED: tests-ubuntu-latest" in result.output


def test_ci_exits_non_zero_on_first_failure(tmp_path: Path, on_linux: None, runner) -> None:
    runner.exit_codes["cargo test"] = 101
    set_runner(runner)

    result = _invoke("--root", str(tmp_path), "ci")

    assert result.exit_code == 1
    assert runner.argvs[-1] == ["cargo", "test"]


def test_ci_extra_workspace_dirs_from_env(tmp_path: Path, on_macos: None, runner, monkeypatch) -> None:
    monkeypatch.setenv("XTASK_WORKSPACE_DIRS", "web tools")
    set_runner(runner)

    result = _invoke("--root", str(tmp_path), "ci")

    assert result.exit_code == 0, result.output
    assert runner.calls[:3] == [
        (["cargo", "xtask", "codegen", "--check"], None),
        (["cargo", "xtask", "codegen", "--check"], "web"),
        (["cargo", "xtask", "codegen", "--check"], "tools"),
    ]


def test_ci_prefers_workflow_file_in_root(tmp_path: Path, on_linux: None, runner) -> None:
    (tmp_path / "xtask_workflow.py").write_text(
        "from xtask import CI, Tasks\n"
        "from xtask.model import Platform\n"
        "def workflow():\n"
        "    return CI().job(Tasks('only', Platform.UBUNTU_LATEST, None).cmd('cargo', ['check']))\n",
        encoding="utf-8",
    )
    set_runner(runner)

    result = _invoke("--root", str(tmp_path), "ci")

    assert result.exit_code == 0, result.output
    assert runner.argvs == [["cargo", "check"]]


def test_codegen_then_check(tmp_path: Path) -> None:
    result = _invoke("--root", str(tmp_path), "codegen")
    assert result.exit_code == 0, result.output

    workflow_file = tmp_path / ".github" / "workflows" / "ci-tests.yml"
    assert workflow_file.read_text(encoding="utf-8").startswith("# This file was generated by [xtask-base](https://github.com/simon-bourne/rust-xtask-base).\n")
    assert (tmp_path / ".cargo" / "config").exists()

    result = _invoke("--root", str(tmp_path), "codegen", "--check")
    assert result.exit_code == 0, result.output


def test_codegen_check_fails_on_drift_without_writing(tmp_path: Path) -> None:
    assert _invoke("--root", str(tmp_path), "codegen").exit_code == 0
    workflow_file = tmp_path / ".github" / "workflows" / "ci-tests.yml"
    workflow_file.write_text("name: hand-edited\n", encoding="utf-8")

    result = _invoke("--root", str(tmp_path), "codegen", "--check")

    assert result.exit_code == 1
    assert "ci-tests.yml" in result.output
    assert workflow_file.read_text(encoding="utf-8") == "name: hand-edited\n"


def test_codegen_version_options_reach_the_workflow(tmp_path: Path) -> None:
    result = _invoke("--root", str(tmp_path), "--stable-version", "1.75", "codegen")

    assert result.exit_code == 0, result.output
    rendered = (tmp_path / ".github" / "workflows" / "ci-tests.yml").read_text(encoding="utf-8")
    assert "        toolchain: 1.75\n" in rendered


def test_codegen_builds_readme_and_licenses(tmp_path: Path) -> None:
    (tmp_path / "README.tmpl.md").write_text("# {{ 'demo' | upper }}\n", encoding="utf-8")

    result = _invoke("--root", str(tmp_path), "codegen", "--start-year", "2022", "--copyright-holder", "Jane Doe")

    assert result.exit_code == 0, result.output
    assert (tmp_path / "README.md").read_text(encoding="utf-8") == "# DEMO\n"
    assert (tmp_path / "LICENSE-MIT").exists()
    assert (tmp_path / "LICENSE-APACHE").exists()


def test_fmt_runs_nightly_rustfmt_in_each_dir(tmp_path: Path, runner) -> None:
    set_runner(runner)

    result = _invoke("--root", str(tmp_path), "--workspace-dir", "web", "fmt")

    assert result.exit_code == 0, result.output
    assert runner.calls == [
        (["cargo", "+nightly", "fmt", "--all"], "web"),
        (["cargo", "+nightly", "fmt", "--all"], None),
    ]


def test_udeps(tmp_path: Path, runner) -> None:
    set_runner(runner)

    result = _invoke("--root", str(tmp_path), "udeps")

    assert result.exit_code == 0, result.output
    assert runner.argvs == [["cargo", "+nightly", "udeps", "--all-targets"]]


def test_shell_completion_written_to_target_dir(tmp_path: Path) -> None:
    result = _invoke("--root", str(tmp_path), "shell-completion", "zsh")

    assert result.exit_code == 0, result.output
    script = (tmp_path / "target" / "cargo-xtask.zsh").read_text(encoding="utf-8")
    assert "_CARGO_XTASK_COMPLETE" in script


def test_relative_workflow_path_is_resolved_from_the_caller(tmp_path: Path, on_linux: None, runner, monkeypatch) -> None:
    workspace = tmp_path / "workspace"
    caller = tmp_path / "caller"
    workspace.mkdir()
    caller.mkdir()
    (caller / "my_workflow.py").write_text(
        "from xtask import CI, Tasks\n"
        "from xtask.model import Platform\n"
        "CI_WORKFLOW = CI().job(Tasks('mine', Platform.UBUNTU_LATEST, None).cmd('cargo', ['bench']))\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(caller)
    set_runner(runner)

    result = _invoke("--root", str(workspace), "--workflow", "my_workflow.py", "ci")

    assert result.exit_code == 0, result.output
    assert runner.argvs == [["cargo", "bench"]]
