# template.py
from __future__ import annotations

import datetime
import subprocess
from importlib import resources
from pathlib import Path

from jinja2 import Environment, StrictUndefined, TemplateError

from .files import update_file


# ---------------------------------------------------------------------
# Template helpers
# ---------------------------------------------------------------------

def include_file(path: str) -> str:
    """`{{ include_file("examples/hello.rs") }}`: the contents of a file."""
    return Path(path).read_text(encoding="utf-8")


def shell(command: str) -> str:
    """
    `{{ shell("cargo run --example hello") }}`: stdout of a shell command.

    Anything on stderr, or a non-zero exit, fails the render so broken
    examples don't end up silently pasted into a README.
    """
    proc = subprocess.run(command, shell=True, capture_output=True, text=True)

    if proc.stderr:
        raise TemplateError(f"Stderr is not empty:\n\n{proc.stderr}")
    if proc.returncode != 0:
        raise TemplateError(f"Process exited with code {proc.returncode}")

    return proc.stdout


def registry() -> Environment:
    env = Environment(undefined=StrictUndefined, keep_trailing_newline=True)
    env.globals["include_file"] = include_file
    env.globals["shell"] = shell
    return env


def render_template(template: str, **context) -> str:
    return registry().from_string(template).render(**context)


def boilerplate(name: str) -> str:
    return resources.files("xtask").joinpath("boilerplate").joinpath(name).read_text(encoding="utf-8")


# ---------------------------------------------------------------------
# Generated files
# ---------------------------------------------------------------------

def build_readme(directory: str | Path, check: bool) -> None:
    """Build `README.md` from `README.tmpl.md` in `directory`."""
    directory = Path(directory)
    template = (directory / "README.tmpl.md").read_text(encoding="utf-8")
    update_file(directory / "README.md", render_template(template), check)


def copyright_range(start_year: int, end_year: int | None = None) -> str:
    if end_year is None:
        end_year = datetime.date.today().year
    if start_year == end_year:
        return f"{start_year}"
    return f"{start_year}-{end_year}"


def generate_license(template_name: str, filename: str, start_year: int, holder: str, check: bool) -> None:
    update_file(
        filename,
        render_template(
            boilerplate(template_name),
            copyright_range=copyright_range(start_year),
            copyright_holder=holder,
        ),
        check,
    )


def generate_license_apache(start_year: int, holder: str, check: bool) -> None:
    generate_license("LICENSE-APACHE", "LICENSE-APACHE", start_year, holder, check)


def generate_license_mit(start_year: int, holder: str, check: bool) -> None:
    generate_license("LICENSE-MIT", "LICENSE-MIT", start_year, holder, check)


def generate_rustfmt_config(check: bool) -> None:
    update_file("rustfmt.toml", boilerplate("rustfmt.toml"), check)


def generate_cargo_config(check: bool) -> None:
    """`.cargo/config` in the workspace root, holding the `xtask` alias."""
    update_file(Path(".cargo") / "config", boilerplate("cargo-config"), check)


def generate_open_source_files(start_year: int, holder: str, check: bool) -> None:
    """`rustfmt.toml`, `LICENSE-APACHE` and `LICENSE-MIT` in the workspace root."""
    generate_rustfmt_config(check)
    generate_license_apache(start_year, holder, check)
    generate_license_mit(start_year, holder, check)
