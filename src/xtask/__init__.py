from .ci import CI, Tasks
from .dsl import (
    action,
    checkout,
    cmd,
    install,
    install_rust,
    multi_step,
    pull_request,
    push,
    run,
    rust_cache,
    rust_toolchain,
    script,
    upload_artifact,
    when,
)
from .files import DifferencesFound, update_file
from .model import Platform, Rust
from .runner import CIError, ProcessRunner, StepFailure
from .workflow import Workflow, workflow

__all__ = [
    "CI", "Tasks", "Workflow", "workflow", "Platform", "Rust",
    "action", "checkout", "cmd", "install", "install_rust", "multi_step", "pull_request", "push",
    "run", "rust_cache", "rust_toolchain", "script", "upload_artifact", "when",
    "update_file", "DifferencesFound", "CIError", "ProcessRunner", "StepFailure",
]
