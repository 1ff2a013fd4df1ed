# config.py
# Defaults for the standard CI workflow. Each one can be overridden from the
# CLI or the matching environment variable (see cli.py).
from __future__ import annotations

WORKFLOW_NAME = "ci-tests"

RUSTC_STABLE_VERSION = "1.73"
RUSTC_NIGHTLY_VERSION = "nightly-2023-10-14"
UDEPS_VERSION = "0.1.43"

ENV_STABLE_VERSION = "XTASK_RUST_STABLE"
ENV_NIGHTLY_VERSION = "XTASK_RUST_NIGHTLY"
ENV_UDEPS_VERSION = "XTASK_UDEPS_VERSION"
ENV_WORKSPACE_DIRS = "XTASK_WORKSPACE_DIRS"
ENV_DEBUG = "XTASK_DEBUG"
