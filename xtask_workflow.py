# xtask_workflow.py
# CI for a workspace with a second cargo workspace under `packages/wasm`.
# `xtask ci` and `xtask codegen` pick this file up when it sits in the
# workspace root.
from __future__ import annotations

from xtask import CI, Tasks, install, rust_toolchain, upload_artifact
from xtask.model import Platform

STABLE = "1.73"
NIGHTLY = "nightly-2023-10-14"
UDEPS = "0.1.43"
EXTRA_DIRS = ["packages/wasm"]


def wasm_build() -> Tasks:
    return (
        Tasks("wasm", Platform.UBUNTU_LATEST, rust_toolchain(STABLE).minimal().set_default().wasm())
        .setup(install("wasm-bindgen-cli", "0.2.87"))
        .cmd("cargo", ["build", "--release", "--target", "wasm32-unknown-unknown"], directory="packages/wasm")
        .step(upload_artifact("wasm", "packages/wasm/target/wasm32-unknown-unknown/release"))
    )


def workflow() -> CI:
    return (
        CI()
        .standard_tests(STABLE, EXTRA_DIRS)
        .standard_release_tests(STABLE, EXTRA_DIRS)
        .standard_lints(NIGHTLY, UDEPS, EXTRA_DIRS)
        .job(wasm_build())
    )
