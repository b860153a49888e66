# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Build pipeline for GHDL projects: dependency discovery, staging, and artifact relocation."""

from gb.build.deps import SOURCE_SUFFIX, resolve, resolve_all
from gb.build.pipeline import STAGES, Command, Stage, run_pipeline
from gb.build.relocate import BUILD_DIR, CATALOG_NAME, relocate, rewrite_catalog

__all__ = [
    "BUILD_DIR",
    "CATALOG_NAME",
    "Command",
    "SOURCE_SUFFIX",
    "STAGES",
    "Stage",
    "relocate",
    "resolve",
    "resolve_all",
    "rewrite_catalog",
    "run_pipeline",
]
