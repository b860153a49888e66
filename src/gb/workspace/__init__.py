# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Project manifest for gb."""

from gb.workspace.manifest import (
    MANIFEST_NAME,
    Defaults,
    Manifest,
    ManifestError,
    Target,
    TargetEntry,
    load_manifest,
    parse_manifest,
)

__all__ = [
    "MANIFEST_NAME",
    "Defaults",
    "Manifest",
    "ManifestError",
    "Target",
    "TargetEntry",
    "load_manifest",
    "parse_manifest",
]
