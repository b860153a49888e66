# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Fatal error kinds raised by the build pipeline.

Every error that should abort a build derives from :class:`BuildError`.  The
command-line interface catches it at the top level, prints a single
diagnostic (including the chained cause, if any) and exits non-zero.
"""

from pathlib import Path

# ###############
# Public Interface
# ###############


class BuildError(Exception):
    """Base class for all fatal build errors.

    Attributes:
        message: Human-readable description of what went wrong.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(BuildError):
    """Raised for missing or invalid manifest settings (unset entry file, unsupported viewer, ...)."""


class MissingFilesError(BuildError):
    """Raised when files listed in a target do not exist on disk.

    Attributes:
        missing: Every missing path, in manifest order.
    """

    def __init__(self, missing: list[Path]) -> None:
        super().__init__("There were missing files")
        self.missing = missing


class ToolchainError(BuildError):
    """Raised when an external tool cannot be spawned or exits with a non-zero status."""


class RelocationError(BuildError):
    """Raised when a generated artifact or the library catalog cannot be relocated."""
