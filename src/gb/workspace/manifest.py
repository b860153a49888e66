# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and TOML loader for the ``gb.toml`` project manifest."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gb.errors import ConfigurationError

# ###############
# Public Interface
# ###############

MANIFEST_NAME = "gb.toml"


class ManifestError(ConfigurationError):
    """Raised when the manifest cannot be read or does not conform to the schema."""


class TargetEntry(BaseModel):
    """One ``[target.<name>]`` table."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    files: list[str] = Field(min_length=1)
    execute: str | None = None
    vcd_name: str | None = Field(default=None, alias="vcd-name")


class Defaults(BaseModel):
    """The ``[default]`` table: project-wide fallbacks."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    target: str | None = None
    vcd_viewer: str | None = Field(default=None, alias="vcd-viewer")


@dataclass
class Target:
    """A named build configuration ready for the pipeline.

    Attributes:
        name: The target's key in the manifest.
        files: Source files in analysis order, relative to the project root.
        execute: The entry file to elaborate and run, if any.
        vcd_name: Waveform file to dump during execution, if any.
    """

    name: str
    files: list[Path]
    execute: Path | None = None
    vcd_name: str | None = None

    def missing_files(self, root: Path) -> list[Path]:
        """Return every file of the target that does not exist below *root*, in order."""
        return [path for path in self.files if not (root / path).exists()]


class Manifest(BaseModel):
    """Top-level manifest model."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    default: Defaults = Field(default_factory=Defaults)
    targets: dict[str, TargetEntry] = Field(alias="target", default_factory=dict)

    def select_target(self, name: str | None = None) -> Target:
        """Return the target called *name*, falling back to ``default.target``.

        Raises:
            ConfigurationError: If no name is given and no default is set, or
                the chosen target does not exist.
        """
        chosen = name or self.default.target
        if chosen is None:
            raise ConfigurationError("No target was passed and no default target was set")
        if not self.targets:
            raise ConfigurationError("there are no provided targets; please provide them")
        if chosen not in self.targets:
            raise ConfigurationError(f"Attempted to run target `{chosen}` but it was not found in {MANIFEST_NAME}")

        entry = self.targets[chosen]
        return Target(
            name=chosen,
            files=[Path(f) for f in entry.files],
            execute=Path(entry.execute) if entry.execute is not None else None,
            vcd_name=entry.vcd_name,
        )


def load_manifest(path: Path) -> Manifest:
    """Load and validate a ``gb.toml`` manifest.

    Args:
        path: Path to the manifest file.

    Returns:
        A validated Manifest instance.

    Raises:
        ManifestError: If the file is missing or unreadable, is not valid
            TOML, or does not conform to the expected schema.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ManifestError(f"manifest file `{MANIFEST_NAME}` not found in '{path.parent}'") from None
    except OSError as exc:
        raise ManifestError(f"Cannot read manifest '{path}'") from exc

    return parse_manifest(raw, source_label=str(path))


def parse_manifest(text: str, source_label: str = "<string>") -> Manifest:
    """Parse manifest TOML text into a Manifest.

    Raises:
        ManifestError: If the TOML is invalid or does not match the schema.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ManifestError(f"failed to parse manifest file '{source_label}'") from exc

    try:
        return Manifest.model_validate(data)
    except ValidationError as exc:
        raise ManifestError(f"Invalid manifest '{source_label}'") from exc
