# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Staged build pipeline: analyze, elaborate, execute, and view waveforms.

Each command selects a prefix of the stage sequence.  Stages run one at a
time and every stage must succeed before the next one starts; the first
failure raises and ends the build.  All configuration needed by the planned
stages is checked before the first tool is spawned.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from pathlib import Path

from gb.build import toolchain
from gb.build.relocate import BUILD_DIR, relocate
from gb.errors import ConfigurationError, MissingFilesError, ToolchainError
from gb.workspace.manifest import Target

# ###############
# Public Interface
# ###############


class Stage(enum.Enum):
    """One step of the build."""

    ANALYZE = "analyze"
    ELABORATE = "elaborate"
    EXECUTE = "execute"
    WAVE = "wave"


class Command(enum.Enum):
    """What the user asked for."""

    ANALYZE = "analyze"
    COMPILE = "compile"
    RUN = "run"
    WAVE = "wave"


STAGES: dict[Command, tuple[Stage, ...]] = {
    Command.ANALYZE: (Stage.ANALYZE,),
    Command.COMPILE: (Stage.ANALYZE, Stage.ELABORATE),
    Command.RUN: (Stage.ANALYZE, Stage.ELABORATE, Stage.EXECUTE),
    Command.WAVE: (Stage.ANALYZE, Stage.ELABORATE, Stage.EXECUTE, Stage.WAVE),
}


def run_pipeline(
    target: Target,
    command: Command,
    *,
    root: Path,
    viewer: str | None = None,
    vcd_name: str | None = None,
    on_stage: Callable[[Stage], None] | None = None,
) -> list[Stage]:
    """Run the stages *command* calls for on *target*.

    Args:
        target: The resolved build target.
        command: Selects which stages run.
        root: The project root; GHDL analyzes here and the build directory
            lives below it.
        viewer: The waveform viewer for the wave stage.
        vcd_name: Overrides the target's waveform file name.
        on_stage: Called with each stage right before it starts.

    Returns:
        The stages that ran, in order.

    Raises:
        MissingFilesError: If any target file does not exist.
        ConfigurationError: If a planned stage lacks its configuration.
        ToolchainError: If a tool fails to spawn or exits non-zero.
        RelocationError: If the analysis output cannot be relocated.
    """
    stages = STAGES[command]
    vcd_name = vcd_name or target.vcd_name
    _preflight(target, stages, root=root, viewer=viewer, vcd_name=vcd_name)

    build_dir = root / BUILD_DIR
    completed: list[Stage] = []
    for stage in stages:
        if on_stage is not None:
            on_stage(stage)
        if stage == Stage.ANALYZE:
            toolchain.analyze([str(f) for f in target.files], cwd=root)
            relocate(build_dir, target.files, work_dir=root)
        elif stage == Stage.ELABORATE:
            toolchain.elaborate(_unit_name(target), cwd=build_dir, flags=toolchain.elaborate_flags())
        elif stage == Stage.EXECUTE:
            toolchain.execute(_unit_name(target), cwd=build_dir, vcd=vcd_name)
        elif stage == Stage.WAVE:
            _view_waveform(root, viewer, vcd_name)
        completed.append(stage)
    return completed


# ################
# Implementation
# ################


def _preflight(
    target: Target,
    stages: tuple[Stage, ...],
    *,
    root: Path,
    viewer: str | None,
    vcd_name: str | None,
) -> None:
    """Reject builds whose planned stages cannot succeed before spawning anything."""
    missing = target.missing_files(root)
    if missing:
        raise MissingFilesError(missing)

    if Stage.ELABORATE in stages and target.execute is None:
        raise ConfigurationError(
            f"target `{target.name}` has no `execute` file to elaborate; "
            "add `execute = \"<entry>.vhd\"` to the target"
        )

    if Stage.WAVE in stages:
        if vcd_name is None:
            raise ConfigurationError(
                f"target `{target.name}` has no `vcd-name`; set it in the target or pass --vcd"
            )
        if viewer is None:
            raise ConfigurationError("no waveform viewer configured; set `default.vcd-viewer`")
        if viewer not in toolchain.SUPPORTED_VIEWERS:
            supported = ", ".join(toolchain.SUPPORTED_VIEWERS)
            raise ConfigurationError(f"unsupported vcd viewer `{viewer}` (supported: {supported})")


def _unit_name(target: Target) -> str:
    """Return the design unit GHDL elaborates: the entry file's base name."""
    assert target.execute is not None
    return target.execute.stem


def _view_waveform(root: Path, viewer: str | None, vcd_name: str | None) -> None:
    assert viewer is not None and vcd_name is not None
    waveform = BUILD_DIR / vcd_name
    if not (root / waveform).is_file():
        raise ToolchainError(f"waveform file '{waveform}' was not produced by the execute stage")
    toolchain.launch_viewer(viewer, waveform, cwd=root)
