# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Invocations of GHDL and the waveform viewer."""

import subprocess
import sys
from pathlib import Path

from gb.errors import ToolchainError

# ###############
# Public Interface
# ###############

GHDL = "ghdl"
SUPPORTED_VIEWERS: tuple[str, ...] = ("gtkwave",)


def analyze(files: list[str], *, cwd: Path) -> None:
    """Run ``ghdl -a`` over *files*, preserving their order.

    GHDL resolves references between the files by command-line order.

    Raises:
        ToolchainError: If GHDL cannot be spawned or reports a failure.
    """
    _run([GHDL, "-a", *files], cwd=cwd)


def elaborate(unit: str, *, cwd: Path, flags: list[str] | None = None) -> None:
    """Run ``ghdl -e [flags] unit``.

    Raises:
        ToolchainError: If GHDL cannot be spawned or reports a failure.
    """
    _run([GHDL, "-e", *(flags or []), unit], cwd=cwd)


def execute(unit: str, *, cwd: Path, vcd: str | None = None) -> None:
    """Run ``ghdl -r unit``, optionally dumping a waveform with ``--vcd``.

    Raises:
        ToolchainError: If GHDL cannot be spawned or the simulation fails.
    """
    args = [GHDL, "-r", unit]
    if vcd is not None:
        args.append(f"--vcd={vcd}")
    _run(args, cwd=cwd)


def elaborate_flags() -> list[str]:
    """Return the extra elaboration flags the host platform needs.

    On macOS the linker must be told the running OS version; elsewhere no
    flags are needed.

    Raises:
        ToolchainError: If the macOS version cannot be determined.
    """
    if sys.platform == "darwin":
        return [f"-Wl,-mmacosx-version-min={macos_version()}"]
    return []


def macos_version() -> str:
    """Return the ``ProductVersion`` reported by ``sw_vers``.

    Raises:
        ToolchainError: If ``sw_vers`` fails or its output has no ProductVersion field.
    """
    try:
        result = subprocess.run(["sw_vers"], capture_output=True, text=True)
    except OSError as exc:
        raise ToolchainError("couldn't spawn sw_vers subprocess") from exc
    if result.returncode != 0:
        raise ToolchainError(f"sw_vers exited with status {result.returncode}: {result.stderr.strip()}")

    for line in result.stdout.splitlines():
        label, _, value = line.partition(":")
        if label.strip() == "ProductVersion" and value.strip():
            return value.strip()
    raise ToolchainError("sw_vers output has no ProductVersion field")


def launch_viewer(viewer: str, waveform: Path, *, cwd: Path) -> None:
    """Start *viewer* on *waveform* as a detached process and return without waiting.

    The viewer runs in its own session and outlives gb.  Handles of viewers
    started by this process are kept so that finished ones are reaped on the
    next launch instead of being dropped while still running.

    Raises:
        ToolchainError: If the viewer cannot be spawned.
    """
    _viewers[:] = [process for process in _viewers if process.poll() is None]
    try:
        process = subprocess.Popen(
            [viewer, str(waveform)],
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as exc:
        raise ToolchainError(f"couldn't spawn {viewer} subprocess") from exc
    _viewers.append(process)


# ################
# Implementation
# ################

# Detached viewer processes started by this interpreter.
_viewers: list[subprocess.Popen[bytes]] = []


def _run(args: list[str], *, cwd: Path) -> None:
    """Run a tool with inherited stdio and wait for it.

    The tool's own diagnostics go straight to the terminal.

    Raises:
        ToolchainError: If the tool is not found, cannot be spawned, or exits non-zero.
    """
    try:
        result = subprocess.run(args, cwd=cwd)
    except OSError as exc:
        raise ToolchainError(f"couldn't spawn {args[0]} subprocess") from exc
    if result.returncode != 0:
        raise ToolchainError(f"`{' '.join(args)}` exited with status {result.returncode}")
