# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the gb command-line interface."""

import argparse
import sys
from pathlib import Path

from yachalk import chalk

from gb.build.deps import resolve_all
from gb.build.pipeline import Command, Stage, run_pipeline
from gb.errors import BuildError, MissingFilesError
from gb.parser.source import ParseFailure, SourceParser
from gb.workspace.manifest import MANIFEST_NAME, load_manifest

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the gb CLI."""
    parser = argparse.ArgumentParser(
        prog="gb",
        description="A TOML based build tool using GHDL + VHDL",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # analyze subcommand
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a target's files (useful for errors!)",
        description="Analyze every file of a target and move the results into build/root.",
    )
    _add_target_arguments(analyze_parser)

    # compile subcommand
    compile_parser = subparsers.add_parser(
        "compile",
        help="Analyze and elaborate a target",
        description="Analyze a target's files, then elaborate its execute file.",
    )
    _add_target_arguments(compile_parser)

    # run subcommand
    run_parser = subparsers.add_parser(
        "run",
        help="Fully analyze, elaborate, and run a target",
        description="Analyze, elaborate, and run a target's execute file.",
    )
    _add_target_arguments(run_parser)
    run_parser.add_argument(
        "--vcd",
        help="Dump a waveform to this file in build/root (overrides the target's vcd-name)",
    )

    # wave subcommand
    wave_parser = subparsers.add_parser(
        "wave",
        help="Run a target and open its waveform in the viewer",
        description="Analyze, elaborate, and run a target, then open the waveform it produced.",
    )
    _add_target_arguments(wave_parser)
    wave_parser.add_argument(
        "--vcd",
        help="Waveform file name in build/root (overrides the target's vcd-name)",
    )
    wave_parser.add_argument(
        "--viewer",
        help="Waveform viewer to launch (overrides default.vcd-viewer)",
    )

    # deps subcommand
    deps_parser = subparsers.add_parser(
        "deps",
        help="List the files a design depends on",
        description=(
            "Follow component declarations from the given files to sibling .vhd files "
            "and print every file reached."
        ),
    )
    deps_parser.add_argument("files", nargs="+", help="Root VHDL files")
    _add_directory_argument(deps_parser)

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _add_directory_argument(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "-C",
        "--directory",
        default=".",
        help=f"Project directory containing {MANIFEST_NAME} (default: current directory)",
    )


def _add_target_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "target",
        nargs="?",
        help="Target to build (default: default.target from the manifest)",
    )
    _add_directory_argument(subparser)


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "deps":
        return _cmd_deps(args)
    return _cmd_build(args, Command(args.command))


def _cmd_build(args: argparse.Namespace, command: Command) -> int:
    """Handle the analyze, compile, run, and wave subcommands."""
    directory = Path(args.directory).resolve()

    if not directory.exists():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return 1

    try:
        manifest = load_manifest(directory / MANIFEST_NAME)
        target = manifest.select_target(args.target)
        viewer = getattr(args, "viewer", None) or manifest.default.vcd_viewer

        def announce(stage: Stage) -> None:
            print(f"{_label(_STAGE_LABELS[stage])} {target.name}")

        run_pipeline(
            target,
            command,
            root=directory,
            viewer=viewer,
            vcd_name=getattr(args, "vcd", None),
            on_stage=announce,
        )
    except BuildError as exc:
        _report(exc)
        return 1

    print(f"{_label('Finished')} {target.name}")
    return 0


def _cmd_deps(args: argparse.Namespace) -> int:
    """Handle the deps subcommand."""
    directory = Path(args.directory).resolve()

    if not directory.exists():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return 1

    roots = [Path(f) for f in args.files]
    missing = [root for root in roots if not (directory / root).exists()]
    if missing:
        _report(MissingFilesError(missing))
        return 1

    def warn(failure: ParseFailure) -> None:
        print(f"Warning: {failure} (treated as having no dependencies)")

    found = resolve_all((directory / root for root in roots), SourceParser(), on_failure=warn)
    for path in sorted(_display_path(path, directory) for path in found):
        print(path)
    return 0


_STAGE_LABELS: dict[Stage, str] = {
    Stage.ANALYZE: "Analyzing",
    Stage.ELABORATE: "Elaborating",
    Stage.EXECUTE: "Running",
    Stage.WAVE: "Viewing",
}


def _report(exc: BuildError) -> None:
    """Print a fatal build error as a single diagnostic on stderr."""
    print(
        f"{chalk.red.bold('[gb-error]')} {chalk.blue.bold('[build]')}: {exc.message}. Aborting.",
        file=sys.stderr,
    )
    if isinstance(exc, MissingFilesError):
        print("The following files were not found:", file=sys.stderr)
        for pos, path in enumerate(exc.missing, start=1):
            print(f"  {pos}. {path}", file=sys.stderr)
    if exc.__cause__ is not None:
        print(f"  caused by: {exc.__cause__}", file=sys.stderr)


def _display_path(path: Path, directory: Path) -> str:
    """Return *path* relative to *directory* where possible."""
    try:
        return str(path.relative_to(directory))
    except ValueError:
        return str(path)


def _label(text: str) -> str:
    """Return a right-aligned, colored progress label."""
    return chalk.green.bold(f"{text:>12}")
