# Copyright 2026 gb Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the staged build pipeline."""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from gb.build.pipeline import STAGES, Command, Stage, run_pipeline
from gb.build.relocate import BUILD_DIR, CATALOG_NAME, object_name
from gb.errors import ConfigurationError, MissingFilesError, RelocationError, ToolchainError
from gb.workspace.manifest import Target

# ###############
# Helpers
# ###############


def _completed(returncode: int = 0, stdout: str = "") -> MagicMock:
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = ""
    return result


class _FakeGhdl:
    """Stands in for ``subprocess.run``: records calls and leaves GHDL-like output on disk."""

    def __init__(self, *, fail_on: str | None = None, objects: bool = True, waveform: bool = True) -> None:
        self.calls: list[tuple[list[str], Path]] = []
        self._fail_on = fail_on
        self._objects = objects
        self._waveform = waveform

    def __call__(self, args: list[str], cwd: Path | None = None, **kwargs: object) -> MagicMock:
        if args[0] == "sw_vers":
            return _completed(stdout="ProductName:\tmacOS\nProductVersion:\t13.6\n")

        assert cwd is not None
        self.calls.append((list(args), Path(cwd)))
        mode = args[1]
        if mode == self._fail_on:
            return _completed(returncode=1)

        if mode == "-a":
            lines = ["v 4\n"]
            for source in args[2:]:
                if self._objects:
                    (cwd / object_name(source)).write_bytes(b"obj")
                lines.append(f'file . "{source}" "0" "0" "ghdl" :\n')
            (cwd / CATALOG_NAME).write_text("".join(lines), encoding="utf-8")
        elif mode == "-r" and self._waveform:
            for arg in args[3:]:
                if arg.startswith("--vcd="):
                    (cwd / arg.removeprefix("--vcd=")).write_text("$date\n$end\n", encoding="utf-8")
        return _completed()

    def commands(self) -> list[list[str]]:
        return [args for args, _ in self.calls]


def _project(root: Path, *files: str) -> None:
    for name in files:
        (root / name).parent.mkdir(parents=True, exist_ok=True)
        (root / name).write_text(f"entity {Path(name).stem} is end;\n", encoding="utf-8")


@pytest.fixture(autouse=True)
def _linux(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "platform", "linux")


# ###############
# Stage plans
# ###############


class TestStages:
    def test_command_stage_sequences(self) -> None:
        assert STAGES[Command.ANALYZE] == (Stage.ANALYZE,)
        assert STAGES[Command.COMPILE] == (Stage.ANALYZE, Stage.ELABORATE)
        assert STAGES[Command.RUN] == (Stage.ANALYZE, Stage.ELABORATE, Stage.EXECUTE)
        assert STAGES[Command.WAVE] == (Stage.ANALYZE, Stage.ELABORATE, Stage.EXECUTE, Stage.WAVE)

    def test_every_command_has_a_plan(self) -> None:
        assert set(STAGES) == set(Command)


# ###############
# Successful builds
# ###############


class TestSuccessfulBuilds:
    def test_analyze_only(self, tmp_path: Path) -> None:
        _project(tmp_path, "a.vhd", "b.vhd")
        target = Target(name="lib", files=[Path("a.vhd"), Path("b.vhd")])
        fake = _FakeGhdl()

        with patch("subprocess.run", side_effect=fake):
            completed = run_pipeline(target, Command.ANALYZE, root=tmp_path)

        assert completed == [Stage.ANALYZE]
        assert fake.calls == [(["ghdl", "-a", "a.vhd", "b.vhd"], tmp_path)]
        build = tmp_path / BUILD_DIR
        assert (build / "a.o").exists()
        assert (build / "b.o").exists()
        assert 'file . "../../a.vhd"' in (build / CATALOG_NAME).read_text(encoding="utf-8")
        assert not (tmp_path / CATALOG_NAME).exists()

    def test_analyze_does_not_need_an_entry_file(self, tmp_path: Path) -> None:
        _project(tmp_path, "a.vhd")
        target = Target(name="lib", files=[Path("a.vhd")])
        with patch("subprocess.run", side_effect=_FakeGhdl()):
            assert run_pipeline(target, Command.ANALYZE, root=tmp_path) == [Stage.ANALYZE]

    def test_compile_analyzes_in_order_then_elaborates_base_name(self, tmp_path: Path) -> None:
        _project(tmp_path, "a.vhd", "b.vhd")
        target = Target(name="sim", files=[Path("a.vhd"), Path("b.vhd")], execute=Path("a.vhd"))
        fake = _FakeGhdl()

        with patch("subprocess.run", side_effect=fake):
            completed = run_pipeline(target, Command.COMPILE, root=tmp_path)

        assert completed == [Stage.ANALYZE, Stage.ELABORATE]
        assert fake.calls == [
            (["ghdl", "-a", "a.vhd", "b.vhd"], tmp_path),
            (["ghdl", "-e", "a"], tmp_path / BUILD_DIR),
        ]

    def test_file_order_is_preserved(self, tmp_path: Path) -> None:
        _project(tmp_path, "pkg.vhd", "core.vhd", "top.vhd")
        target = Target(name="t", files=[Path("top.vhd"), Path("pkg.vhd"), Path("core.vhd")])
        fake = _FakeGhdl()
        with patch("subprocess.run", side_effect=fake):
            run_pipeline(target, Command.ANALYZE, root=tmp_path)
        assert fake.commands()[0] == ["ghdl", "-a", "top.vhd", "pkg.vhd", "core.vhd"]

    def test_run_executes_from_build_dir(self, tmp_path: Path) -> None:
        _project(tmp_path, "rtl/alu.vhd", "tb/alu_tb.vhd")
        target = Target(
            name="sim",
            files=[Path("rtl/alu.vhd"), Path("tb/alu_tb.vhd")],
            execute=Path("tb/alu_tb.vhd"),
        )
        fake = _FakeGhdl()

        with patch("subprocess.run", side_effect=fake):
            completed = run_pipeline(target, Command.RUN, root=tmp_path)

        assert completed == [Stage.ANALYZE, Stage.ELABORATE, Stage.EXECUTE]
        assert fake.calls[1:] == [
            (["ghdl", "-e", "alu_tb"], tmp_path / BUILD_DIR),
            (["ghdl", "-r", "alu_tb"], tmp_path / BUILD_DIR),
        ]

    def test_run_passes_target_waveform(self, tmp_path: Path) -> None:
        _project(tmp_path, "top.vhd")
        target = Target(name="sim", files=[Path("top.vhd")], execute=Path("top.vhd"), vcd_name="top.vcd")
        fake = _FakeGhdl()
        with patch("subprocess.run", side_effect=fake):
            run_pipeline(target, Command.RUN, root=tmp_path)
        assert fake.commands()[-1] == ["ghdl", "-r", "top", "--vcd=top.vcd"]

    def test_waveform_override(self, tmp_path: Path) -> None:
        _project(tmp_path, "top.vhd")
        target = Target(name="sim", files=[Path("top.vhd")], execute=Path("top.vhd"), vcd_name="top.vcd")
        fake = _FakeGhdl()
        with patch("subprocess.run", side_effect=fake):
            run_pipeline(target, Command.RUN, root=tmp_path, vcd_name="other.vcd")
        assert fake.commands()[-1] == ["ghdl", "-r", "top", "--vcd=other.vcd"]

    def test_wave_launches_viewer_on_build_output(self, tmp_path: Path) -> None:
        _project(tmp_path, "top.vhd")
        target = Target(name="sim", files=[Path("top.vhd")], execute=Path("top.vhd"), vcd_name="out.vcd")

        with patch("subprocess.run", side_effect=_FakeGhdl()), patch("subprocess.Popen") as mock_popen:
            completed = run_pipeline(target, Command.WAVE, root=tmp_path, viewer="gtkwave")

        assert completed == [Stage.ANALYZE, Stage.ELABORATE, Stage.EXECUTE, Stage.WAVE]
        args, kwargs = mock_popen.call_args
        assert args[0] == ["gtkwave", str(BUILD_DIR / "out.vcd")]
        assert kwargs["cwd"] == tmp_path

    def test_on_stage_is_called_before_each_stage(self, tmp_path: Path) -> None:
        _project(tmp_path, "top.vhd")
        target = Target(name="sim", files=[Path("top.vhd")], execute=Path("top.vhd"))
        seen: list[Stage] = []
        with patch("subprocess.run", side_effect=_FakeGhdl()):
            run_pipeline(target, Command.RUN, root=tmp_path, on_stage=seen.append)
        assert seen == [Stage.ANALYZE, Stage.ELABORATE, Stage.EXECUTE]

    def test_macos_elaboration_gets_version_flag(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "darwin")
        _project(tmp_path, "top.vhd")
        target = Target(name="sim", files=[Path("top.vhd")], execute=Path("top.vhd"))
        fake = _FakeGhdl()
        with patch("subprocess.run", side_effect=fake):
            run_pipeline(target, Command.COMPILE, root=tmp_path)
        assert fake.commands()[-1] == ["ghdl", "-e", "-Wl,-mmacosx-version-min=13.6", "top"]


# ###############
# Pre-flight failures
# ###############


class TestPreflight:
    def test_missing_files_are_all_reported(self, tmp_path: Path) -> None:
        _project(tmp_path, "b.vhd")
        target = Target(name="t", files=[Path("a.vhd"), Path("b.vhd"), Path("c.vhd")])

        with patch("subprocess.run") as mock_run:
            with pytest.raises(MissingFilesError) as exc_info:
                run_pipeline(target, Command.ANALYZE, root=tmp_path)

        assert exc_info.value.missing == [Path("a.vhd"), Path("c.vhd")]
        mock_run.assert_not_called()

    def test_run_without_entry_file_spawns_nothing(self, tmp_path: Path) -> None:
        _project(tmp_path, "a.vhd", "b.vhd", "c.vhd")
        target = Target(name="lib", files=[Path("a.vhd"), Path("b.vhd"), Path("c.vhd")])

        with patch("subprocess.run") as mock_run:
            with pytest.raises(ConfigurationError, match="no `execute` file"):
                run_pipeline(target, Command.RUN, root=tmp_path)

        mock_run.assert_not_called()

    def test_compile_without_entry_file_fails(self, tmp_path: Path) -> None:
        _project(tmp_path, "a.vhd")
        target = Target(name="lib", files=[Path("a.vhd")])
        with patch("subprocess.run") as mock_run:
            with pytest.raises(ConfigurationError):
                run_pipeline(target, Command.COMPILE, root=tmp_path)
        mock_run.assert_not_called()

    def test_unsupported_viewer_fails_before_launch(self, tmp_path: Path) -> None:
        _project(tmp_path, "top.vhd")
        target = Target(name="sim", files=[Path("top.vhd")], execute=Path("top.vhd"), vcd_name="out.vcd")

        with patch("subprocess.run") as mock_run, patch("subprocess.Popen") as mock_popen:
            with pytest.raises(ConfigurationError, match="unsupported vcd viewer `surfer`"):
                run_pipeline(target, Command.WAVE, root=tmp_path, viewer="surfer")

        mock_run.assert_not_called()
        mock_popen.assert_not_called()

    def test_wave_without_viewer_fails(self, tmp_path: Path) -> None:
        _project(tmp_path, "top.vhd")
        target = Target(name="sim", files=[Path("top.vhd")], execute=Path("top.vhd"), vcd_name="out.vcd")
        with patch("subprocess.run") as mock_run:
            with pytest.raises(ConfigurationError, match="no waveform viewer"):
                run_pipeline(target, Command.WAVE, root=tmp_path)
        mock_run.assert_not_called()

    def test_wave_without_waveform_name_fails(self, tmp_path: Path) -> None:
        _project(tmp_path, "top.vhd")
        target = Target(name="sim", files=[Path("top.vhd")], execute=Path("top.vhd"))
        with patch("subprocess.run") as mock_run:
            with pytest.raises(ConfigurationError, match="vcd-name"):
                run_pipeline(target, Command.WAVE, root=tmp_path, viewer="gtkwave")
        mock_run.assert_not_called()

    def test_viewer_is_ignored_without_wave_stage(self, tmp_path: Path) -> None:
        _project(tmp_path, "top.vhd")
        target = Target(name="sim", files=[Path("top.vhd")], execute=Path("top.vhd"))
        with patch("subprocess.run", side_effect=_FakeGhdl()):
            completed = run_pipeline(target, Command.RUN, root=tmp_path, viewer="surfer")
        assert completed[-1] == Stage.EXECUTE


# ###############
# Fail-fast
# ###############


class TestFailFast:
    def test_analyze_failure_stops_pipeline(self, tmp_path: Path) -> None:
        _project(tmp_path, "top.vhd")
        target = Target(name="sim", files=[Path("top.vhd")], execute=Path("top.vhd"))
        fake = _FakeGhdl(fail_on="-a")

        with patch("subprocess.run", side_effect=fake):
            with pytest.raises(ToolchainError):
                run_pipeline(target, Command.RUN, root=tmp_path)

        assert fake.commands() == [["ghdl", "-a", "top.vhd"]]
        assert not (tmp_path / BUILD_DIR).exists()

    def test_elaborate_failure_skips_execute(self, tmp_path: Path) -> None:
        _project(tmp_path, "top.vhd")
        target = Target(name="sim", files=[Path("top.vhd")], execute=Path("top.vhd"))
        fake = _FakeGhdl(fail_on="-e")

        with patch("subprocess.run", side_effect=fake):
            with pytest.raises(ToolchainError):
                run_pipeline(target, Command.RUN, root=tmp_path)

        assert [args[1] for args in fake.commands()] == ["-a", "-e"]

    def test_relocation_failure_skips_elaborate(self, tmp_path: Path) -> None:
        _project(tmp_path, "top.vhd")
        target = Target(name="sim", files=[Path("top.vhd")], execute=Path("top.vhd"))
        fake = _FakeGhdl(objects=False)

        with patch("subprocess.run", side_effect=fake):
            with pytest.raises(RelocationError, match="top.o"):
                run_pipeline(target, Command.COMPILE, root=tmp_path)

        assert [args[1] for args in fake.commands()] == ["-a"]

    def test_missing_waveform_skips_viewer(self, tmp_path: Path) -> None:
        _project(tmp_path, "top.vhd")
        target = Target(name="sim", files=[Path("top.vhd")], execute=Path("top.vhd"), vcd_name="out.vcd")

        with patch("subprocess.run", side_effect=_FakeGhdl(waveform=False)), patch("subprocess.Popen") as mock_popen:
            with pytest.raises(ToolchainError, match="out.vcd"):
                run_pipeline(target, Command.WAVE, root=tmp_path, viewer="gtkwave")

        mock_popen.assert_not_called()
