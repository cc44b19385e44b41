"""Tests for the compile_program command line entrypoint."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from turtle_plotter.scripts.compile_program import build_parser, main
from turtle_plotter.utils import logging_config


@pytest.fixture()
def segments_file(tmp_path: Path) -> Path:
    path = tmp_path / "drawing.json"
    path.write_text(json.dumps({"segments": [[0, 0, 10, 0], [10, 0, 10, 10]]}))
    return path


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class TestParser:
    def test_source_is_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_sources_are_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--pattern", "star", "--segments", "x.yaml"])

    def test_unknown_pattern(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--pattern", "dragon"])

    def test_unknown_log_level(self) -> None:
        with pytest.raises(SystemExit):
            main(["--pattern", "star", "--stdout", "--log-level", "verbose"])

    def test_log_level_is_case_insensitive(self) -> None:
        args = build_parser().parse_args(["--pattern", "star", "--log-level", "debug"])
        assert args.log_level == "DEBUG"


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


class TestMain:
    def test_pattern_to_file(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        out = tmp_path / "star.gcode"
        assert main(["--pattern", "star", "-o", str(out)]) == 0
        text = out.read_text()
        assert text.startswith("G21 ; Set units to millimeters\n")
        assert text.endswith("M2 ; End program\n")
        assert f"G-code written to: {out}" in capsys.readouterr().out

    def test_default_output_name(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        assert main(["--pattern", "square"]) == 0
        written = list(tmp_path.glob("turtletoy-*.gcode"))
        assert len(written) == 1

    def test_segments_to_stdout(
        self, segments_file: Path, capsys: pytest.CaptureFixture
    ) -> None:
        assert main(["--segments", str(segments_file), "--stdout"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert "G1 X10.000 Y10.000 F3000 ;" in lines
        assert "G1 X10.000 Y0.000 F3000 ;" in lines
        assert lines.count("M3 ; Pen down") == 1

    def test_overrides(self, segments_file: Path, capsys: pytest.CaptureFixture) -> None:
        code = main([
            "-s", str(segments_file), "--stdout",
            "--feed-rate", "1200", "--scale", "50", "--end", "M30",
        ])
        assert code == 0
        out = capsys.readouterr().out
        assert "G1 X5.000 Y5.000 F1200 ;" in out
        assert "M30 ; End program" in out

    def test_profile(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["--pattern", "grid", "--profile", "z_lift", "--stdout"]) == 0
        out = capsys.readouterr().out
        assert "G0 Z5 ; Pen up" in out
        assert "G0 Z0 ; Pen down" in out

    def test_check(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["--pattern", "spiral", "--stdout", "--check"]) == 0

    def test_empty_segments_file(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert main(["-s", str(path), "--stdout"]) == 0
        assert "; No drawing commands recorded" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    def test_invalid_scale(self) -> None:
        assert main(["--pattern", "star", "--stdout", "--scale", "0"]) == 1

    def test_missing_segments_file(self, tmp_path: Path) -> None:
        assert main(["-s", str(tmp_path / "missing.yaml"), "--stdout"]) == 1

    def test_malformed_segments_file(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("- [0, 0, 1]\n")
        assert main(["-s", str(path), "--stdout"]) == 1

    def test_bad_config_file(self, tmp_path: Path) -> None:
        cfg = tmp_path / "plotter.yaml"
        cfg.write_text("feed_rate: [3000\n")
        assert main(["--pattern", "star", "--stdout", "-c", str(cfg)]) == 1

    def test_unknown_profile(self) -> None:
        assert main(["--pattern", "star", "--stdout", "--profile", "laser"]) == 1

    def test_unwritable_output(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("")
        assert main(["--pattern", "star", "-o", str(blocker / "out.gcode")]) == 1

    def test_output_is_a_directory(self, tmp_path: Path) -> None:
        assert main(["--pattern", "star", "-o", str(tmp_path)]) == 1


# ---------------------------------------------------------------------------
# Process state
# ---------------------------------------------------------------------------


class TestProcessState:
    def test_context_cleared_after_main(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["--pattern", "star", "--stdout"]) == 0
        assert logging_config.get_context() == {}

    def test_context_cleared_after_failure(self) -> None:
        assert main(["--pattern", "star", "--stdout", "--scale", "0"]) == 1
        assert logging_config.get_context() == {}

    def test_excepthook_installed(self, capsys: pytest.CaptureFixture) -> None:
        previous = sys.excepthook
        main(["--pattern", "star", "--stdout"])
        assert sys.excepthook is not previous
