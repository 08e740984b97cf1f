"""Adapter tests for CLI entrypoints."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import yaml

from latticemc.app.cli import heisenberg_main, main, potts_main
from latticemc.codec import load_grid, save_grid
from latticemc.generate import random_potts_grid


pytestmark = pytest.mark.adapter


def _potts_file(tmp_path: Path, name: str = "in.dat") -> Path:
    return save_grid(random_potts_grid((6, 6), 4, np.random.default_rng(0)), tmp_path / name)


def test_model_executable_smoke(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src = _potts_file(tmp_path)
    rc = potts_main([str(src), str(tmp_path / "out.dat"), "3", "--seed", "1", "--kT", "0"])
    captured = capsys.readouterr()

    assert rc == 0
    assert "Done. model=potts" in captured.out
    assert load_grid(tmp_path / "out.dat").extents == (6, 6)


def test_missing_arguments_print_usage_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    rc = potts_main(["only_input.dat"])
    captured = capsys.readouterr()

    assert rc != 0
    assert "usage: potts inputfile outputfile timesteps" in captured.out
    assert captured.err == ""


def test_non_integer_timesteps_is_usage_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = heisenberg_main([str(tmp_path / "a"), str(tmp_path / "b"), "many"])
    assert rc == 2
    assert "usage:" in capsys.readouterr().out


def test_unreadable_input(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    missing = tmp_path / "missing.dat"
    rc = potts_main([str(missing), str(tmp_path / "out.dat"), "1"])
    captured = capsys.readouterr()

    assert rc == 1
    assert f"could not open {missing}" in captured.err
    assert not (tmp_path / "out.dat").exists()


def test_non_grid_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src = tmp_path / "bad.dat"
    src.write_bytes(b"notgrid\n2\n4 4\n...")
    rc = potts_main([str(src), str(tmp_path / "out.dat"), "1"])
    captured = capsys.readouterr()

    assert rc == 1
    assert "does not contain grid data" in captured.err


def test_wrong_model_executable(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src = _potts_file(tmp_path)
    rc = heisenberg_main([str(src), str(tmp_path / "out.dat"), "1"])
    captured = capsys.readouterr()

    assert rc == 1
    assert "unsupported grid data type" in captured.err


def test_generate_then_run(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    init = tmp_path / "init.dat"
    rc = main(["generate", "heisenberg", str(init), "--extents", "3", "3", "3", "--seed", "4"])
    assert rc == 0
    assert init.read_bytes().startswith(b"grid:vector:double\n3\n3 3 3\n")

    rc = main(["run", str(init), str(tmp_path / "out.dat"), "2", "--seed", "5", "--sweep", "checkerboard"])
    captured = capsys.readouterr()
    assert rc == 0
    assert "model=heisenberg" in captured.out


def test_config_file_and_bad_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src = _potts_file(tmp_path)
    good = tmp_path / "run.yaml"
    good.write_text(yaml.safe_dump({"kT": 0.0, "seed": 3, "sweep": "raster"}), encoding="utf-8")
    assert potts_main([str(src), str(tmp_path / "out.dat"), "1", "--config", str(good)]) == 0

    bad = tmp_path / "bad.yaml"
    bad.write_text(yaml.safe_dump({"temperature": 1.0}), encoding="utf-8")
    rc = potts_main([str(src), str(tmp_path / "out2.dat"), "1", "--config", str(bad)])
    captured = capsys.readouterr()
    assert rc == 2
    assert "unknown key" in captured.err


def test_generate_rejects_bad_extents(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["generate", "potts", str(tmp_path / "g.dat"), "--extents", "4", "0"])
    assert rc == 2
    assert "extent" in capsys.readouterr().err


def test_selfcheck_command(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["selfcheck", "--no-smoke"])
    assert rc == 0
    assert "overall: OK" in capsys.readouterr().out


def test_overflowing_header_is_input_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src = tmp_path / "huge.dat"
    src.write_bytes(b"grid:scalar:int\n3\n4294967296 4294967296 1\n")
    rc = potts_main([str(src), str(tmp_path / "out.dat"), "1"])
    captured = capsys.readouterr()

    assert rc == 1
    assert "File input error" in captured.err
    assert not (tmp_path / "out.dat").exists()


def test_generate_then_run_with_custom_arity(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    init = tmp_path / "planar.dat"
    rc = main(["generate", "heisenberg", str(init), "--extents", "4", "4", "--arity", "2", "--seed", "1"])
    assert rc == 0

    rc = main(["run", str(init), str(tmp_path / "out.dat"), "1", "--arity", "2", "--seed", "2"])
    captured = capsys.readouterr()
    assert rc == 0
    assert "model=heisenberg" in captured.out
    assert load_grid(tmp_path / "out.dat", vector_arity=2).values.shape == (4, 4, 2)


def test_arity_mismatch_is_input_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    init = tmp_path / "planar.dat"
    assert main(["generate", "heisenberg", str(init), "--extents", "4", "4", "--arity", "2"]) == 0
    rc = heisenberg_main([str(init), str(tmp_path / "out.dat"), "1"])
    assert rc == 1
    assert "truncated" in capsys.readouterr().err
