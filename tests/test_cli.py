"""
Tests for the command-line entry point (main.py).

Tests:
- Single-file commands and exit codes
- Config file and CLI option precedence
- Batch and init-config commands
"""

import argparse
import json

import pytest

from main import apply_cli_overrides, main
from geomcluster.project_config import CONFIG_FILENAME, ProjectConfig


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Keep config discovery away from the real working and home directories."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


class TestSingleFileCommands:
    """Tests for points, curves, modules, sort, directions and length."""

    def test_points(self, geometry_json_path, capsys):
        """Test the result is written next to the input."""
        assert main(["points", str(geometry_json_path), "-t", "0.01"]) == 0
        output = geometry_json_path.parent / "panels.points.json"
        assert read_json(output)['unique_count'] == 2
        assert "Result written to" in capsys.readouterr().out

    def test_points_without_kdtree(self, geometry_json_path, tmp_path):
        """Test the pairwise path gives the same result."""
        out = tmp_path / "pairwise.json"
        assert main(["points", str(geometry_json_path), "--no-kdtree", "-o", str(out)]) == 0
        assert read_json(out)['unique_count'] == 2

    def test_modules_options(self, geometry_json_path, tmp_path):
        """Test module options reach the operation."""
        out = tmp_path / "modules.json"
        code = main(["modules", str(geometry_json_path), "--prefix", "Level_",
                     "--area-scale", "1", "--reference", "0", "0", "0", "-o", str(out)])
        assert code == 0
        data = read_json(out)
        assert data['labels'] == ["Level_A-0", "Level_B-0"]
        assert data['unique_areas'] == [1.0, 1.0]

    def test_modules_stl(self, cube_stl_path, tmp_path):
        """Test STL input."""
        out = tmp_path / "cube.json"
        assert main(["modules", str(cube_stl_path), "-o", str(out)]) == 0
        assert read_json(out)['count'] == 6

    def test_sort_method(self, geometry_json_path, tmp_path):
        """Test the sort method option."""
        out = tmp_path / "sorted.json"
        assert main(["sort", str(geometry_json_path), "-m", "distance", "-o", str(out)]) == 0
        data = read_json(out)
        assert data['method'] == "distance"
        assert data['indices'][0] == 0

    def test_directions_and_length(self, geometry_json_path, tmp_path):
        """Test the curve filters."""
        out = tmp_path / "dirs.json"
        assert main(["directions", str(geometry_json_path), "-o", str(out)]) == 0
        assert len(read_json(out)['vertical']) == 1
        assert main(["length", str(geometry_json_path), "--threshold", "5", "-o", str(out)]) == 0
        assert len(read_json(out)['long']) == 3

    def test_missing_file(self, tmp_path):
        """Test a missing input exits with 1."""
        assert main(["points", str(tmp_path / "missing.json")]) == 1

    def test_unsupported_format(self, tmp_path):
        """Test an unknown suffix exits with 1."""
        path = tmp_path / "model.obj"
        path.write_text("")
        assert main(["curves", str(path)]) == 1

    def test_corrupt_stl(self, nan_stl_path):
        """Test a facet with non-finite coordinates exits with 1."""
        assert main(["modules", str(nan_stl_path)]) == 1

    def test_explicit_format(self, tmp_path, geometry_data):
        """Test --format overrides suffix detection."""
        path = tmp_path / "panels.txt"
        path.write_text(json.dumps(geometry_data))
        out = tmp_path / "r.json"
        assert main(["curves", str(path), "-f", "json", "-o", str(out)]) == 0
        assert read_json(out)['unique_count'] == 3


class TestConfigPrecedence:
    """Tests for config files and CLI overrides."""

    def test_config_file_used(self, geometry_json_path, tmp_path):
        """Test a config file next to the input is picked up."""
        (geometry_json_path.parent / CONFIG_FILENAME).write_text(
            json.dumps({"clustering": {"tolerance": 10.0}}))
        out = tmp_path / "r.json"
        assert main(["points", str(geometry_json_path), "-o", str(out)]) == 0
        assert read_json(out)['unique_count'] == 1

    def test_cli_overrides_config(self, geometry_json_path, tmp_path):
        """Test CLI options win over the config file."""
        config_path = tmp_path / "custom.json"
        config_path.write_text(json.dumps({"clustering": {"tolerance": 10.0}}))
        out = tmp_path / "r.json"
        code = main(["--config", str(config_path), "points", str(geometry_json_path),
                     "-t", "0.01", "-o", str(out)])
        assert code == 0
        assert read_json(out)['unique_count'] == 2

    def test_apply_cli_overrides(self):
        """Test only given options are copied."""
        args = argparse.Namespace(command="sort", method="grid", reference_point=None)
        config = apply_cli_overrides(ProjectConfig(), args)
        assert config.sorting.method == "grid"
        assert config.sorting.reference_point == [0.0, 0.0, 0.0]

    def test_log_json(self, geometry_json_path, tmp_path):
        """Test --log-json writes JSON records."""
        log_path = tmp_path / "run.log.json"
        assert main(["--log-json", str(log_path), "points", str(geometry_json_path)]) == 0
        first = json.loads(log_path.read_text(encoding="utf-8").splitlines()[0])
        assert first["logger"].startswith("geomcluster")


class TestOtherCommands:
    """Tests for batch and init-config."""

    def test_init_config(self, tmp_path, capsys):
        """Test a sample config is written."""
        path = tmp_path / "sample.json"
        assert main(["init-config", str(path)]) == 0
        assert ProjectConfig.load(path) == ProjectConfig()
        assert "Sample configuration written" in capsys.readouterr().out

    def test_batch(self, tmp_path, geometry_data, capsys):
        """Test a batch run over a folder."""
        folder = tmp_path / "panels"
        folder.mkdir()
        for name in ("a.json", "b.json"):
            (folder / name).write_text(json.dumps(geometry_data))
        assert main(["batch", str(folder), "curves", "-o", str(tmp_path / "out")]) == 0
        assert (tmp_path / "out" / "a.curves.json").exists()
        assert "Batch Summary (curves)" in capsys.readouterr().out

    def test_batch_with_failure(self, tmp_path):
        """Test a failed file makes the batch exit with 1."""
        folder = tmp_path / "panels"
        folder.mkdir()
        (folder / "broken.json").write_text("{")
        assert main(["batch", str(folder), "points"]) == 1

    def test_batch_missing_directory(self, tmp_path):
        """Test a missing folder exits with 1."""
        assert main(["batch", str(tmp_path / "missing"), "points"]) == 1

    def test_unknown_command(self):
        """Test argparse rejects unknown commands."""
        with pytest.raises(SystemExit):
            main(["explode", "x.json"])
