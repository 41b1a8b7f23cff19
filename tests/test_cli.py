"""Tests for the dupscan command line."""

import json

from click.testing import CliRunner

from conftest import SUM_COSTS, SUM_PRICES
from dupscan import __version__
from dupscan.cli import main, merge_config_with_cli


def write_project(root, files):
    for name, content in files.items():
        (root / name).write_text(content)
    return root


class TestMergeConfig:
    def test_cli_value_wins_when_changed(self):
        assert merge_config_with_cli({"semantic_batch_size": 4}, 2, "semantic_batch_size", 10) == 2

    def test_config_value_used_for_default(self):
        assert merge_config_with_cli({"semantic_batch_size": 4}, 10, "semantic_batch_size", 10) == 4

    def test_default_when_unset(self):
        assert merge_config_with_cli({}, 10, "semantic_batch_size", 10) == 10


class TestAnalyzeCommand:
    def test_json_report(self, tmp_path):
        write_project(tmp_path, {"a.ts": SUM_PRICES, "b.ts": SUM_PRICES})

        result = CliRunner().invoke(main, [str(tmp_path), "--no-semantic", "-q", "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["total_files"] == 2
        assert data["statistics"]["exact_duplicates"] == 1

    def test_output_file_format_from_extension(self, tmp_path):
        project = tmp_path / "proj"
        project.mkdir()
        write_project(project, {"a.ts": SUM_PRICES, "b.ts": SUM_COSTS})
        out = tmp_path / "report.md"

        result = CliRunner().invoke(main, [str(project), "--no-semantic", "-q", "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert out.read_text().startswith("# Code Similarity Report")

    def test_bad_output_extension(self, tmp_path):
        result = CliRunner().invoke(main, [str(tmp_path), "-o", "report.pdf"])
        assert result.exit_code == 1
        assert "Invalid output extension" in result.output

    def test_progress_bar(self, tmp_path):
        write_project(tmp_path, {"a.ts": SUM_PRICES})
        result = CliRunner().invoke(main, [str(tmp_path), "--no-semantic"])

        assert result.exit_code == 0, result.output
        assert "100%" in result.output
        assert "No duplicated code found" in result.output

    def test_config_file_disables_semantic(self, tmp_path):
        write_project(tmp_path, {"a.ts": SUM_PRICES, "b.ts": SUM_PRICES})
        (tmp_path / ".dupscanrc").write_text("[dupscan]\nsemantic = false\n")

        result = CliRunner().invoke(main, [str(tmp_path), "-q"])

        assert result.exit_code == 0, result.output
        assert "semantic pass skipped" not in result.output

    def test_invalid_config_file(self, tmp_path):
        write_project(tmp_path, {"a.ts": SUM_PRICES})
        (tmp_path / ".dupscanrc").write_text("[dupscan]\nexclude = 3\n")

        result = CliRunner().invoke(main, [str(tmp_path), "-q"])

        assert result.exit_code == 1
        assert "Invalid config" in result.output

    def test_missing_path(self):
        result = CliRunner().invoke(main, [])
        assert result.exit_code == 1
        assert "PATH is required" in result.output

    def test_missing_model_skips_semantic(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DUPSCAN_MODELS_DIR", str(tmp_path / "models"))
        write_project(tmp_path, {"a.ts": SUM_PRICES})

        result = CliRunner().invoke(main, [str(tmp_path), "-q"])

        assert result.exit_code == 0, result.output
        assert "semantic pass skipped" in result.output


class TestCompareCommand:
    def test_compare_two_files(self, tmp_path):
        write_project(tmp_path, {"a.ts": SUM_PRICES, "b.ts": SUM_COSTS})

        result = CliRunner().invoke(main, ["--compare", str(tmp_path / "a.ts"), str(tmp_path / "b.ts")])

        assert result.exit_code == 0, result.output
        assert "Found 1 similar block pairs" in result.output
        assert "High structural similarity" in result.output


class TestInfoOptions:
    def test_version(self):
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_model_status(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DUPSCAN_MODELS_DIR", str(tmp_path))
        result = CliRunner().invoke(main, ["--model-status"])
        assert result.exit_code == 0
        assert "Qwen3-0.6B" in result.output
