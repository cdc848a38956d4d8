"""Tests for configuration and the command line."""

import json
import shutil
from pathlib import Path

import pytest

from fnloc import __version__
from fnloc.config import FnlocConfig
from fnloc.errors import ConfigError
from fnloc.main import main

SAMPLE_DIR = Path(__file__).parent / "test_sample"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("FNLOC_SORT", "FNLOC_FORMAT", "FNLOC_MIN_LINES",
                 "FNLOC_JOBS", "FNLOC_EXCLUDE", "FNLOC_CLOSURES"):
        monkeypatch.delenv(name, raising=False)


class TestFnlocConfig:
    """Defaults, environment and overrides."""

    def test_defaults(self):
        config = FnlocConfig()
        assert config.directory == "./src"
        assert config.sort == "code"
        assert config.output_format == "table"
        assert config.limit is None
        assert config.exclude_dirs == ("target", ".git")

    def test_from_env(self):
        config = FnlocConfig.from_env({
            "FNLOC_SORT": "Complexity",
            "FNLOC_FORMAT": "json",
            "FNLOC_MIN_LINES": " 5 ",
            "FNLOC_JOBS": "3",
            "FNLOC_EXCLUDE": "target, vendor,",
            "FNLOC_CLOSURES": "0",
        })

        assert config.sort == "complexity"
        assert config.output_format == "json"
        assert config.min_lines == 5
        assert config.jobs == 3
        assert config.exclude_dirs == ("target", "vendor")
        assert config.include_closures is False

    @pytest.mark.parametrize("environ", [
        {"FNLOC_SORT": "size"},
        {"FNLOC_FORMAT": "xml"},
        {"FNLOC_MIN_LINES": "many"},
        {"FNLOC_JOBS": "0"},
        {"FNLOC_CLOSURES": "maybe"},
    ])
    def test_invalid_env(self, environ):
        with pytest.raises(ConfigError):
            FnlocConfig.from_env(environ)

    def test_overrides_skip_none(self):
        config = FnlocConfig(sort="name").with_overrides(sort=None, limit=3)
        assert config.sort == "name"
        assert config.limit == 3

    def test_unknown_override(self):
        with pytest.raises(ConfigError):
            FnlocConfig().with_overrides(colour=True)

    def test_negative_thresholds_rejected(self):
        with pytest.raises(ConfigError):
            FnlocConfig(min_nesting=-1)
        with pytest.raises(ConfigError):
            FnlocConfig(limit=-2)


class TestMain:
    """End-to-end runs of the command line."""

    def test_json_output(self, capsys):
        code = main([str(SAMPLE_DIR), "--format", "json", "--sort", "name"])
        out = capsys.readouterr().out
        data = json.loads(out)

        assert code == 0
        names = [d["name"] for d in data]
        assert names == sorted(names)
        assert "sample::large_function" in names
        assert "module::Counter::describe::{closure#0}" in names

    def test_text_output_with_filters(self, capsys):
        code = main([
            str(SAMPLE_DIR), "-f", "text", "-q", "--min-complexity", "4", "-s", "complexity",
        ])
        lines = capsys.readouterr().out.splitlines()

        assert code == 0
        assert lines == [
            "  - fn module::Counter::describe::{closure#0}: total=7 lines, code=7, "
            "comment=0, empty=0, complexity=5, nesting=1",
            "  - fn sample::large_function: total=17 lines, code=14, comment=1, "
            "empty=2, complexity=5, nesting=2",
            "  - fn sample::complex_function: total=9 lines, code=7, comment=1, "
            "empty=1, complexity=4, nesting=1",
        ]

    def test_limit(self, capsys):
        main([str(SAMPLE_DIR), "-f", "json", "-l", "2", "-s", "total"])
        data = json.loads(capsys.readouterr().out)

        assert [d["name"] for d in data] == ["sample::large_function", "module::Counter::describe"]

    def test_min_lines(self, capsys):
        main([str(SAMPLE_DIR), "-f", "json", "-m", "9"])
        data = json.loads(capsys.readouterr().out)
        assert all(d["total"] >= 9 for d in data)
        assert len(data) == 3

    def test_no_closures(self, capsys):
        main([str(SAMPLE_DIR), "-f", "json", "--no-closures"])
        data = json.loads(capsys.readouterr().out)
        assert all(d["kind"] != "closure" for d in data)

    def test_csv_output(self, capsys):
        main([str(SAMPLE_DIR), "-f", "csv", "-j", "2"])
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("Function,File,Start,End")
        assert len(lines) == 12

    def test_table_output(self, capsys):
        code = main([str(SAMPLE_DIR)])
        out = capsys.readouterr().out

        assert code == 0
        assert "Analyzing 2 Rust files" in out
        assert "Functions (11 shown)" in out

    def test_env_sort_used(self, capsys, monkeypatch):
        monkeypatch.setenv("FNLOC_SORT", "name")
        main([str(SAMPLE_DIR), "-f", "json"])
        names = [d["name"] for d in json.loads(capsys.readouterr().out)]
        assert names == sorted(names)

    def test_flag_beats_env(self, capsys, monkeypatch):
        monkeypatch.setenv("FNLOC_FORMAT", "text")
        main([str(SAMPLE_DIR), "-f", "json"])
        json.loads(capsys.readouterr().out)

    def test_parse_errors_reported_not_fatal(self, tmp_path, capsys):
        shutil.copy(SAMPLE_DIR / "sample.rs", tmp_path / "sample.rs")
        (tmp_path / "broken.rs").write_text("fn broken( {\n", encoding="utf-8")

        code = main([str(tmp_path), "-f", "json", "-q"])
        captured = capsys.readouterr()

        assert code == 0
        assert len(json.loads(captured.out)) == 5
        assert "1 file(s) could not be analyzed" in captured.err

    def test_missing_directory(self, tmp_path, capsys):
        code = main([str(tmp_path / "missing")])
        assert code == 1
        assert "Directory not accessible" in capsys.readouterr().err

    def test_empty_directory(self, tmp_path, capsys):
        code = main([str(tmp_path)])
        assert code == 1
        assert "No Rust files found" in capsys.readouterr().err

    def test_bad_env_is_usage_error(self, monkeypatch, capsys):
        monkeypatch.setenv("FNLOC_SORT", "size")
        assert main([str(SAMPLE_DIR)]) == 2
        assert "usage:" in capsys.readouterr().err

    def test_invalid_flag_value(self):
        with pytest.raises(SystemExit) as exc_info:
            main([str(SAMPLE_DIR), "--sort", "size"])
        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out
