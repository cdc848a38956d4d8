"""Tests for source file discovery."""

from pathlib import Path

import pytest

from fnloc.discovery import find_rust_files, module_prefix_for, read_source, read_sources
from fnloc.engine import FileError, SourceFile
from fnloc.errors import DirectoryNotAccessibleError, NoSourceFilesError, UnreadableFileError


def _touch(path: Path, text: str = "fn f() {}\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestFindRustFiles:
    """Tests for find_rust_files."""

    def test_finds_files_recursively_sorted(self, tmp_path):
        _touch(tmp_path / "src" / "main.rs")
        _touch(tmp_path / "src" / "analyzer" / "nesting.rs")
        _touch(tmp_path / "src" / "analyzer" / "mod.rs")
        _touch(tmp_path / "README.md", "# readme\n")

        files = find_rust_files(tmp_path)

        assert files == sorted(files)
        assert {f.name for f in files} == {"main.rs", "nesting.rs", "mod.rs"}

    def test_build_and_vcs_directories_skipped(self, tmp_path):
        _touch(tmp_path / "lib.rs")
        _touch(tmp_path / "target" / "debug" / "build.rs")
        _touch(tmp_path / ".git" / "hooks" / "hook.rs")

        assert find_rust_files(tmp_path) == [tmp_path / "lib.rs"]

    def test_custom_exclusions(self, tmp_path):
        _touch(tmp_path / "lib.rs")
        _touch(tmp_path / "vendor" / "dep.rs")
        _touch(tmp_path / "target" / "gen.rs")

        files = find_rust_files(tmp_path, exclude_dirs=["vendor"])
        assert {f.name for f in files} == {"lib.rs", "gen.rs"}

    def test_excluded_name_above_root_is_ignored(self, tmp_path):
        root = tmp_path / "target" / "project"
        _touch(root / "lib.rs")
        assert find_rust_files(root) == [root / "lib.rs"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(DirectoryNotAccessibleError) as exc_info:
            find_rust_files(tmp_path / "nope")
        assert "Directory not accessible" in str(exc_info.value)

    def test_file_instead_of_directory(self, tmp_path):
        path = _touch(tmp_path / "lib.rs")
        with pytest.raises(DirectoryNotAccessibleError):
            find_rust_files(path)

    def test_no_rust_files(self, tmp_path):
        _touch(tmp_path / "notes.txt", "nothing\n")
        with pytest.raises(NoSourceFilesError) as exc_info:
            find_rust_files(tmp_path)
        assert "No Rust files found" in str(exc_info.value)


class TestModulePrefix:
    """Tests for module_prefix_for."""

    @pytest.mark.parametrize("relative, expected", [
        ("src/lib.rs", ()),
        ("src/main.rs", ()),
        ("src/parser.rs", ("parser",)),
        ("src/analyzer/mod.rs", ("analyzer",)),
        ("src/analyzer/nesting.rs", ("analyzer", "nesting")),
        ("tools/gen.rs", ("tools", "gen")),
    ])
    def test_prefix(self, relative, expected):
        root = Path("/project")
        assert module_prefix_for(root / relative, root) == expected

    def test_path_outside_root_uses_stem(self):
        assert module_prefix_for(Path("/elsewhere/util.rs"), Path("/project")) == ("util",)


class TestReadSources:
    """Tests for read_source and read_sources."""

    def test_reads_text_and_prefix(self, tmp_path):
        path = _touch(tmp_path / "src" / "geometry.rs", "fn area() {}\n")
        source = read_source(path, tmp_path)

        assert isinstance(source, SourceFile)
        assert source.text == "fn area() {}\n"
        assert source.module_prefix == ("geometry",)
        assert source.path == str(path)

    def test_invalid_utf8_raises(self, tmp_path):
        path = tmp_path / "latin1.rs"
        path.write_bytes(b"// caf\xe9\nfn f() {}\n")

        with pytest.raises(UnreadableFileError) as exc_info:
            read_source(path)
        assert "UTF-8" in exc_info.value.reason

    def test_unreadable_files_become_errors(self, tmp_path):
        good = _touch(tmp_path / "good.rs")
        bad = tmp_path / "bad.rs"
        bad.write_bytes(b"\xff\xfe\x00fn")
        missing = tmp_path / "missing.rs"

        results = list(read_sources([good, bad, missing], tmp_path))

        assert isinstance(results[0], SourceFile)
        assert isinstance(results[1], FileError)
        assert results[1].kind == "unreadable"
        assert results[1].path == str(bad)
        assert isinstance(results[2], FileError)
        assert results[2].path == str(missing)
