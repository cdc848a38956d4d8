"""File discovery: find Rust sources under a directory and read them."""

import logging
from pathlib import Path
from typing import Iterable, Iterator, Union

from fnloc.engine import FileError, SourceFile
from fnloc.errors import DirectoryNotAccessibleError, NoSourceFilesError, UnreadableFileError

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_DIRS = ("target", ".git")

# File stems that name their directory's module rather than a child module
_MODULE_ROOT_STEMS = {"mod", "lib", "main"}


def find_rust_files(
    directory: Union[str, Path],
    exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
) -> list[Path]:
    """
    Recursively find all ``.rs`` files under a directory.

    Args:
        directory: Directory to scan
        exclude_dirs: Directory names to skip anywhere in the tree

    Returns:
        Sorted list of Rust file paths

    Raises:
        DirectoryNotAccessibleError: if the directory cannot be listed
        NoSourceFilesError: if no Rust file was found
    """
    root = Path(directory)
    if not root.is_dir():
        raise DirectoryNotAccessibleError(str(directory))

    excluded = set(exclude_dirs)
    rust_files = []
    try:
        for file_path in root.rglob("*.rs"):
            relative_parts = file_path.relative_to(root).parts[:-1]
            if any(part in excluded for part in relative_parts):
                continue
            if file_path.is_file():
                rust_files.append(file_path)
    except OSError as e:
        raise DirectoryNotAccessibleError(str(directory)) from e

    if not rust_files:
        raise NoSourceFilesError(str(directory))

    return sorted(rust_files)


def module_prefix_for(file_path: Path, root: Path) -> tuple[str, ...]:
    """
    Derive the module path of a file relative to the scanned root.

    Example:
        >>> module_prefix_for(Path("src/analyzer/nesting.rs"), Path("."))
        ('analyzer', 'nesting')
        >>> module_prefix_for(Path("src/analyzer/mod.rs"), Path("."))
        ('analyzer',)
    """
    try:
        relative = file_path.relative_to(root)
    except ValueError:
        relative = Path(file_path.name)

    parts = list(relative.parent.parts)
    if parts and parts[0] == "src":
        parts = parts[1:]
    if relative.stem not in _MODULE_ROOT_STEMS:
        parts.append(relative.stem)
    return tuple(parts)


def read_source(file_path: Path, root: Path | None = None) -> SourceFile:
    """
    Read one file as UTF-8 text.

    Raises:
        UnreadableFileError: on I/O failure or invalid UTF-8
    """
    try:
        text = file_path.read_bytes().decode("utf-8")
    except (IOError, OSError) as e:
        raise UnreadableFileError(str(file_path), e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise UnreadableFileError(str(file_path), f"not valid UTF-8 ({e.reason})") from e

    prefix = module_prefix_for(file_path, root) if root is not None else ()
    return SourceFile(path=str(file_path), text=text, module_prefix=prefix)


def read_sources(
    paths: Iterable[Path],
    root: Path | None = None,
) -> Iterator[Union[SourceFile, FileError]]:
    """Read files one by one, turning unreadable ones into FileError values."""
    for file_path in paths:
        try:
            yield read_source(file_path, root)
        except UnreadableFileError as e:
            yield FileError(path=e.path, kind="unreadable", message=e.reason)
