"""Source file discovery for scanning a module's directory tree."""

from pathlib import Path
from typing import Iterator, Set, Optional


DEFAULT_EXTENSIONS = {".py"}
DEFAULT_EXCLUDE_DIRS = {
    ".git", ".hg", ".svn",
    "node_modules", "__pycache__", ".tox", ".nox",
    "venv", ".venv", "env", ".env",
    ".idea", ".vscode",
    "build", "dist", ".eggs", "*.egg-info",
}


def iter_source_files(
    root: Path,
    include_ext: Optional[Set[str]] = None,
    exclude_dirs: Optional[Set[str]] = None,
) -> Iterator[Path]:
    """
    Iterate over source files in a module's directory tree.

    Files come back in a stable, sorted order so that a module's
    extraction result is the same from run to run.

    Args:
        root: Root directory of the module sources.
        include_ext: Set of file extensions to include.
                    If None, uses DEFAULT_EXTENSIONS.
        exclude_dirs: Set of directory names to skip.
                     If None, uses DEFAULT_EXCLUDE_DIRS.

    Yields:
        Path objects for matching files.
    """
    if include_ext is None:
        include_ext = DEFAULT_EXTENSIONS
    if exclude_dirs is None:
        exclude_dirs = DEFAULT_EXCLUDE_DIRS

    root = root.resolve()

    def _walk(current: Path) -> Iterator[Path]:
        try:
            entries = sorted(current.iterdir())
        except PermissionError:
            return

        for entry in entries:
            if entry.is_dir():
                if entry.name in exclude_dirs:
                    continue
                # Glob patterns such as "*.egg-info"
                if any(entry.name.endswith(pat.lstrip("*")) for pat in exclude_dirs if pat.startswith("*")):
                    continue
                yield from _walk(entry)
            elif entry.is_file():
                if entry.suffix.lower() in include_ext:
                    yield entry

    yield from _walk(root)


def module_name_for(file_path: Path, root: Path) -> str:
    """
    Get the dotted Python module name of a source file.

    ``pkg/sub/mod.py`` becomes ``pkg.sub.mod`` and ``pkg/__init__.py``
    becomes ``pkg``.
    """
    rel_path = file_path.resolve().relative_to(root.resolve())
    parts = list(rel_path.with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    return ".".join(parts)
