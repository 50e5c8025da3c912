"""File scanner — discover Python modules under a source root."""

from pathlib import Path

# Directories to always skip
SKIP_DIRS = {
    ".git", "__pycache__", ".venv", "venv", ".env", "dist", "build",
    ".tox", ".mypy_cache", ".pytest_cache", ".ruff_cache", "node_modules",
}

SOURCE_SUFFIX = ".py"


def scan_source_files(source_root: Path) -> list[Path]:
    """Recursively list Python source files, in a stable order."""
    files = []
    for item in source_root.rglob(f"*{SOURCE_SUFFIX}"):
        if item.is_file() and _should_include(item.relative_to(source_root)):
            files.append(item)
    return sorted(files)


def _should_include(relative: Path) -> bool:
    for part in relative.parts[:-1]:
        if part in SKIP_DIRS or part.startswith("."):
            return False
    return True


def module_name_for(path: Path, source_root: Path) -> str:
    """Dotted module name of a source file relative to the root.

    ``pkg/__init__.py`` maps to ``pkg``, ``pkg/mod.py`` to ``pkg.mod``.
    """
    relative = path.relative_to(source_root).with_suffix("")
    parts = list(relative.parts)
    if parts and parts[-1] == "__init__":
        parts = parts[:-1]
    return ".".join(parts)


def is_package_module(path: Path) -> bool:
    return path.name == "__init__.py"
