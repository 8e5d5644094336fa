"""Resolve user-supplied file and directory paths into source files."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

# Directories never worth descending into. Build output folders (build/,
# target/) are kept: generated sources can hold the only reference to a symbol.
SKIP_DIRS = frozenset({
    ".git", ".hg", ".svn", ".gradle", ".idea", ".vscode",
    "node_modules", "__pycache__", ".lang-tools",
})


@dataclass
class PathError:
    path: str
    message: str

    def to_dict(self) -> dict:
        return {"path": self.path, "message": self.message}


@dataclass
class ResolvedPaths:
    resolved: list[str] = field(default_factory=list)
    errors: list[PathError] = field(default_factory=list)


def _walk_files(root: str, extensions: tuple[str, ...]) -> list[str]:
    """Recursive scan of *root* for files ending in one of *extensions*."""
    result = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
        for fname in sorted(filenames):
            if fname.endswith(extensions):
                result.append(os.path.join(dirpath, fname))
    return result


def resolve_file_paths(paths, extensions, cwd: str | None = None) -> ResolvedPaths:
    """Expand *paths* into absolute source file paths.

    Directories are scanned recursively for *extensions* (a string or a
    tuple of strings). Explicit file paths are kept as given, whatever
    their extension. Paths that do not exist produce a :class:`PathError`
    and are otherwise ignored, so one bad path never aborts a run.
    A file reached through more than one path is listed once, in the
    position it was first seen.
    """
    if isinstance(extensions, str):
        extensions = (extensions,)
    base = cwd or os.getcwd()
    out = ResolvedPaths()
    seen: set[str] = set()

    for p in paths:
        absolute = p if os.path.isabs(p) else os.path.join(base, p)
        absolute = os.path.normpath(absolute)
        if not os.path.exists(absolute):
            out.errors.append(PathError(path=p, message=f"Path not found: {p}"))
            continue
        if os.path.isdir(absolute):
            found = _walk_files(absolute, tuple(extensions))
            log.debug("Found %d source files under %s", len(found), absolute)
        else:
            found = [absolute]
        for path in found:
            if path not in seen:
                seen.add(path)
                out.resolved.append(path)

    return out
