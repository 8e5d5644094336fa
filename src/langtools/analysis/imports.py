"""Unused-import removal for Java and Kotlin files.

An import is unused when the name it brings into scope never appears as an
identifier outside the import and package headers. Wildcard imports are
always kept. Kotlin operator conventions (``by``, ``for``, ``[]``, ``+`` and
friends) call functions that never appear by name, so those names count
as used too.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from langtools.analysis.declarations import ImportEntry
from langtools.analysis.scope import collect_identifiers
from langtools.index.discovery import resolve_file_paths
from langtools.index.parser import LANGUAGE_EXTENSIONS, SourceParser, read_source
from langtools.languages.base import LanguageSpec
from langtools.languages.registry import get_language_spec

log = logging.getLogger(__name__)

_HEADER_WRAPPERS = frozenset({"import_list"})


@dataclass
class CleanupResult:
    file: str
    removed: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def used_names(root, spec: LanguageSpec, source: bytes) -> set[str]:
    """Names referenced outside import and package headers."""
    skip = spec.import_types | spec.package_types | _HEADER_WRAPPERS
    names: set[str] = set()
    for child in root.children:
        if child.type in skip:
            continue
        names |= collect_identifiers(child, spec, source)
    names |= spec.implicit_used_names(root)
    return names


def find_unused_imports(root, spec: LanguageSpec, source: bytes) -> list[ImportEntry]:
    used = used_names(root, spec, source)
    return [
        imp
        for imp in spec.extract_imports(root, source)
        if not imp.is_wildcard and imp.symbol and imp.symbol not in used
    ]


def remove_imports(source: bytes, imports: list[ImportEntry]) -> bytes:
    """Cut *imports* out of *source*, each with its line terminator."""
    out = source
    for imp in sorted(imports, key=lambda i: i.start_byte, reverse=True):
        end = imp.end_byte
        if out[end:end + 2] == b"\r\n":
            end += 2
        elif out[end:end + 1] == b"\n":
            end += 1
        out = out[:imp.start_byte] + out[end:]
    return out


def cleanup_file(path: str, language: str, parser: SourceParser, dry_run: bool = False) -> CleanupResult:
    """Remove unused imports from one file in place.

    Files with syntax errors are left untouched. The file is only written
    when its content actually changes.
    """
    source = read_source(path)
    if source is None:
        return CleanupResult(file=path, error="Failed to read file")
    spec = get_language_spec(language)
    tree = parser.parse(source, language)
    if parser.has_syntax_error(tree):
        return CleanupResult(file=path, error="Syntax error in file")

    unused = find_unused_imports(tree.root_node, spec, source)
    result = CleanupResult(file=path, removed=[imp.path for imp in unused])
    if not unused:
        return result

    cleaned = remove_imports(source, unused)
    if cleaned != source and not dry_run:
        try:
            Path(path).write_bytes(cleaned)
        except OSError as exc:
            return CleanupResult(file=path, error=f"Failed to write file: {exc}")
        log.debug("%s: removed %d imports", path, len(unused))
    return result


def cleanup_files(paths, language: str, parser: SourceParser, dry_run: bool = False,
                  cwd: str | None = None) -> dict:
    """Clean every *language* file under *paths*.

    ``status`` is ``NOK`` when any path failed to resolve or any file
    failed to process.
    """
    resolved = resolve_file_paths(paths, LANGUAGE_EXTENSIONS[language], cwd=cwd)
    errors = [e.message for e in resolved.errors]
    processed = 0
    changed = []
    for path in resolved.resolved:
        result = cleanup_file(path, language, parser, dry_run=dry_run)
        if not result.ok:
            errors.append(f"Failed to process {path}: {result.error}")
            continue
        processed += 1
        if result.removed:
            changed.append({"file": path, "removed": result.removed})

    out = {
        "status": "OK" if not errors else "NOK",
        "filesProcessed": processed,
        "files": changed,
    }
    if errors:
        out["errors"] = errors
    return out
