"""Cross-file reachability of visible declarations (Layer B).

Every visible class, method and field across the analyzed files is checked
against one global set of referenced names. Entrypoint rules from the active
profiles, override and abstract pairing, and a few always-alive kinds keep
declarations alive that no source file mentions by name.

Resolution order for one declaration (first hit wins):

1. enum constants, program entry points and generated data-class members;
2. the name is referenced anywhere in the analyzed files;
3. the enclosing class matches an entrypoint (one level of cascade);
4. the declaration itself matches an entrypoint;
5. overrides: another declaration has the same name, or external
   overrides are trusted;
6. abstract declarations with a concrete namesake;
7. concrete declarations with an abstract namesake.

Anything left is reported.
"""

from __future__ import annotations

import logging
import os
from collections import Counter
from pathlib import Path

from langtools.analysis.declarations import (
    TOP_LEVEL,
    Declaration,
    DeclarationCategory,
    Visibility,
    collect_file_declarations,
)
from langtools.analysis.findings import Finding, sort_findings
from langtools.analysis.scope import collect_references
from langtools.index.discovery import resolve_file_paths
from langtools.index.parser import LANGUAGE_EXTENSIONS, SourceParser, read_source
from langtools.languages.registry import get_language_spec
from langtools.rules.conditions import ResolvedRules, matches_any_entrypoint

log = logging.getLogger(__name__)

SERVICES_DIR = ("META-INF", "services")


# ---------------------------------------------------------------------------
# Service registry
# ---------------------------------------------------------------------------


def load_service_names(source_roots) -> frozenset[str]:
    """Simple class names listed in ``<root>/META-INF/services/*`` files."""
    names: set[str] = set()
    for root in source_roots:
        services = Path(root).joinpath(*SERVICES_DIR)
        if not services.is_dir():
            continue
        for entry in sorted(services.iterdir()):
            if not entry.is_file():
                continue
            try:
                content = entry.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                log.warning("Skipping service registry entry %s: %s", entry, exc)
                continue
            for line in content.splitlines():
                line = line.strip()
                if line and not line.startswith("#"):
                    names.add(line.rsplit(".", 1)[-1])
    return frozenset(names)


# ---------------------------------------------------------------------------
# Findings
# ---------------------------------------------------------------------------


def finding_category(decl: Declaration) -> str:
    if decl.category is DeclarationCategory.CLASS:
        return "unused_public_class"
    level = "protected" if decl.visibility is Visibility.PROTECTED else "public"
    return f"unused_{level}_{decl.category.value}"


def finding_message(decl: Declaration) -> str:
    scope = "top-level" if decl.enclosing_class == TOP_LEVEL else f"class {decl.enclosing_class}"
    return f"{decl.visibility.value} {decl.category.value} '{decl.name}' in {scope} appears to be unused"


def _to_finding(decl: Declaration) -> Finding:
    return Finding(
        category=finding_category(decl),
        name=decl.name,
        line=decl.line,
        column=decl.column,
        enclosing_scope=decl.enclosing_class,
        message=finding_message(decl),
    )


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class _Index:
    """Write-once aggregates over all declarations of a run."""

    def __init__(self, declarations: list[Declaration], references: set[str],
                 rules: ResolvedRules, service_names: frozenset[str]):
        self.references = references
        self.rules = rules
        self.service_names = service_names
        self.name_counts = Counter(d.name for d in declarations)
        self.abstract_counts = Counter(d.name for d in declarations if d.is_abstract)
        self.concrete_counts = Counter(d.name for d in declarations if not d.is_abstract)
        self.cascade = {
            d.name
            for d in declarations
            if d.category is DeclarationCategory.CLASS
            and matches_any_entrypoint(d, rules, service_names)
        }

    def is_alive(self, decl: Declaration) -> bool:
        if decl.is_always_alive:
            return True
        if decl.name in self.references:
            return True
        if decl.enclosing_class in self.cascade:
            return True
        if matches_any_entrypoint(decl, self.rules, self.service_names):
            return True
        if decl.is_override:
            if self.name_counts[decl.name] > 1:
                return True
            if self.rules.trust_external_overrides:
                return True
        # decl never counts toward the opposite abstract/concrete side.
        if decl.is_abstract and self.concrete_counts[decl.name] > 0:
            return True
        if not decl.is_abstract and not decl.is_override and self.abstract_counts[decl.name] > 0:
            return True
        return False


def classify(declarations: list[Declaration], references: set[str], rules: ResolvedRules,
             service_names: frozenset[str] = frozenset()) -> list[Declaration]:
    """Return the declarations that nothing keeps alive."""
    index = _Index(declarations, references, rules, service_names)
    return [d for d in declarations if not index.is_alive(d)]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def analyze_cross_file(
    file_paths,
    language: str,
    rules: ResolvedRules,
    source_roots,
    active_profiles,
    parser: SourceParser,
) -> dict:
    """Find visible declarations that nothing in *file_paths* keeps alive.

    Files that cannot be read or parsed are reported with an ``error`` and
    excluded from ``filesAnalyzed``; the rest of the run continues.
    """
    file_paths = list(dict.fromkeys(file_paths))
    spec = get_language_spec(language)
    service_names = load_service_names(source_roots) if rules.uses_service_registry else frozenset()

    declarations: list[Declaration] = []
    references: set[str] = set()
    errors: dict[str, str] = {}
    analyzed = 0

    for path in file_paths:
        source = read_source(path)
        if source is None:
            errors[path] = "Failed to read file"
            continue
        try:
            tree = parser.parse(source, language)
            if parser.has_syntax_error(tree):
                log.debug("Skipping %s: syntax error", path)
                errors[path] = "Syntax error in file"
                continue
            root = tree.root_node
            file_decls = collect_file_declarations(tree, source, path, spec)
            file_refs = collect_references(root, spec, source) | spec.implicit_used_names(root)
        except Exception as exc:
            log.warning("Reachability analysis failed for %s: %s", path, exc)
            errors[path] = str(exc) or exc.__class__.__name__
            continue
        declarations.extend(file_decls.declarations)
        references |= file_refs
        analyzed += 1

    per_file: dict[str, list[Finding]] = {path: [] for path in file_paths}
    for decl in classify(declarations, references, rules, service_names):
        per_file[decl.file].append(_to_finding(decl))

    files = []
    total = 0
    for path in file_paths:
        if path in errors:
            files.append({"file": path, "findings": [], "error": errors[path]})
            continue
        findings = sort_findings(per_file[path])
        total += len(findings)
        files.append({"file": path, "findings": [f.to_dict() for f in findings]})

    log.info(
        "Reachability: %d/%d files analyzed, %d declarations, %d findings",
        analyzed, len(file_paths), len(declarations), total,
    )
    return {
        "status": "OK",
        "sourceRoots": list(source_roots),
        "filesAnalyzed": analyzed,
        "activeProfiles": list(active_profiles),
        "totalFindings": total,
        "files": files,
    }


def analyze_paths(paths, language: str, rules: ResolvedRules, active_profiles,
                  parser: SourceParser, cwd: str | None = None) -> dict:
    """Resolve *paths* and run :func:`analyze_cross_file` over them.

    The given paths double as service-registry source roots. Paths that do
    not exist are reported first as file entries with an ``error``.
    """
    base = cwd or os.getcwd()
    resolved = resolve_file_paths(paths, LANGUAGE_EXTENSIONS[language], cwd=base)
    roots = [os.path.normpath(p if os.path.isabs(p) else os.path.join(base, p)) for p in paths]
    result = analyze_cross_file(resolved.resolved, language, rules, roots, active_profiles, parser)
    if resolved.errors:
        result["files"] = [
            {"file": e.path, "findings": [], "error": e.message} for e in resolved.errors
        ] + result["files"]
    return result
