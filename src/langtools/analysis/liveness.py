"""Single-file liveness detectors (Layer A).

Four detectors run over one parsed file:

* unused parameters of methods and constructors that have a body;
* unused local variables inside a method body;
* unused private fields, scoped to their own class;
* private methods that are never called from their own class.

Matching is by simple name. Two overloads sharing a name are both kept
alive by a call to either one, which errs toward not flagging.
"""

from __future__ import annotations

import logging

from langtools.analysis.findings import FileReport, Finding, sort_findings
from langtools.analysis.scope import (
    collect_identifiers,
    collect_references,
    collect_scoped_identifiers,
    is_in_class_scope,
    is_inside_function_type,
    iter_descendants,
    same_node,
    scope_search_root,
)
from langtools.index.discovery import resolve_file_paths
from langtools.index.parser import LANGUAGE_EXTENSIONS, SourceParser, detect_language, read_source
from langtools.languages.base import LanguageSpec
from langtools.languages.registry import get_language_spec

log = logging.getLogger(__name__)

UNKNOWN_SCOPE = "<unknown>"

CATEGORY_PARAMETER = "unused_parameter"
CATEGORY_LOCAL = "unused_local_variable"
CATEGORY_FIELD = "unused_field"
CATEGORY_PRIVATE_METHOD = "unused_private_method"

IGNORED_PARAMETER = "_"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _enclosing_class(node, spec: LanguageSpec):
    cur = node.parent
    while cur is not None:
        if cur.type in spec.class_types:
            return cur
        cur = cur.parent
    return None


def _enclosing_class_label(node, spec: LanguageSpec, source: bytes) -> str:
    cls = _enclosing_class(node, spec)
    if cls is None:
        return UNKNOWN_SCOPE
    return spec.scope_label(cls, source) or UNKNOWN_SCOPE


def _method_name(method, spec: LanguageSpec, source: bytes) -> str:
    if method.type in spec.constructor_types:
        cls = _enclosing_class(method, spec)
        name = spec.get_name(cls, source) if cls is not None else None
        return name or "<init>"
    return spec.get_name(method, source) or UNKNOWN_SCOPE


def _method_label(method, spec: LanguageSpec, source: bytes) -> tuple[str, str]:
    """(method name, ``Class.method`` scope label)."""
    name = _method_name(method, spec, source)
    return name, f"{_enclosing_class_label(method, spec, source)}.{name}"


def _enclosing_function(node, spec: LanguageSpec):
    """Nearest method or constructor containing *node*, or None.

    Anonymous class bodies are crossed; a named class body ends the search,
    since a declaration there is a member and not a local.
    """
    callables = spec.method_types | spec.constructor_types
    cur = node.parent
    while cur is not None:
        if cur.type in callables:
            return cur
        if cur.type in spec.class_body_types:
            owner = cur.parent
            if owner is None or owner.type not in spec.anonymous_owner_types:
                return None
        cur = cur.parent
    return None


def _is_loop_variable(node, spec: LanguageSpec) -> bool:
    cur = node.parent
    while cur is not None:
        if cur.type in spec.loop_types:
            return True
        if cur.type in spec.loop_stop_types:
            return False
        cur = cur.parent
    return False


def _parameters(method, body, spec: LanguageSpec) -> list:
    params = []
    for child in method.children:
        if same_node(child, body):
            continue
        for node in iter_descendants(child):
            if node.type in spec.parameter_types and not is_inside_function_type(node, method, spec):
                params.append(node)
    return params


def _position(node) -> tuple[int, int]:
    return node.start_point[0] + 1, node.start_point[1]


# ---------------------------------------------------------------------------
# Detectors
# ---------------------------------------------------------------------------


def detect_unused_parameters(root, source: bytes, spec: LanguageSpec) -> list[Finding]:
    findings = []
    callables = spec.method_types | spec.constructor_types
    for method in iter_descendants(root):
        if method.type not in callables:
            continue
        body = spec.get_body(method)
        if body is None:
            continue
        if spec.has_override_marker(method, source) or spec.is_main_method(method, source):
            continue
        params = _parameters(method, body, spec)
        if not params:
            continue
        used = collect_references(body, spec, source)
        for extra in spec.parameter_use_roots(method):
            used |= collect_references(extra, spec, source)
        method_name, label = _method_label(method, spec, source)
        for param in params:
            name = spec.parameter_name(param, source)
            if not name or name == IGNORED_PARAMETER or name in used:
                continue
            line, column = _position(param)
            findings.append(Finding(
                category=CATEGORY_PARAMETER,
                name=name,
                line=line,
                column=column,
                enclosing_scope=label,
                message=f"Parameter '{name}' is never used in method '{method_name}'",
            ))
    return findings


def detect_unused_locals(root, source: bytes, spec: LanguageSpec) -> list[Finding]:
    findings = []
    for node in iter_descendants(root):
        if node.type not in spec.local_types:
            continue
        method = _enclosing_function(node, spec)
        if method is None:
            continue
        if _is_loop_variable(node, spec):
            continue
        # `override val` inside an object literal implements a contract.
        if spec.has_override_marker(node, source):
            continue
        body = spec.get_body(method)
        if body is None:
            continue
        method_name, label = _method_label(method, spec, source)
        for declarator, name_node in spec.local_name_nodes(node):
            name = spec.node_text(name_node, source)
            if not name or name == IGNORED_PARAMETER:
                continue
            if name in collect_identifiers(body, spec, source, exclude=declarator):
                continue
            line, column = _position(name_node)
            findings.append(Finding(
                category=CATEGORY_LOCAL,
                name=name,
                line=line,
                column=column,
                enclosing_scope=label,
                message=f"Local variable '{name}' is never used in method '{method_name}'",
            ))
    return findings


def detect_unused_fields(root, source: bytes, spec: LanguageSpec) -> list[Finding]:
    findings = []
    for cls in iter_descendants(root):
        if cls.type not in spec.class_types:
            continue
        # Data class properties feed generated equals/hashCode/copy.
        if spec.is_data_class(cls, source):
            continue
        body = spec.class_body(cls)
        if body is None:
            continue
        label = spec.scope_label(cls, source) or UNKNOWN_SCOPE
        for member in spec.iter_members(body):
            if member.type not in spec.field_types or not spec.is_private(member, source):
                continue
            if spec.has_override_marker(member, source) or spec.is_delegated_property(member):
                continue
            for declarator, name_node in spec.field_name_nodes(member):
                name = spec.node_text(name_node, source)
                if not name or spec.is_serialization_sentinel(name):
                    continue
                if name in collect_scoped_identifiers(body, spec, source, exclude=declarator):
                    continue
                line, column = _position(name_node)
                findings.append(Finding(
                    category=CATEGORY_FIELD,
                    name=name,
                    line=line,
                    column=column,
                    enclosing_scope=label,
                    message=f"Private field '{name}' is never used in class '{label}'",
                ))
    return findings


def _called_names(body, spec: LanguageSpec, source: bytes) -> set[str]:
    """Callee and callable-reference names that belong to *body*'s class scope."""
    names: set[str] = set()
    for node in iter_descendants(scope_search_root(body, spec)):
        if node.type in spec.invocation_types:
            name = spec.call_target_name(node, source)
        elif node.type in spec.reference_types:
            name = spec.reference_target_name(node, source)
        else:
            continue
        if name and is_in_class_scope(node, body, spec):
            names.add(name)
    return names


def detect_unused_private_methods(root, source: bytes, spec: LanguageSpec) -> list[Finding]:
    findings = []
    for cls in iter_descendants(root):
        if cls.type not in spec.class_types:
            continue
        body = spec.class_body(cls)
        if body is None:
            continue
        private_methods = [
            member
            for member in spec.iter_members(body)
            if member.type in spec.method_types and spec.is_private(member, source)
        ]
        if not private_methods:
            continue
        called = _called_names(body, spec, source)
        label = spec.scope_label(cls, source) or UNKNOWN_SCOPE
        for method in private_methods:
            name = spec.get_name(method, source)
            if not name or name in called:
                continue
            name_node = spec.find_name_node(method)
            line, column = _position(name_node if name_node is not None else method)
            findings.append(Finding(
                category=CATEGORY_PRIVATE_METHOD,
                name=name,
                line=line,
                column=column,
                enclosing_scope=label,
                message=f"Private method '{name}' is never called in class '{label}'",
            ))
    return findings


def detect_dead_code(root, source: bytes, spec: LanguageSpec) -> list[Finding]:
    """Run all four detectors over one tree."""
    findings = []
    findings.extend(detect_unused_parameters(root, source, spec))
    findings.extend(detect_unused_locals(root, source, spec))
    findings.extend(detect_unused_fields(root, source, spec))
    findings.extend(detect_unused_private_methods(root, source, spec))
    return sort_findings(findings)


# ---------------------------------------------------------------------------
# File-level entry points
# ---------------------------------------------------------------------------


def analyze_single_file(path: str, language: str, parser: SourceParser) -> FileReport:
    """Analyze one file. Failures become the report's ``error``; nothing raises."""
    source = read_source(path)
    if source is None:
        return FileReport(file=path, error="Failed to read file")
    try:
        spec = get_language_spec(language)
        tree = parser.parse(source, language)
        if parser.has_syntax_error(tree):
            log.debug("Skipping %s: syntax error", path)
            return FileReport(file=path, error="Syntax error in file")
        findings = detect_dead_code(tree.root_node, source, spec)
    except Exception as exc:
        log.warning("Dead-code analysis failed for %s: %s", path, exc)
        return FileReport(file=path, error=str(exc) or exc.__class__.__name__)
    log.debug("%s: %d findings", path, len(findings))
    return FileReport(file=path, findings=findings)


def analyze_files(paths, language: str, parser: SourceParser, cwd: str | None = None) -> dict:
    """Run Layer A over files and directories.

    *language* may be ``"auto"`` to pick the language per file. Files with
    neither findings nor an error are left out of ``files``;
    ``filesProcessed`` still counts them.
    """
    if language == "auto":
        extensions = tuple(ext for exts in LANGUAGE_EXTENSIONS.values() for ext in exts)
    else:
        extensions = LANGUAGE_EXTENSIONS[language]
    resolved = resolve_file_paths(paths, extensions, cwd=cwd)

    files = [{"file": e.path, "findings": [], "error": e.message} for e in resolved.errors]
    total = 0
    for path in resolved.resolved:
        file_language = detect_language(path) if language == "auto" else language
        if file_language is None:
            report = FileReport(file=path, error="Unsupported file type")
        else:
            report = analyze_single_file(path, file_language, parser)
        total += len(report.findings)
        if report.findings or report.error is not None:
            files.append(report.to_dict())

    log.info("Dead-code scan: %d files, %d findings", len(resolved.resolved), total)
    return {
        "status": "OK",
        "filesProcessed": len(resolved.resolved),
        "totalFindings": total,
        "files": files,
    }
