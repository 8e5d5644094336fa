"""Identifier collection and class-scope boundaries.

Both analysis layers answer "is this name referenced?" with the helpers
here. Layer A asks it inside one class or method; Layer B asks it over
whole files.

Nodes are compared structurally through :func:`node_key`. tree-sitter
hands out a fresh wrapper object on every traversal, so ``is`` and ``==``
on nodes say nothing about whether two values are the same node.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterator

from langtools.languages.base import LanguageSpec

# Owners of class bodies that capture the enclosing scope like a closure.
ANONYMOUS_OWNER_TYPES = frozenset({"object_literal", "object_creation_expression", "enum_constant"})


def node_key(node) -> tuple[int, int, str]:
    return (node.start_byte, node.end_byte, node.type)


def same_node(a, b) -> bool:
    if a is None or b is None:
        return False
    return node_key(a) == node_key(b)


def iter_descendants(node) -> Iterator:
    """Pre-order walk of *node* and everything below it."""
    stack = [node]
    while stack:
        cur = stack.pop()
        yield cur
        stack.extend(reversed(cur.children))


# ---------------------------------------------------------------------------
# Scope boundaries
# ---------------------------------------------------------------------------


class ScopeBoundary(enum.Enum):
    OPAQUE = "opaque"
    TRANSPARENT_CONTINUE = "transparent_continue"
    TRANSPARENT_STOP = "transparent_stop"


def classify_boundary(
    node_kind: str,
    parent_kind: str | None,
    target_is_companion_of_node: bool = False,
    node_is_companion_of_target: bool = False,
    anonymous_owner_types: frozenset[str] = ANONYMOUS_OWNER_TYPES,
) -> ScopeBoundary:
    """Classify a class body met while walking up toward a target scope.

    *node_kind* is the class body's kind and *parent_kind* the kind of the
    construct owning it. ``TRANSPARENT_STOP`` means the walk has reached
    the class that owns the target companion, which counts as inside.
    """
    if target_is_companion_of_node:
        return ScopeBoundary.TRANSPARENT_STOP
    if node_is_companion_of_target:
        return ScopeBoundary.TRANSPARENT_CONTINUE
    if parent_kind in anonymous_owner_types:
        return ScopeBoundary.TRANSPARENT_CONTINUE
    return ScopeBoundary.OPAQUE


def _companion_owner_body(body, spec: LanguageSpec):
    """Body of the class that owns *body*'s companion, or None."""
    owner = body.parent
    if owner is None or owner.type not in spec.companion_types:
        return None
    parent = owner.parent
    if parent is not None and parent.type in spec.class_body_types:
        return parent
    return None


def is_in_class_scope(node, target_body, spec: LanguageSpec) -> bool:
    """True when *node* belongs to the class whose body is *target_body*."""
    target_owner_body = _companion_owner_body(target_body, spec)
    cur = node.parent
    while cur is not None:
        if same_node(cur, target_body):
            return True
        if cur.type in spec.class_body_types:
            owner = cur.parent
            boundary = classify_boundary(
                cur.type,
                owner.type if owner is not None else None,
                target_is_companion_of_node=same_node(target_owner_body, cur),
                node_is_companion_of_target=same_node(_companion_owner_body(cur, spec), target_body),
                anonymous_owner_types=spec.anonymous_owner_types,
            )
            if boundary is ScopeBoundary.TRANSPARENT_STOP:
                return True
            if boundary is ScopeBoundary.OPAQUE:
                return False
        cur = cur.parent
    return False


def scope_search_root(target_body, spec: LanguageSpec):
    """Subtree to scan for references to members of *target_body*.

    A companion's members are visible from its owning class, so the owner's
    body is scanned instead.
    """
    return _companion_owner_body(target_body, spec) or target_body


def is_inside_function_type(node, stop, spec: LanguageSpec) -> bool:
    """True when *node* sits in a function-type annotation below *stop*."""
    cur = node.parent
    while cur is not None and not same_node(cur, stop):
        if cur.type in spec.function_type_types:
            return True
        cur = cur.parent
    return False


# ---------------------------------------------------------------------------
# Identifier collection
# ---------------------------------------------------------------------------


def _collect_names(
    root,
    spec: LanguageSpec,
    source: bytes,
    *,
    exclude=None,
    skip_positions: set[int] | None = None,
    accept: Callable | None = None,
) -> set[str]:
    names: set[str] = set()
    exclude_key = node_key(exclude) if exclude is not None else None
    stack = [root]
    while stack:
        node = stack.pop()
        if exclude_key is not None and node_key(node) == exclude_key:
            continue
        if node.type in spec.identifier_types:
            if skip_positions and node.start_byte in skip_positions:
                continue
            if accept is None or accept(node):
                names.add(spec.node_text(node, source))
        elif node.type in spec.string_types and spec.template_pattern is not None:
            if accept is None or accept(node):
                names.update(spec.template_names(spec.node_text(node, source)))
        stack.extend(node.children)
    return names


def collect_identifiers(root, spec: LanguageSpec, source: bytes, exclude=None) -> set[str]:
    """Every identifier under *root*, plus string-template names.

    The subtree *exclude* (usually the declarator being checked) is skipped.
    """
    return _collect_names(root, spec, source, exclude=exclude)


def definition_positions(root, spec: LanguageSpec) -> set[int]:
    return {name.start_byte for name in spec.definition_name_nodes(root)}


def collect_references(root, spec: LanguageSpec, source: bytes) -> set[str]:
    """Identifiers under *root* that are not a declaration's own name."""
    return _collect_names(root, spec, source, skip_positions=definition_positions(root, spec))


def collect_scoped_identifiers(target_body, spec: LanguageSpec, source: bytes, exclude=None) -> set[str]:
    """Identifiers that belong to the class scope of *target_body*.

    Separately named nested classes are opaque; anonymous bodies and
    companions are transparent.
    """
    search_root = scope_search_root(target_body, spec)
    return _collect_names(
        search_root,
        spec,
        source,
        exclude=exclude,
        accept=lambda node: is_in_class_scope(node, target_body, spec),
    )
