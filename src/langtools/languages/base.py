from __future__ import annotations

import re
from abc import ABC, abstractmethod

from langtools.analysis.declarations import (
    Declaration,
    DeclarationCategory,
    ImportEntry,
    Visibility,
)

_WORD_RE = re.compile(r"[A-Za-z_]\w*")


class LanguageSpec(ABC):
    """Per-language view of a tree-sitter grammar.

    Subclasses declare the node kinds that play each syntactic role and
    implement the few lookups that differ between grammars. Everything the
    analyzers need from a tree goes through this interface.
    """

    # Node kinds, overridden per language.
    identifier_types: frozenset[str] = frozenset()
    method_types: frozenset[str] = frozenset()
    constructor_types: frozenset[str] = frozenset()
    parameter_types: frozenset[str] = frozenset()
    class_types: frozenset[str] = frozenset()
    class_body_types: frozenset[str] = frozenset()
    field_types: frozenset[str] = frozenset()
    local_types: frozenset[str] = frozenset()
    body_types: frozenset[str] = frozenset()
    invocation_types: frozenset[str] = frozenset()
    reference_types: frozenset[str] = frozenset()
    loop_types: frozenset[str] = frozenset()
    loop_stop_types: frozenset[str] = frozenset()
    string_types: frozenset[str] = frozenset()
    anonymous_owner_types: frozenset[str] = frozenset()
    companion_types: frozenset[str] = frozenset()
    function_type_types: frozenset[str] = frozenset()
    import_types: frozenset[str] = frozenset()
    package_types: frozenset[str] = frozenset()

    # Regex for names referenced from inside string literals, or None.
    template_pattern: re.Pattern | None = None

    @property
    @abstractmethod
    def language_name(self) -> str: ...

    @property
    @abstractmethod
    def file_extensions(self) -> list[str]: ...

    # ---- Generic node helpers ----

    def node_text(self, node, source: bytes) -> str:
        if node is None:
            return ""
        return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def find_name_node(self, node):
        """The node holding a declaration's own name.

        Uses the grammar's ``name`` field when present, otherwise the first
        identifier-shaped direct child.
        """
        name = node.child_by_field_name("name")
        if name is not None:
            return name
        for child in node.children:
            if child.type in self.identifier_types:
                return child
        return None

    def get_name(self, node, source: bytes) -> str | None:
        name_node = self.find_name_node(node)
        if name_node is None:
            return None
        text = self.node_text(name_node, source).strip()
        return text or None

    def get_body(self, node):
        """Executable body of a method or constructor, or None when abstract."""
        body = node.child_by_field_name("body")
        if body is not None:
            return body
        for child in node.children:
            if child.type in self.body_types:
                return child
        return None

    def class_body(self, node):
        body = node.child_by_field_name("body")
        if body is not None and body.type in self.class_body_types:
            return body
        for child in node.children:
            if child.type in self.class_body_types:
                return child
        return None

    def iter_members(self, body):
        """Direct member nodes of a class body."""
        return list(body.children)

    def modifiers_node(self, node):
        for child in node.children:
            if child.type == "modifiers":
                return child
        return None

    def modifier_tokens(self, node, source: bytes) -> set[str]:
        """Keyword modifiers of *node*, ignoring annotations."""
        mods = self.modifiers_node(node)
        if mods is None:
            return set()
        tokens = set()
        for child in mods.children:
            if "annotation" in child.type:
                continue
            tokens.update(_WORD_RE.findall(self.node_text(child, source)))
        return tokens

    def last_identifier(self, node, source: bytes) -> str | None:
        """Text of the last identifier-shaped descendant of *node*."""
        found = None
        stack = [node]
        while stack:
            cur = stack.pop()
            if cur.type in self.identifier_types:
                if found is None or cur.start_byte > found.start_byte:
                    found = cur
                continue
            stack.extend(cur.children)
        return self.node_text(found, source) if found is not None else None

    def template_names(self, text: str) -> set[str]:
        """Names referenced by ``$name`` / ``${expr}`` placeholders in *text*."""
        if self.template_pattern is None:
            return set()
        names = set()
        for bare, braced in self.template_pattern.findall(text):
            if bare:
                names.add(bare)
            if braced:
                names.update(_WORD_RE.findall(braced))
        return names

    # ---- Single-file liveness hooks ----

    @abstractmethod
    def has_override_marker(self, node, source: bytes) -> bool: ...

    @abstractmethod
    def is_main_method(self, node, source: bytes) -> bool: ...

    @abstractmethod
    def parameter_name(self, param, source: bytes) -> str | None: ...

    @abstractmethod
    def call_target_name(self, invocation, source: bytes) -> str | None:
        """Simple name of the callee; only the trailing member for ``recv.m()``."""
        ...

    def reference_target_name(self, reference, source: bytes) -> str | None:
        return self.last_identifier(reference, source)

    def parameter_use_roots(self, method) -> list:
        """Subtrees outside the body that may still use parameters."""
        return []

    def is_private(self, node, source: bytes) -> bool:
        return "private" in self.modifier_tokens(node, source)

    def scope_label(self, class_node, source: bytes) -> str | None:
        return self.get_name(class_node, source)

    def is_data_class(self, class_node, source: bytes) -> bool:
        return False

    def is_delegated_property(self, node) -> bool:
        return False

    def is_serialization_sentinel(self, name: str) -> bool:
        return False

    def field_name_nodes(self, field_node) -> list:
        """Name nodes declared by a field declaration (one per declarator)."""
        name = self.find_name_node(field_node)
        return [(field_node, name)] if name is not None else []

    def local_name_nodes(self, local_node) -> list:
        return self.field_name_nodes(local_node)

    @abstractmethod
    def definition_name_nodes(self, root) -> list:
        """Name nodes that define a symbol (excluded from reference sets)."""
        ...

    # ---- Cross-file hooks ----

    @abstractmethod
    def extract_package(self, root, source: bytes) -> str: ...

    @abstractmethod
    def extract_imports(self, root, source: bytes) -> list[ImportEntry]: ...

    @abstractmethod
    def collect_declarations(
        self, root, source: bytes, file_path: str, package: str, imports: list[str]
    ) -> list[Declaration]: ...

    def implicit_used_names(self, root) -> set[str]:
        """Names used through syntax sugar rather than an identifier node."""
        return set()

    def _make_declaration(
        self,
        name: str,
        category: DeclarationCategory,
        visibility: Visibility,
        node,
        file_path: str,
        *,
        enclosing_class: str,
        package: str,
        imports: list[str],
        is_abstract: bool = False,
        is_override: bool = False,
        is_main: bool = False,
        is_enum_constant: bool = False,
        is_generated_data_member: bool = False,
        annotation_names: list[str] | None = None,
        supertypes: list[str] | None = None,
    ) -> Declaration:
        return Declaration(
            name=name,
            category=category,
            visibility=visibility,
            enclosing_class=enclosing_class,
            file=file_path,
            line=node.start_point[0] + 1,
            column=node.start_point[1],
            is_abstract=is_abstract,
            is_override=is_override,
            is_main_entrypoint=is_main,
            is_enum_constant=is_enum_constant,
            is_generated_data_member=is_generated_data_member,
            annotation_names=list(annotation_names or []),
            supertypes=list(supertypes or []),
            file_package=package,
            file_imports=imports,
            node=node,
        )
