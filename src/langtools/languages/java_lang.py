from __future__ import annotations

from langtools.analysis.declarations import (
    Declaration,
    DeclarationCategory,
    ImportEntry,
    Visibility,
)

from .base import LanguageSpec

_TYPE_DECLARATIONS = frozenset({
    "class_declaration",
    "interface_declaration",
    "enum_declaration",
    "record_declaration",
})


class JavaSpec(LanguageSpec):
    """tree-sitter-java node kinds and lookups."""

    identifier_types = frozenset({"identifier", "type_identifier"})
    method_types = frozenset({"method_declaration"})
    constructor_types = frozenset({"constructor_declaration", "compact_constructor_declaration"})
    parameter_types = frozenset({"formal_parameter", "spread_parameter"})
    class_types = _TYPE_DECLARATIONS
    class_body_types = frozenset({"class_body", "interface_body", "enum_body"})
    field_types = frozenset({"field_declaration"})
    local_types = frozenset({"local_variable_declaration"})
    body_types = frozenset({"block", "constructor_body"})
    invocation_types = frozenset({"method_invocation"})
    reference_types = frozenset({"method_reference"})
    loop_types = frozenset({"for_statement", "enhanced_for_statement"})
    loop_stop_types = frozenset({"block", "constructor_body", "lambda_expression"})
    string_types = frozenset()
    # `new Foo() { ... }` and enum constants with bodies are anonymous types.
    anonymous_owner_types = frozenset({"object_creation_expression", "enum_constant"})
    companion_types = frozenset()
    function_type_types = frozenset()
    import_types = frozenset({"import_declaration"})
    package_types = frozenset({"package_declaration"})

    @property
    def language_name(self) -> str:
        return "java"

    @property
    def file_extensions(self) -> list[str]:
        return [".java"]

    def iter_members(self, body):
        members = []
        for child in body.children:
            if child.type == "enum_body_declarations":
                members.extend(child.children)
            else:
                members.append(child)
        return members

    def _annotation_name(self, ann, source: bytes) -> str | None:
        name = ann.child_by_field_name("name")
        if name is None:
            return self.last_identifier(ann, source)
        # @java.lang.Override -> Override
        return self.node_text(name, source).rsplit(".", 1)[-1]

    def annotation_names(self, node, source: bytes) -> list[str]:
        mods = self.modifiers_node(node)
        if mods is None:
            return []
        names = []
        for child in mods.children:
            if child.type in ("marker_annotation", "annotation"):
                name = self._annotation_name(child, source)
                if name:
                    names.append(name)
        return names

    # ---- Single-file liveness hooks ----

    def has_override_marker(self, node, source: bytes) -> bool:
        return "Override" in self.annotation_names(node, source)

    def is_main_method(self, node, source: bytes) -> bool:
        if node.type != "method_declaration" or self.get_name(node, source) != "main":
            return False
        if "static" not in self.modifier_tokens(node, source):
            return False
        params = self.node_text(node.child_by_field_name("parameters"), source)
        return "String[]" in params or "String..." in params or "String []" in params

    def parameter_name(self, param, source: bytes) -> str | None:
        name = param.child_by_field_name("name")
        if name is None:
            for child in param.children:
                if child.type == "variable_declarator":
                    name = child.child_by_field_name("name")
                    break
        if name is not None:
            return self.node_text(name, source)
        return self.last_identifier(param, source)

    def call_target_name(self, invocation, source: bytes) -> str | None:
        name = invocation.child_by_field_name("name")
        return self.node_text(name, source) if name is not None else None

    def is_serialization_sentinel(self, name: str) -> bool:
        return name == "serialVersionUID"

    def field_name_nodes(self, field_node) -> list:
        pairs = []
        for child in field_node.children:
            if child.type == "variable_declarator":
                name = child.child_by_field_name("name")
                if name is not None:
                    pairs.append((child, name))
        return pairs

    def definition_name_nodes(self, root) -> list:
        kinds = _TYPE_DECLARATIONS | {
            "method_declaration",
            "constructor_declaration",
            "annotation_type_declaration",
            "variable_declarator",
            "enum_constant",
        }
        names = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type in kinds:
                name = node.child_by_field_name("name")
                if name is not None:
                    names.append(name)
            stack.extend(node.children)
        return names

    # ---- Cross-file hooks ----

    def visibility(self, node, source: bytes) -> Visibility | None:
        """Public or protected; None for private and package-private."""
        tokens = self.modifier_tokens(node, source)
        if "private" in tokens:
            return None
        if "public" in tokens:
            return Visibility.PUBLIC
        if "protected" in tokens:
            return Visibility.PROTECTED
        return None

    def supertypes(self, class_node, source: bytes) -> list[str]:
        names = []
        for child in class_node.children:
            if child.type in ("superclass", "super_interfaces", "extends_interfaces"):
                stack = [child]
                while stack:
                    cur = stack.pop()
                    if cur.type == "type_arguments":
                        continue
                    if cur.type == "type_identifier":
                        names.append(self.node_text(cur, source))
                        continue
                    stack.extend(reversed(cur.children))
        return names

    def extract_package(self, root, source: bytes) -> str:
        for child in root.children:
            if child.type == "package_declaration":
                for sub in child.children:
                    if sub.type in ("scoped_identifier", "identifier"):
                        return self.node_text(sub, source)
        return ""

    def extract_imports(self, root, source: bytes) -> list[ImportEntry]:
        entries = []
        for child in root.children:
            if child.type != "import_declaration":
                continue
            text = self.node_text(child, source)
            is_static = any(c.type == "static" for c in child.children) or text.split()[1:2] == ["static"]
            body = text.strip()
            body = body[len("import"):].strip()
            if is_static:
                body = body[len("static"):].strip()
            path = body.rstrip(";").strip().replace(" ", "")
            is_wildcard = path.endswith(".*")
            symbol = None if is_wildcard else path.rsplit(".", 1)[-1]
            entries.append(ImportEntry(
                path=path,
                symbol=symbol,
                is_wildcard=is_wildcard,
                is_static=is_static,
                start_byte=child.start_byte,
                end_byte=child.end_byte,
                text=text,
            ))
        return entries

    def collect_declarations(
        self, root, source: bytes, file_path: str, package: str, imports: list[str]
    ) -> list[Declaration]:
        decls: list[Declaration] = []
        for child in root.children:
            if child.type in _TYPE_DECLARATIONS:
                self._collect_class(child, source, file_path, package, imports, decls)
        return decls

    def _collect_class(self, class_node, source, file_path, package, imports, decls):
        class_name = self.get_name(class_node, source)
        if not class_name:
            return
        supertypes = self.supertypes(class_node, source)
        common = dict(file_path=file_path, package=package, imports=imports)

        vis = self.visibility(class_node, source)
        if vis is not None:
            decls.append(self._make_declaration(
                class_name, DeclarationCategory.CLASS, vis, class_node,
                enclosing_class=class_name,
                is_abstract="abstract" in self.modifier_tokens(class_node, source),
                annotation_names=self.annotation_names(class_node, source),
                supertypes=supertypes,
                **common,
            ))

        # Interface members are implicit contracts; only class and enum bodies are walked.
        body = self.class_body(class_node)
        if body is None or body.type == "interface_body":
            if body is not None:
                for member in body.children:
                    if member.type in _TYPE_DECLARATIONS:
                        self._collect_class(member, source, file_path, package, imports, decls)
            return
        is_enum = class_node.type == "enum_declaration"

        for member in self.iter_members(body):
            if member.type in _TYPE_DECLARATIONS:
                self._collect_class(member, source, file_path, package, imports, decls)
            elif member.type == "enum_constant":
                name = self.get_name(member, source)
                if name:
                    decls.append(self._make_declaration(
                        name, DeclarationCategory.FIELD, Visibility.PUBLIC, member,
                        enclosing_class=class_name, is_enum_constant=True,
                        supertypes=supertypes, **common,
                    ))
            elif member.type == "method_declaration":
                vis = self.visibility(member, source)
                name = self.get_name(member, source)
                if vis is None or not name:
                    continue
                decls.append(self._make_declaration(
                    name, DeclarationCategory.METHOD, vis, member,
                    enclosing_class=class_name,
                    is_abstract="abstract" in self.modifier_tokens(member, source),
                    is_override=self.has_override_marker(member, source),
                    is_main=self.is_main_method(member, source),
                    annotation_names=self.annotation_names(member, source),
                    supertypes=supertypes,
                    **common,
                ))
            elif member.type == "field_declaration":
                vis = self.visibility(member, source)
                if vis is None:
                    continue
                annotations = self.annotation_names(member, source)
                for declarator, name_node in self.field_name_nodes(member):
                    decls.append(self._make_declaration(
                        self.node_text(name_node, source), DeclarationCategory.FIELD, vis, declarator,
                        enclosing_class=class_name,
                        is_enum_constant=is_enum,
                        annotation_names=annotations,
                        supertypes=supertypes,
                        **common,
                    ))
