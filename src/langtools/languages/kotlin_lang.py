from __future__ import annotations

import re

from langtools.analysis.declarations import (
    TOP_LEVEL,
    Declaration,
    DeclarationCategory,
    ImportEntry,
    Visibility,
)

from .base import LanguageSpec

# Kotlin grammar builds disagree on identifier node names; accept all of them.
_IDENTIFIERS = frozenset({"simple_identifier", "identifier", "type_identifier", "interpolated_identifier"})

_CLASS_LIKE = frozenset({"class_declaration", "object_declaration"})

_ALIAS_RE = re.compile(r"^(.+?)\s+as\s+(\w+)$")

_DATA_CLASS_MEMBERS = frozenset({"copy", "equals", "hashCode", "toString"})
_COMPONENT_RE = re.compile(r"^component\d+$")

# Syntax -> operator-convention functions it calls implicitly.
_OPERATOR_NODES: dict[str, tuple[str, ...]] = {
    "property_delegate": ("getValue", "setValue", "provideDelegate"),
    "for_statement": ("iterator", "hasNext", "next"),
    "indexing_expression": ("get", "set"),
    "index_expression": ("get", "set"),
    "additive_expression": ("plus", "minus"),
    "multiplicative_expression": ("times", "div", "rem"),
    "comparison_expression": ("compareTo",),
    "binary_expression": ("plus", "minus", "times", "div", "rem", "compareTo"),
    "range_expression": ("rangeTo",),
    "check_expression": ("contains",),
    "in_expression": ("contains",),
    "prefix_expression": ("unaryPlus", "unaryMinus", "not", "inc", "dec"),
    "postfix_expression": ("inc", "dec"),
    "unary_expression": ("unaryPlus", "unaryMinus", "not", "inc", "dec"),
}


def is_data_class_member(name: str) -> bool:
    return name in _DATA_CLASS_MEMBERS or bool(_COMPONENT_RE.match(name))


class KotlinSpec(LanguageSpec):
    """tree-sitter-kotlin node kinds and lookups."""

    identifier_types = _IDENTIFIERS
    method_types = frozenset({"function_declaration"})
    constructor_types = frozenset({"secondary_constructor"})
    parameter_types = frozenset({"parameter", "class_parameter"})
    class_types = frozenset({"class_declaration", "object_declaration", "companion_object"})
    class_body_types = frozenset({"class_body", "enum_class_body"})
    field_types = frozenset({"property_declaration"})
    local_types = frozenset({"property_declaration"})
    body_types = frozenset({"function_body", "block", "statements"})
    invocation_types = frozenset({"call_expression", "infix_expression"})
    # `this::helper` parses as a navigation suffix, not a callable_reference.
    reference_types = frozenset({"callable_reference", "navigation_suffix"})
    loop_types = frozenset({"for_statement"})
    loop_stop_types = frozenset({
        "block", "statements", "function_body", "control_structure_body", "lambda_literal",
    })
    string_types = frozenset({
        "string_literal", "line_string_literal",
        "multiline_string_literal", "multi_line_string_literal",
    })
    anonymous_owner_types = frozenset({"object_literal"})
    companion_types = frozenset({"companion_object"})
    function_type_types = frozenset({"function_type", "anonymous_function"})
    import_types = frozenset({"import_header", "import"})
    package_types = frozenset({"package_header"})

    template_pattern = re.compile(r"\$(?:([A-Za-z_]\w*)|\{([^}]*)\})")

    @property
    def language_name(self) -> str:
        return "kotlin"

    @property
    def file_extensions(self) -> list[str]:
        return [".kt", ".kts"]

    def find_name_node(self, node):
        if node.type == "property_declaration":
            for child in node.children:
                if child.type == "variable_declaration":
                    for sub in child.children:
                        if sub.type in self.identifier_types:
                            return sub
        return super().find_name_node(node)

    def scope_label(self, class_node, source: bytes) -> str | None:
        if class_node.type in self.companion_types:
            owner = class_node.parent
            while owner is not None and owner.type not in _CLASS_LIKE:
                owner = owner.parent
            owner_name = self.get_name(owner, source) if owner is not None else None
            return f"{owner_name or '<unknown>'}.Companion"
        return self.get_name(class_node, source)

    def annotation_names(self, node, source: bytes) -> list[str]:
        mods = self.modifiers_node(node)
        if mods is None:
            return []
        names = []
        for child in mods.children:
            if child.type != "annotation":
                continue
            user_type = _first_descendant(child, "user_type")
            target = user_type if user_type is not None else child
            name = None
            for sub in target.children:
                if sub.type in self.identifier_types:
                    name = self.node_text(sub, source)
            if name is None:
                name = self.last_identifier(target, source)
            if name:
                names.append(name)
        return names

    def _binding_kind(self, param, source: bytes) -> str | None:
        for child in param.children:
            if child.type == "binding_pattern_kind" or child.type in ("val", "var"):
                return self.node_text(child, source).strip()
        return None

    # ---- Single-file liveness hooks ----

    def has_override_marker(self, node, source: bytes) -> bool:
        return "override" in self.modifier_tokens(node, source)

    def is_main_method(self, node, source: bytes) -> bool:
        return (
            node.type == "function_declaration"
            and node.parent is not None
            and node.parent.type == "source_file"
            and self.get_name(node, source) == "main"
        )

    def parameter_name(self, param, source: bytes) -> str | None:
        for child in param.children:
            if child.type in self.identifier_types:
                return self.node_text(child, source)
        return None

    def call_target_name(self, invocation, source: bytes) -> str | None:
        if invocation.type == "infix_expression":
            # `a helper b` calls `helper`
            named = invocation.named_children
            if len(named) == 3 and named[1].type in self.identifier_types:
                return self.node_text(named[1], source)
            return None
        callee = invocation.named_children[0] if invocation.named_children else None
        if callee is None:
            return None
        if callee.type in self.identifier_types:
            return self.node_text(callee, source)
        if callee.type == "navigation_expression":
            last = callee.named_children[-1] if callee.named_children else None
            if last is None:
                return None
            if last.type in self.identifier_types:
                return self.node_text(last, source)
            return self.last_identifier(last, source)
        return None

    def reference_target_name(self, reference, source: bytes) -> str | None:
        if reference.type == "navigation_suffix":
            first = reference.children[0] if reference.children else None
            if first is None or first.type != "::":
                return None
        return self.last_identifier(reference, source)

    def parameter_use_roots(self, method) -> list:
        roots = []
        for child in method.children:
            if child.type == "constructor_delegation_call":
                roots.append(child)
            elif child.type == "function_value_parameters":
                # default values: `b: Int = a`
                roots.extend(
                    c for c in child.named_children
                    if c.type not in self.parameter_types and c.type != "parameter_modifiers"
                )
        return roots

    def is_data_class(self, class_node, source: bytes) -> bool:
        return "data" in self.modifier_tokens(class_node, source)

    def is_delegated_property(self, node) -> bool:
        return any(child.type == "property_delegate" for child in node.children)

    def definition_name_nodes(self, root) -> list:
        named_kinds = {
            "function_declaration",
            "class_declaration",
            "object_declaration",
            "companion_object",
            "enum_entry",
            "property_declaration",
        }
        names = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type in named_kinds:
                name = self.find_name_node(node)
                if name is not None:
                    names.append(name)
            elif node.type == "variable_declaration":
                for child in node.children:
                    if child.type in self.identifier_types:
                        names.append(child)
                        break
            elif node.type == "class_parameter":
                if any(c.type == "binding_pattern_kind" or c.type in ("val", "var") for c in node.children):
                    name = self.find_name_node(node)
                    if name is not None:
                        names.append(name)
            stack.extend(node.children)
        return names

    def implicit_used_names(self, root) -> set[str]:
        used: set[str] = set()
        stack = [root]
        while stack:
            node = stack.pop()
            ops = _OPERATOR_NODES.get(node.type)
            if ops:
                used.update(ops)
            if node.type == "multi_variable_declaration":
                count = sum(1 for c in node.children if c.type == "variable_declaration")
                used.update(f"component{i}" for i in range(1, count + 1))
            stack.extend(node.children)
        return used

    # ---- Cross-file hooks ----

    def visibility(self, node, source: bytes) -> Visibility | None:
        tokens = self.modifier_tokens(node, source)
        if "private" in tokens:
            return None
        if "protected" in tokens:
            return Visibility.PROTECTED
        if "internal" in tokens:
            return Visibility.INTERNAL
        return Visibility.PUBLIC

    def supertypes(self, class_node, source: bytes) -> list[str]:
        specs = []
        for child in class_node.children:
            if child.type == "delegation_specifier":
                specs.append(child)
            elif child.type == "delegation_specifiers":
                specs.extend(c for c in child.children if c.type == "delegation_specifier")
        names = []
        for spec in specs:
            user_type = _first_descendant(spec, "user_type")
            if user_type is None:
                continue
            name = None
            for sub in user_type.children:
                if sub.type in self.identifier_types:
                    name = self.node_text(sub, source)
            if name:
                names.append(name)
        return names

    def extract_package(self, root, source: bytes) -> str:
        for child in root.children:
            if child.type in self.package_types:
                text = self.node_text(child, source).strip()
                text = text[len("package"):].strip()
                return text.splitlines()[0].rstrip(";").strip() if text else ""
        return ""

    def _import_nodes(self, root):
        for child in root.children:
            if child.type == "import_list":
                for sub in child.children:
                    if sub.type in self.import_types and sub.child_count > 0:
                        yield sub
            elif child.type in self.import_types and child.child_count > 0:
                yield child

    def extract_imports(self, root, source: bytes) -> list[ImportEntry]:
        entries = []
        for node in self._import_nodes(root):
            raw = source[node.start_byte : node.end_byte]
            newline = raw.find(b"\n")
            if newline != -1:
                raw = raw[:newline]
            text = raw.decode("utf-8", errors="replace").rstrip("\r")
            body = text.strip()[len("import"):].strip().rstrip(";").strip()
            alias = None
            match = _ALIAS_RE.match(body)
            if match:
                body, alias = match.group(1).strip(), match.group(2)
            path = body.replace(" ", "")
            is_wildcard = path.endswith(".*")
            if is_wildcard:
                symbol = None
            else:
                symbol = alias or path.rsplit(".", 1)[-1]
            entries.append(ImportEntry(
                path=path,
                symbol=symbol,
                is_wildcard=is_wildcard,
                start_byte=node.start_byte,
                end_byte=node.start_byte + len(raw),
                text=text,
            ))
        return entries

    def collect_declarations(
        self, root, source: bytes, file_path: str, package: str, imports: list[str]
    ) -> list[Declaration]:
        decls: list[Declaration] = []
        common = dict(file_path=file_path, package=package, imports=imports)
        for child in root.children:
            if child.type in _CLASS_LIKE:
                self._collect_class(child, source, common, decls)
            elif child.type == "function_declaration":
                vis = self.visibility(child, source)
                name = self.get_name(child, source)
                if vis is None or not name:
                    continue
                decls.append(self._make_declaration(
                    name, DeclarationCategory.METHOD, vis, child,
                    enclosing_class=TOP_LEVEL,
                    # Any top-level `fun main` is a program entry, whatever its parameters.
                    is_main=name == "main",
                    annotation_names=self.annotation_names(child, source),
                    **common,
                ))
            elif child.type == "property_declaration":
                vis = self.visibility(child, source)
                name = self.get_name(child, source)
                if vis is None or not name:
                    continue
                decls.append(self._make_declaration(
                    name, DeclarationCategory.FIELD, vis, child,
                    enclosing_class=TOP_LEVEL,
                    annotation_names=self.annotation_names(child, source),
                    **common,
                ))
        return decls

    def _is_interface(self, class_node) -> bool:
        return any(not c.is_named and c.type == "interface" for c in class_node.children)

    def _collect_class(self, class_node, source, common, decls):
        class_name = self.get_name(class_node, source)
        if not class_name:
            return
        supertypes = self.supertypes(class_node, source)
        is_data = self.is_data_class(class_node, source)
        is_interface = self._is_interface(class_node)

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

        for ctor in class_node.children:
            if ctor.type != "primary_constructor":
                continue
            for param in _descendants(ctor, "class_parameter"):
                if self._binding_kind(param, source) not in ("val", "var"):
                    continue
                name = self.get_name(param, source)
                pvis = self.visibility(param, source)
                if not name or pvis is None:
                    continue
                decls.append(self._make_declaration(
                    name, DeclarationCategory.FIELD, pvis, param,
                    enclosing_class=class_name,
                    is_override=self.has_override_marker(param, source),
                    is_generated_data_member=is_data and is_data_class_member(name),
                    annotation_names=self.annotation_names(param, source),
                    supertypes=supertypes,
                    **common,
                ))

        body = self.class_body(class_node)
        if body is None:
            return
        for member in body.children:
            if member.type in _CLASS_LIKE:
                self._collect_class(member, source, common, decls)
            elif member.type in self.companion_types:
                companion_body = self.class_body(member)
                if companion_body is not None:
                    # Companion members are reached through the owning class name.
                    self._collect_members(
                        companion_body, class_name, supertypes, False, False, source, common, decls,
                    )
            elif member.type == "enum_entry":
                name = self.get_name(member, source)
                if name:
                    decls.append(self._make_declaration(
                        name, DeclarationCategory.FIELD, Visibility.PUBLIC, member,
                        enclosing_class=class_name, is_enum_constant=True,
                        supertypes=supertypes, **common,
                    ))
        self._collect_members(body, class_name, supertypes, is_data, is_interface, source, common, decls)

    def _collect_members(self, body, class_name, supertypes, is_data, is_interface, source, common, decls):
        for member in body.children:
            if member.type == "function_declaration":
                category = DeclarationCategory.METHOD
            elif member.type == "property_declaration":
                category = DeclarationCategory.FIELD
            else:
                continue
            vis = self.visibility(member, source)
            name = self.get_name(member, source)
            if vis is None or not name:
                continue
            is_abstract = "abstract" in self.modifier_tokens(member, source)
            if is_interface and category is DeclarationCategory.METHOD and self.get_body(member) is None:
                is_abstract = True
            decls.append(self._make_declaration(
                name, category, vis, member,
                enclosing_class=class_name,
                is_abstract=is_abstract,
                is_override=self.has_override_marker(member, source),
                is_generated_data_member=is_data and is_data_class_member(name),
                annotation_names=self.annotation_names(member, source),
                supertypes=supertypes,
                **common,
            ))


def _first_descendant(node, node_type: str):
    stack = list(reversed(node.children))
    while stack:
        cur = stack.pop()
        if cur.type == node_type:
            return cur
        stack.extend(reversed(cur.children))
    return None


def _descendants(node, node_type: str) -> list:
    found = []
    stack = list(reversed(node.children))
    while stack:
        cur = stack.pop()
        if cur.type == node_type:
            found.append(cur)
            continue
        stack.extend(reversed(cur.children))
    return found
