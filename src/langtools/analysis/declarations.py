"""Declaration model for cross-file reachability.

One :class:`Declaration` is materialized per visible (non-private) class,
method or field. Private symbols never reach this layer; they are the
single-file analyzer's business.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

TOP_LEVEL = "<top-level>"


class DeclarationCategory(str, enum.Enum):
    CLASS = "class"
    METHOD = "method"
    FIELD = "field"


class Visibility(str, enum.Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ImportEntry:
    """One import statement.

    ``path`` is the fully-qualified import with any alias removed; wildcard
    imports keep their trailing ``.*``. ``symbol`` is the name the import
    brings into scope (the alias when one is given, None for wildcards).
    """

    path: str
    symbol: str | None
    is_wildcard: bool = False
    is_static: bool = False
    start_byte: int = 0
    end_byte: int = 0
    text: str = ""


@dataclass
class Declaration:
    name: str
    category: DeclarationCategory
    visibility: Visibility
    enclosing_class: str
    file: str
    line: int
    column: int
    is_abstract: bool = False
    is_override: bool = False
    is_main_entrypoint: bool = False
    is_enum_constant: bool = False
    is_generated_data_member: bool = False
    annotation_names: list[str] = field(default_factory=list)
    supertypes: list[str] = field(default_factory=list)
    file_package: str = ""
    file_imports: list[str] = field(default_factory=list)
    # Backing tree node, valid for the lifetime of the run only.
    node: object = field(default=None, repr=False, compare=False)

    @property
    def is_always_alive(self) -> bool:
        return self.is_enum_constant or self.is_main_entrypoint or self.is_generated_data_member


@dataclass
class FileDeclarations:
    file: str
    package: str
    imports: list[str]
    declarations: list[Declaration]


def collect_file_declarations(tree, source: bytes, file_path: str, spec) -> FileDeclarations:
    """Run the language's declaration walk over one parsed file."""
    root = tree.root_node
    package = spec.extract_package(root, source)
    imports = [imp.path for imp in spec.extract_imports(root, source) if not imp.is_static]
    decls = spec.collect_declarations(root, source, file_path, package, imports)
    log.debug("%s: %d declarations (package %r)", file_path, len(decls), package)
    return FileDeclarations(file=file_path, package=package, imports=imports, declarations=decls)
