"""Language detection, source reading, and the per-run tree-sitter parser handle."""

from __future__ import annotations

import logging
import os
from pathlib import Path

log = logging.getLogger(__name__)

# Single source of truth for extension -> language.
EXTENSION_MAP: dict[str, str] = {
    ".java": "java",
    ".kt": "kotlin",
    ".kts": "kotlin",
}

# Inverse view used when scanning directories for one language.
LANGUAGE_EXTENSIONS: dict[str, tuple[str, ...]] = {
    "java": (".java",),
    "kotlin": (".kt", ".kts"),
}

SUPPORTED_LANGUAGES = frozenset(LANGUAGE_EXTENSIONS)


def detect_language(path: str) -> str | None:
    """Return the language for *path* based on its extension, or None."""
    _, ext = os.path.splitext(path)
    return EXTENSION_MAP.get(ext.lower())


def read_source(path) -> bytes | None:
    """Read a source file as bytes. Returns None when it cannot be read."""
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        log.warning("Cannot read %s: %s", path, exc)
        return None


class SourceParser:
    """Parser handle owned by a single analysis run.

    Grammars are loaded lazily and cached on the instance, never at module
    level, so two runs (or two threads each with their own handle) never
    share parser state.
    """

    def __init__(self):
        self._parsers: dict[str, object] = {}

    def _parser_for(self, language: str):
        if language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language: {language}")
        parser = self._parsers.get(language)
        if parser is None:
            from tree_sitter_language_pack import get_parser

            parser = get_parser(language)
            self._parsers[language] = parser
        return parser

    def parse(self, source: bytes, language: str):
        """Parse *source* and return the tree-sitter Tree."""
        return self._parser_for(language).parse(source)

    @staticmethod
    def has_syntax_error(tree) -> bool:
        """True when the tree contains ERROR or MISSING nodes."""
        if tree is None:
            return True
        root = tree.root_node
        if root.has_error:
            return True
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "ERROR" or node.is_missing:
                return True
            stack.extend(node.children)
        return False
