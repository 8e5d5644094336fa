"""Language-spec registry."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from langtools.index.parser import SUPPORTED_LANGUAGES

if TYPE_CHECKING:
    from .base import LanguageSpec


@lru_cache(maxsize=None)
def _create_spec(language: str) -> "LanguageSpec":
    """Create and cache a spec instance for a language.

    Specs hold no per-run state, so one instance per language is shared.
    """
    if language == "java":
        from .java_lang import JavaSpec

        return JavaSpec()
    elif language == "kotlin":
        from .kotlin_lang import KotlinSpec

        return KotlinSpec()
    raise ValueError(f"Unsupported language: {language}")


def get_language_spec(language: str) -> "LanguageSpec":
    """Get the spec instance for a language.

    Raises:
        ValueError: If the language is not supported.
    """
    if language not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language: {language}")
    return _create_spec(language)
