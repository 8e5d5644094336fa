"""Tests for language detection, source reading, parsing and path resolution."""

from __future__ import annotations

import os

import pytest

from langtools.index.discovery import SKIP_DIRS, resolve_file_paths
from langtools.index.parser import (
    LANGUAGE_EXTENSIONS,
    SourceParser,
    detect_language,
    read_source,
)


class TestDetectLanguage:
    def test_java(self):
        assert detect_language("src/Foo.java") == "java"

    def test_kotlin_and_script(self):
        assert detect_language("Foo.kt") == "kotlin"
        assert detect_language("build.gradle.kts") == "kotlin"

    def test_case_insensitive_extension(self):
        assert detect_language("FOO.JAVA") == "java"

    def test_unknown(self):
        assert detect_language("README.md") is None
        assert detect_language("Makefile") is None


class TestReadSource:
    def test_reads_bytes(self, tmp_path):
        f = tmp_path / "A.java"
        f.write_text("class A {}", encoding="utf-8")
        assert read_source(str(f)) == b"class A {}"

    def test_missing_file_returns_none(self, tmp_path):
        assert read_source(str(tmp_path / "missing.java")) is None


class TestSourceParser:
    def test_parse_java(self, parser):
        tree = parser.parse(b"public class A { void m() {} }", "java")
        assert tree.root_node.type == "program"
        assert not parser.has_syntax_error(tree)

    def test_parse_kotlin(self, parser):
        tree = parser.parse(b"class A {\n    fun m() {}\n}\n", "kotlin")
        assert tree.root_node.type == "source_file"
        assert not parser.has_syntax_error(tree)

    def test_syntax_error_detected(self, parser):
        tree = parser.parse(b"public class { void m( }", "java")
        assert parser.has_syntax_error(tree)

    def test_unsupported_language(self, parser):
        with pytest.raises(ValueError, match="Unsupported language"):
            parser.parse(b"x = 1", "python")

    def test_handles_are_independent(self):
        a, b = SourceParser(), SourceParser()
        a.parse(b"class A {}", "java")
        assert "java" in a._parsers
        assert "java" not in b._parsers

    def test_none_tree_counts_as_error(self):
        assert SourceParser.has_syntax_error(None)


class TestResolveFilePaths:
    def test_directory_walk_is_sorted_and_filtered(self, source_tree):
        root = source_tree({
            "b/B.java": "class B {}",
            "a/A.java": "class A {}",
            "a/notes.txt": "x",
            "k/K.kt": "class K",
        })
        result = resolve_file_paths([str(root)], LANGUAGE_EXTENSIONS["java"])
        names = [os.path.relpath(p, root) for p in result.resolved]
        assert names == [os.path.join("a", "A.java"), os.path.join("b", "B.java")]
        assert result.errors == []

    def test_multiple_extensions(self, source_tree):
        root = source_tree({"A.kt": "class A", "b.kts": "println(1)", "C.java": "class C {}"})
        result = resolve_file_paths([str(root)], LANGUAGE_EXTENSIONS["kotlin"])
        assert sorted(os.path.basename(p) for p in result.resolved) == ["A.kt", "b.kts"]

    def test_string_extension_accepted(self, source_tree):
        root = source_tree({"A.java": "class A {}"})
        result = resolve_file_paths([str(root)], ".java")
        assert len(result.resolved) == 1

    def test_skip_dirs(self, source_tree):
        root = source_tree({
            ".git/Hidden.java": "class Hidden {}",
            ".gradle/Cache.java": "class Cache {}",
            "src/Real.java": "class Real {}",
        })
        result = resolve_file_paths([str(root)], ".java")
        assert [os.path.basename(p) for p in result.resolved] == ["Real.java"]
        assert ".git" in SKIP_DIRS

    def test_build_output_is_scanned(self, source_tree):
        root = source_tree({"build/generated/Gen.java": "class Gen {}"})
        result = resolve_file_paths([str(root)], ".java")
        assert [os.path.basename(p) for p in result.resolved] == ["Gen.java"]

    def test_explicit_file_kept_regardless_of_extension(self, source_tree):
        root = source_tree({"Script.txt": "hello"})
        result = resolve_file_paths([str(root / "Script.txt")], ".java")
        assert result.resolved == [str(root / "Script.txt")]

    def test_relative_paths_use_cwd(self, source_tree):
        root = source_tree({"src/A.java": "class A {}"})
        result = resolve_file_paths(["src"], ".java", cwd=str(root))
        assert result.resolved == [os.path.join(str(root), "src", "A.java")]

    def test_missing_path_is_recorded_not_raised(self, source_tree):
        root = source_tree({"A.java": "class A {}"})
        result = resolve_file_paths(["nope", str(root)], ".java", cwd=str(root))
        assert len(result.resolved) == 1
        assert len(result.errors) == 1
        assert result.errors[0].path == "nope"
        assert "Path not found" in result.errors[0].message
        assert result.errors[0].to_dict() == {"path": "nope", "message": "Path not found: nope"}

    def test_overlapping_paths_listed_once(self, source_tree):
        root = source_tree({"A.java": "class A {}", "B.java": "class B {}"})
        result = resolve_file_paths(
            [str(root / "B.java"), str(root), "./B.java"], ".java", cwd=str(root),
        )
        assert result.resolved == [str(root / "B.java"), str(root / "A.java")]
