"""Tests for unused-import detection and removal."""

from __future__ import annotations

import textwrap

from langtools.analysis.imports import cleanup_file, cleanup_files, find_unused_imports, remove_imports
from tests.conftest import parse_java, parse_kotlin


def _unused(parse, code):
    tree, source, spec = parse(code)
    return [imp.path for imp in find_unused_imports(tree.root_node, spec, source)]


class TestFindUnusedJava:
    def test_unused_import_found(self):
        unused = _unused(parse_java, """
            import java.util.List;
            import java.util.Map;

            public class A {
                List<String> items;
            }
        """)
        assert unused == ["java.util.Map"]

    def test_wildcard_always_kept(self):
        unused = _unused(parse_java, """
            import java.util.*;

            public class A {}
        """)
        assert unused == []

    def test_annotation_counts_as_use(self):
        unused = _unused(parse_java, """
            import org.junit.jupiter.api.Test;

            public class ATest {
                @Test
                void works() {}
            }
        """)
        assert unused == []

    def test_static_import_used_by_call(self):
        unused = _unused(parse_java, """
            import static java.util.Collections.emptyList;
            import static java.util.Collections.singleton;

            public class A {
                Object items = emptyList();
            }
        """)
        assert unused == ["java.util.Collections.singleton"]


class TestFindUnusedKotlin:
    def test_alias_is_the_used_name(self):
        unused = _unused(parse_kotlin, """
            import com.example.LongName as Short
            import com.example.Other as Unused

            fun make(): Short = Short()
        """)
        assert unused == ["com.example.Other"]

    def test_delegate_operator_keeps_get_value(self):
        unused = _unused(parse_kotlin, """
            import com.example.getValue
            import com.example.Holder

            class Box {
                val item by Holder()
            }
        """)
        assert unused == []

    def test_destructuring_keeps_component_functions(self):
        unused = _unused(parse_kotlin, """
            import com.example.component1
            import com.example.component2
            import com.example.component3

            fun split(pair: Pair<Int, Int>): Int {
                val (a, b) = pair
                return a + b
            }
        """)
        assert unused == ["com.example.component3"]

    def test_plus_operator(self):
        unused = _unused(parse_kotlin, """
            import com.example.plus
            import com.example.minus

            fun add(a: Money, b: Money) = a + b
        """)
        assert unused == []

    def test_used_in_string_template(self):
        unused = _unused(parse_kotlin, """
            import com.example.VERSION

            fun banner() = "v$VERSION"
        """)
        assert unused == []


class TestRemoveImports:
    def test_removes_line_with_terminator(self, tmp_path):
        code = textwrap.dedent("""\
            import java.util.List;
            import java.util.Map;

            public class A { List<String> x; }
        """)
        tree, source, spec = parse_java(code)
        unused = find_unused_imports(tree.root_node, spec, source)
        cleaned = remove_imports(source, unused)
        assert cleaned.decode() == (
            "import java.util.List;\n"
            "\n"
            "public class A { List<String> x; }\n"
        )

    def test_crlf_line_endings(self):
        code = "import a.B;\r\nimport c.D;\r\n\r\nclass X { B b; }\r\n"
        tree, source, spec = parse_java(code)
        cleaned = remove_imports(source, find_unused_imports(tree.root_node, spec, source))
        assert cleaned == b"import a.B;\r\n\r\nclass X { B b; }\r\n"


class TestCleanupFile:
    SOURCE = "import java.util.List;\nimport java.util.Map;\n\nclass A { List<String> x; }\n"

    def test_rewrites_file(self, tmp_path, parser):
        path = tmp_path / "A.java"
        path.write_text(self.SOURCE, encoding="utf-8")
        result = cleanup_file(str(path), "java", parser)
        assert result.ok
        assert result.removed == ["java.util.Map"]
        assert "Map" not in path.read_text(encoding="utf-8")

    def test_dry_run_leaves_file(self, tmp_path, parser):
        path = tmp_path / "A.java"
        path.write_text(self.SOURCE, encoding="utf-8")
        result = cleanup_file(str(path), "java", parser, dry_run=True)
        assert result.removed == ["java.util.Map"]
        assert path.read_text(encoding="utf-8") == self.SOURCE

    def test_clean_file_untouched(self, tmp_path, parser):
        path = tmp_path / "A.java"
        path.write_text("import java.util.List;\nclass A { List<String> x; }\n", encoding="utf-8")
        before = path.stat().st_mtime_ns
        result = cleanup_file(str(path), "java", parser)
        assert result.removed == []
        assert path.stat().st_mtime_ns == before

    def test_syntax_error_untouched(self, tmp_path, parser):
        path = tmp_path / "Broken.java"
        broken = "import java.util.Map;\nclass Broken { void m( {\n"
        path.write_text(broken, encoding="utf-8")
        result = cleanup_file(str(path), "java", parser)
        assert not result.ok
        assert result.error == "Syntax error in file"
        assert path.read_text(encoding="utf-8") == broken


class TestCleanupFiles:
    def test_directory_summary(self, source_tree, parser):
        root = source_tree({
            "A.java": "import java.util.Map;\nclass A {}\n",
            "B.java": "import java.util.List;\nclass B { List<String> x; }\n",
            "notes.txt": "import nothing;",
        })
        result = cleanup_files([str(root)], "java", parser)
        assert result["status"] == "OK"
        assert result["filesProcessed"] == 2
        assert result["files"] == [{"file": str(root / "A.java"), "removed": ["java.util.Map"]}]
        assert "errors" not in result

    def test_errors_make_status_nok(self, source_tree, parser):
        root = source_tree({
            "A.java": "import java.util.Map;\nclass A {}\n",
            "Broken.java": "class Broken { void m( {\n",
        })
        result = cleanup_files([str(root), str(root / "missing")], "java", parser)
        assert result["status"] == "NOK"
        assert result["filesProcessed"] == 1
        assert len(result["errors"]) == 2
        assert any("Syntax error" in e for e in result["errors"])
        assert (root / "A.java").read_text(encoding="utf-8") == "class A {}\n"
