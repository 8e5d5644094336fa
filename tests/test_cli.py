"""End-to-end tests for the lang-tools CLI commands."""

from __future__ import annotations

import json

from tests.conftest import assert_json_envelope, invoke_cli, parse_json_output

CALC = """
    public class Calc {
        private int unusedField;

        public int twice(int value, int ignored) {
            return value * 2;
        }
    }
"""

SERVICE = """
    package com.example;

    import org.junit.jupiter.api.Test;

    public class ServiceTest {
        @Test
        public void works() {}

        public void helper() {}
    }
"""

UI_PROFILE = {
    "activeProfiles": ["ui"],
    "profiles": [{
        "name": "ui",
        "entrypoints": [{"name": "views", "rules": [{"namePattern": "*View"}]}],
    }],
}


class TestTopLevel:
    def test_help_lists_categories(self, cli_runner):
        result = invoke_cli(cli_runner, ["--help"])
        assert result.exit_code == 0
        for heading in ("Analysis:", "Cleanup:", "Configuration:", "Integration:"):
            assert heading in result.output
        assert "public-dead-code" in result.output

    def test_version(self, cli_runner):
        result = invoke_cli(cli_runner, ["--version"])
        assert result.exit_code == 0
        assert "version" in result.output

    def test_unknown_command(self, cli_runner):
        result = invoke_cli(cli_runner, ["nope"])
        assert result.exit_code == 2


class TestDeadCodeCommand:
    def test_text_output(self, cli_runner, source_tree):
        root = source_tree({"Calc.java": CALC})
        result = invoke_cli(cli_runner, ["dead-code", str(root)])
        assert result.exit_code == 0
        assert result.output.startswith("VERDICT: 2 findings in 1 file")
        assert "unused_parameter" in result.output
        assert "unused_field" in result.output

    def test_json_envelope(self, cli_runner, source_tree):
        root = source_tree({"Calc.java": CALC, "Clean.java": "public class Clean {}\n"})
        result = invoke_cli(cli_runner, ["dead-code", str(root)], json_mode=True)
        data = parse_json_output(result, "dead-code")
        assert_json_envelope(data, "dead-code")
        summary = data["summary"]
        assert summary["files_processed"] == 2
        assert summary["total_findings"] == 2
        assert summary["clean"] is False
        assert data["language"] == "auto"
        assert [f["file"] for f in data["files"]] == [str(root / "Calc.java")]
        names = {f["name"] for f in data["files"][0]["findings"]}
        assert names == {"ignored", "unusedField"}

    def test_clean_verdict(self, cli_runner, source_tree):
        root = source_tree({"Clean.java": "public class Clean {}\n"})
        result = invoke_cli(cli_runner, ["dead-code", str(root)])
        assert "VERDICT: clean -- 1 file checked, no dead code" in result.output

    def test_missing_path_is_partial(self, cli_runner, source_tree):
        root = source_tree({"Clean.java": "public class Clean {}\n"})
        result = invoke_cli(cli_runner, ["dead-code", str(root), "does/not/exist"], json_mode=True)
        data = parse_json_output(result, "dead-code", exit_code=6)
        assert data["summary"]["files_with_errors"] == 1
        assert data["files"][0]["error"] == "Path not found: does/not/exist"

    def test_kotlin_by_language_flag(self, cli_runner, source_tree):
        root = source_tree({
            "Calc.kt": "class Calc {\n    private val unused = 1\n}\n",
            "Calc.java": CALC,
        })
        result = invoke_cli(cli_runner, ["dead-code", "--language", "kotlin", str(root)], json_mode=True)
        data = parse_json_output(result, "dead-code")
        assert data["summary"]["files_processed"] == 1
        assert data["files"][0]["findings"][0]["name"] == "unused"


class TestPublicDeadCodeCommand:
    def test_reports_without_profiles(self, cli_runner, source_tree):
        root = source_tree({"ServiceTest.java": SERVICE})
        result = invoke_cli(cli_runner, ["public-dead-code", "--language", "java", str(root)], json_mode=True)
        data = parse_json_output(result, "public-dead-code")
        assert_json_envelope(data, "public-dead-code")
        found = {f["name"] for entry in data["files"] for f in entry["findings"]}
        assert {"ServiceTest", "works", "helper"} <= found
        assert data["summary"]["active_profiles"] == []
        assert data["source_roots"] == [str(root)]

    def test_profile_flag(self, cli_runner, source_tree):
        root = source_tree({"ServiceTest.java": SERVICE})
        result = invoke_cli(
            cli_runner,
            ["public-dead-code", "--language", "java", "--profile", "junit5", str(root)],
            json_mode=True,
        )
        data = parse_json_output(result, "public-dead-code")
        found = {f["name"] for entry in data["files"] for f in entry["findings"]}
        assert "works" not in found
        assert "helper" in found
        assert data["summary"]["active_profiles"] == ["junit5"]

    def test_config_file_profiles(self, cli_runner, source_tree, config_file):
        root = source_tree({"MainView.java": "public class MainView { public void show() {} }\n"})
        path = config_file(UI_PROFILE)
        result = invoke_cli(
            cli_runner,
            ["--config", str(path), "public-dead-code", "--language", "java", str(root)],
        )
        assert result.exit_code == 0
        assert "Profiles: ui" in result.output
        assert "clean -- 1 file analyzed" in result.output

    def test_no_config_profiles(self, cli_runner, source_tree, config_file):
        root = source_tree({"MainView.java": "public class MainView { public void show() {} }\n"})
        path = config_file(UI_PROFILE)
        result = invoke_cli(
            cli_runner,
            ["--config", str(path), "--json", "public-dead-code", "--language", "java",
             "--no-config-profiles", str(root)],
        )
        data = parse_json_output(result, "public-dead-code")
        assert data["summary"]["active_profiles"] == []
        assert data["summary"]["total_findings"] == 2

    def test_config_from_environment(self, cli_runner, source_tree, config_file):
        root = source_tree({"MainView.java": "public class MainView { public void show() {} }\n"})
        path = config_file(UI_PROFILE)
        result = invoke_cli(
            cli_runner,
            ["public-dead-code", "--language", "java", str(root)],
            json_mode=True,
            env={"LANG_TOOLS_CONFIG": str(path)},
        )
        data = parse_json_output(result, "public-dead-code")
        assert data["summary"]["active_profiles"] == ["ui"]
        assert data["summary"]["clean"] is True

    def test_unknown_profile(self, cli_runner, source_tree):
        root = source_tree({"A.java": "public class A {}\n"})
        result = invoke_cli(
            cli_runner, ["public-dead-code", "--language", "java", "--profile", "nope", str(root)],
        )
        assert result.exit_code == 3
        assert 'Unknown profile: "nope"' in result.output

    def test_malformed_config(self, cli_runner, source_tree, tmp_path):
        root = source_tree({"A.java": "public class A {}\n"})
        bad = tmp_path / "bad.json"
        bad.write_text("{oops", encoding="utf-8")
        result = invoke_cli(
            cli_runner, ["--config", str(bad), "public-dead-code", "--language", "java", str(root)],
        )
        assert result.exit_code == 3

    def test_fail_on_findings(self, cli_runner, source_tree):
        root = source_tree({"ServiceTest.java": SERVICE})
        result = invoke_cli(
            cli_runner, ["public-dead-code", "--language", "java", "--fail-on-findings", str(root)],
        )
        assert result.exit_code == 5


class TestCleanImportsCommand:
    SOURCE = "import java.util.List;\nimport java.util.Map;\n\nclass A { List<String> x; }\n"

    def test_dry_run(self, cli_runner, source_tree):
        root = source_tree({"A.java": self.SOURCE})
        result = invoke_cli(
            cli_runner, ["clean-imports", "--language", "java", "--dry-run", str(root)], json_mode=True,
        )
        data = parse_json_output(result, "clean-imports")
        assert_json_envelope(data, "clean-imports")
        assert data["summary"]["imports_removed"] == 1
        assert data["summary"]["dry_run"] is True
        assert data["files"][0]["removed"] == ["java.util.Map"]
        assert (root / "A.java").read_text(encoding="utf-8") == self.SOURCE

    def test_rewrites_and_lists(self, cli_runner, source_tree):
        root = source_tree({"A.java": self.SOURCE})
        result = invoke_cli(cli_runner, ["clean-imports", "--language", "java", str(root)])
        assert result.exit_code == 0
        assert "VERDICT: 1 unused import removed in 1 file" in result.output
        assert "  - java.util.Map" in result.output
        assert "Map" not in (root / "A.java").read_text(encoding="utf-8")

    def test_errors_exit_partial(self, cli_runner, source_tree):
        root = source_tree({"Broken.java": "class Broken { void m( {\n"})
        result = invoke_cli(cli_runner, ["clean-imports", "--language", "java", str(root)], json_mode=True)
        data = parse_json_output(result, "clean-imports", exit_code=6)
        assert data["summary"]["status"] == "NOK"
        assert data["errors"]


class TestProfilesCommand:
    def test_json(self, cli_runner, config_file):
        path = config_file(UI_PROFILE)
        result = invoke_cli(cli_runner, ["--config", str(path), "profiles"], json_mode=True)
        data = parse_json_output(result, "profiles")
        assert_json_envelope(data, "profiles")
        assert data["summary"]["total"] == 6
        assert data["summary"]["active"] == ["ui"]
        assert data["profiles"][-1]["name"] == "ui"

    def test_table(self, cli_runner):
        result = invoke_cli(cli_runner, ["profiles"])
        assert result.exit_code == 0
        assert "VERDICT: 5 profiles available, 0 active by default" in result.output
        assert "spring" in result.output
        assert "built-in" in result.output

    def test_output_is_deterministic(self, cli_runner):
        first = json.loads(invoke_cli(cli_runner, ["profiles"], json_mode=True).output)
        second = json.loads(invoke_cli(cli_runner, ["profiles"], json_mode=True).output)
        first.pop("_meta")
        second.pop("_meta")
        assert first == second
