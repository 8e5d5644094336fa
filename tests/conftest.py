"""Shared test fixtures and helpers for lang-tools tests.

Provides:
- Parser fixture: parser (one SourceParser per test)
- Parse helpers: parse_java(), parse_kotlin()
- CliRunner fixtures: cli_runner, invoke_cli()
- Factory fixture: source_tree for custom file combinations
- JSON validation helpers: parse_json_output(), assert_json_envelope()
- Declaration factory: make_decl()
"""

from __future__ import annotations

import json
import os
import textwrap

import pytest
from click.testing import CliRunner

# ===========================================================================
# Parser helpers
# ===========================================================================


@pytest.fixture
def parser():
    """A fresh parser handle, as every analysis run gets."""
    from langtools.index.parser import SourceParser

    return SourceParser()


def _parse(language, code):
    from langtools.index.parser import SourceParser
    from langtools.languages.registry import get_language_spec

    source = textwrap.dedent(code).encode("utf-8")
    tree = SourceParser().parse(source, language)
    return tree, source, get_language_spec(language)


def parse_java(code):
    """Parse dedented Java *code*. Returns (tree, source bytes, spec)."""
    return _parse("java", code)


def parse_kotlin(code):
    """Parse dedented Kotlin *code*. Returns (tree, source bytes, spec)."""
    return _parse("kotlin", code)


def findings_for(language, code):
    """Run the single-file detectors over *code* and return the findings."""
    from langtools.analysis.liveness import detect_dead_code

    tree, source, spec = _parse(language, code)
    return detect_dead_code(tree.root_node, source, spec)


def names_by_category(findings):
    out: dict[str, set[str]] = {}
    for f in findings:
        out.setdefault(f.category, set()).add(f.name)
    return out


def make_decl(name="Thing", **kwargs):
    """Build a Declaration with public-class defaults; override any field."""
    from langtools.analysis.declarations import Declaration, DeclarationCategory, Visibility

    defaults = dict(
        category=DeclarationCategory.CLASS,
        visibility=Visibility.PUBLIC,
        enclosing_class="",
        file="Thing.java",
        line=1,
        column=1,
    )
    defaults.update(kwargs)
    return Declaration(name=name, **defaults)


# ===========================================================================
# CliRunner helpers
# ===========================================================================


@pytest.fixture
def cli_runner():
    """Provide a Click CliRunner for in-process CLI testing."""
    return CliRunner()


def invoke_cli(runner, args, cwd=None, json_mode=False, env=None):
    """Invoke the lang-tools CLI via CliRunner.

    Args:
        runner: CliRunner instance
        args: list of CLI arguments (e.g. ["dead-code", "src"])
        cwd: directory to run in
        json_mode: if True, prepend --json flag
        env: extra environment variables (e.g. LANG_TOOLS_CONFIG)
    Returns:
        click.testing.Result
    """
    from langtools.cli import cli

    full_args = []
    if json_mode:
        full_args.append("--json")
    full_args.extend(args)

    old_cwd = os.getcwd()
    try:
        if cwd:
            os.chdir(str(cwd))
        result = runner.invoke(cli, full_args, env=env or {}, catch_exceptions=False)
    finally:
        os.chdir(old_cwd)

    return result


# ===========================================================================
# JSON validation helpers
# ===========================================================================


def parse_json_output(result, command=None, exit_code=0):
    """Parse JSON from a CliRunner result.

    Args:
        result: click.testing.Result from invoke_cli
        command: optional command name for better error messages
        exit_code: the exit code the command is expected to return
    Returns:
        Parsed dict from JSON output
    Raises:
        AssertionError with context on parse failure
    """
    assert result.exit_code == exit_code, (
        f"Command {command or '?'} failed (exit {result.exit_code}):\n{result.output}"
    )
    try:
        return json.loads(result.output)
    except json.JSONDecodeError as e:
        pytest.fail(f"Invalid JSON from {command or '?'}: {e}\nOutput was:\n{result.output[:500]}")


def assert_json_envelope(data, command=None):
    """Validate that a parsed JSON dict follows the lang-tools envelope contract.

    Checks required top-level keys: schema, command, version, summary.
    Checks _meta contains timestamp (non-deterministic metadata).
    Checks summary contains a verdict string.
    """
    assert isinstance(data, dict), f"Expected dict, got {type(data)}"
    assert data.get("schema") == "lang-tools-envelope-v1"
    assert "command" in data, "Missing 'command' key in envelope"
    assert "version" in data, "Missing 'version' key in envelope"
    assert "summary" in data, "Missing 'summary' key in envelope"
    assert "timestamp" in data.get("_meta", {}), "Missing 'timestamp' in _meta"
    if command:
        assert data["command"] == command, f"Expected command={command}, got {data['command']}"
    summary = data["summary"]
    assert isinstance(summary, dict), f"summary should be dict, got {type(summary)}"
    assert isinstance(summary.get("verdict"), str), "summary.verdict should be a string"


# ===========================================================================
# Project fixtures
# ===========================================================================


def write_sources(root, files):
    """Write ``{relative path: source}`` under *root* (sources are dedented)."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content), encoding="utf-8")
    return root


@pytest.fixture
def source_tree(tmp_path):
    """Factory fixture: build a source directory from a dict of files.

    Usage::

        def test_something(source_tree):
            root = source_tree({"src/Foo.java": "public class Foo {}"})
    """
    def _make(files, name="project"):
        root = tmp_path / name
        root.mkdir(exist_ok=True)
        return write_sources(root, files)

    return _make


@pytest.fixture
def config_file(tmp_path):
    """Factory fixture: write a JSON config and return its path."""
    def _make(data, name="config.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _make


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Keep the user's real config out of every test."""
    monkeypatch.setenv("LANG_TOOLS_CONFIG", str(tmp_path / "no-such-config.json"))
