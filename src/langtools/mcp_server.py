"""MCP (Model Context Protocol) server for lang-tools.

Exposes import cleanup and both dead-code layers as MCP tools, one per
language, so that coding agents can call them with plain path lists.

Usage:
    lang-tools mcp                    # stdio
    lang-tools mcp --transport sse    # SSE on localhost:8000
    lang-tools mcp --transport streamable-http  # Streamable HTTP on localhost:8000
"""

from __future__ import annotations

import logging

import click

from langtools.analysis.imports import cleanup_files
from langtools.analysis.liveness import analyze_files
from langtools.analysis.reachability import analyze_paths
from langtools.config import ConfigError, load_config, merge_active_profiles
from langtools.index.parser import SourceParser
from langtools.rules.conditions import ProfileError
from langtools.rules.profiles import resolve_profiles

try:
    from fastmcp import FastMCP
except ImportError:
    FastMCP = None

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Server instance
# ---------------------------------------------------------------------------

if FastMCP is not None:
    mcp = FastMCP(
        "lang-tools",
        instructions=(
            "Dead-code detection and unused-import cleanup for Java and Kotlin. "
            "All tools take a list of file or directory paths. "
            "Only the cleanup tools modify files."
        ),
    )
else:
    mcp = None


_REGISTERED_TOOLS: list[str] = []

# Tools that rewrite source files.
_DESTRUCTIVE_TOOLS = {
    "cleanup_unused_imports_java",
    "cleanup_unused_imports_kotlin",
}


def _tool_annotations(name: str) -> dict:
    destructive = name in _DESTRUCTIVE_TOOLS
    return {
        "title": name.replace("_", " ").capitalize(),
        "readOnlyHint": not destructive,
        "destructiveHint": destructive,
        "idempotentHint": True,
        "openWorldHint": False,
    }


def _tool(name: str, description: str = ""):
    """Register an MCP tool when fastmcp is available."""
    def decorator(fn):
        if mcp is None:
            return fn
        _REGISTERED_TOOLS.append(name)
        kwargs: dict = {"name": name, "annotations": _tool_annotations(name)}
        if description:
            kwargs["description"] = description
        try:
            return mcp.tool(**kwargs)(fn)
        except TypeError:
            # Older FastMCP without annotations support
            kwargs.pop("annotations")
            return mcp.tool(**kwargs)(fn)
    return decorator


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

_INVALID_PATHS = {"status": "NOK", "error": "Invalid paths parameter"}


def _valid_paths(paths) -> bool:
    return isinstance(paths, list) and all(isinstance(p, str) for p in paths)


def _structured_error(message: str) -> dict:
    return {"status": "NOK", "error": message, "isError": True}


def _cleanup(paths, language: str) -> dict:
    if not _valid_paths(paths):
        return dict(_INVALID_PATHS)
    return cleanup_files(paths, language, SourceParser())


def _dead_code(paths, language: str) -> dict:
    if not _valid_paths(paths):
        return dict(_INVALID_PATHS)
    return analyze_files(paths, language, SourceParser())


def _public_dead_code(paths, language: str, active_profiles) -> dict:
    if not _valid_paths(paths):
        return dict(_INVALID_PATHS)
    if active_profiles is not None and not isinstance(active_profiles, list):
        return _structured_error("activeProfiles must be a list of profile names")
    try:
        config = load_config()
        active = merge_active_profiles(config, active_profiles)
        rules = resolve_profiles(active, config)
    except (ConfigError, ProfileError) as exc:
        log.warning("public dead-code request rejected: %s", exc)
        return _structured_error(str(exc))
    return analyze_paths(paths, language, rules, active, SourceParser())


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@_tool(name="cleanup_unused_imports_java",
       description="Remove unused imports from Java files (rewrites files in place).")
def cleanup_unused_imports_java(paths: list[str]) -> dict:
    """Remove unused imports from the given Java files and directories.

    Wildcard imports are kept. Files with syntax errors are skipped and
    listed under ``errors``."""
    return _cleanup(paths, "java")


@_tool(name="cleanup_unused_imports_kotlin",
       description="Remove unused imports from Kotlin files (rewrites files in place).")
def cleanup_unused_imports_kotlin(paths: list[str]) -> dict:
    """Remove unused imports from the given Kotlin files and directories.

    Operator-convention names (delegates, destructuring, indexing) count
    as uses of their imports."""
    return _cleanup(paths, "kotlin")


@_tool(name="detect_dead_code_java",
       description="Unused parameters, locals, private fields and private methods in Java files.")
def detect_dead_code_java(paths: list[str]) -> dict:
    """Single-file dead-code scan for Java. Only files with findings or
    errors appear in ``files``."""
    return _dead_code(paths, "java")


@_tool(name="detect_dead_code_kotlin",
       description="Unused parameters, locals, private properties and private functions in Kotlin files.")
def detect_dead_code_kotlin(paths: list[str]) -> dict:
    """Single-file dead-code scan for Kotlin."""
    return _dead_code(paths, "kotlin")


@_tool(name="detect_public_dead_code_java",
       description="Cross-file scan for unreferenced public/protected Java declarations.")
def detect_public_dead_code_java(paths: list[str], activeProfiles: list[str] | None = None) -> dict:
    """Cross-file dead-code scan for Java.

    ``activeProfiles`` replaces the profiles named in the config file; pass
    an empty list to analyze without any framework entrypoints."""
    return _public_dead_code(paths, "java", activeProfiles)


@_tool(name="detect_public_dead_code_kotlin",
       description="Cross-file scan for unreferenced public/internal Kotlin declarations.")
def detect_public_dead_code_kotlin(paths: list[str], activeProfiles: list[str] | None = None) -> dict:
    """Cross-file dead-code scan for Kotlin."""
    return _public_dead_code(paths, "kotlin", activeProfiles)


# ---------------------------------------------------------------------------
# CLI command
# ---------------------------------------------------------------------------


@click.command()
@click.option('--transport', type=click.Choice(['stdio', 'sse', 'streamable-http']), default='stdio',
              help='transport protocol (default: stdio)')
@click.option('--host', default='127.0.0.1', help='host for network transports')
@click.option('--port', type=int, default=8000, help='port for network transports')
@click.option('--list-tools', is_flag=True, help='list registered tools and exit')
def mcp_cmd(transport, host, port, list_tools):
    """Start the lang-tools MCP server.

    \b
    usage:
      lang-tools mcp                    # stdio
      lang-tools mcp --transport sse    # SSE on localhost:8000
      lang-tools mcp --list-tools       # show registered tools

    \b
    requires:
      pip install lang-tools[mcp]
    """
    if mcp is None:
        click.echo(
            "error: fastmcp is required for the MCP server.\n"
            "install it with:  pip install lang-tools[mcp]",
            err=True,
        )
        raise SystemExit(1)

    if list_tools:
        click.echo(f"{len(_REGISTERED_TOOLS)} tools registered:\n")
        for t in sorted(_REGISTERED_TOOLS):
            click.echo(f"  {t}")
        return

    if transport == "stdio":
        mcp.run()
    else:
        mcp.run(transport=transport, host=host, port=port)
