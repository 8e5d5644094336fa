"""Remove unused imports from Java or Kotlin files.

Exit codes:
  0  All files processed.
  6  Some paths or files could not be processed.
"""

from __future__ import annotations

import click

from langtools.analysis.imports import cleanup_files
from langtools.commands.common import exit_for, is_json, plural
from langtools.index.parser import SourceParser
from langtools.output.formatter import json_envelope, to_json


@click.command("clean-imports")
@click.argument("paths", nargs=-1, required=True)
@click.option("--language", type=click.Choice(["java", "kotlin"]), required=True, help="Source language.")
@click.option("--dry-run", is_flag=True, help="Report unused imports without rewriting files.")
@click.pass_context
def clean_imports(ctx, paths, language, dry_run):
    """Delete imports whose name is never used in the file.

    Wildcard imports are always kept. Files with syntax errors are left
    untouched and reported.

    \b
    Examples:
      lang-tools clean-imports --language java src/main/java
      lang-tools clean-imports --language kotlin --dry-run Foo.kt
    """
    result = cleanup_files(list(paths), language, SourceParser(), dry_run=dry_run)
    removed = sum(len(f["removed"]) for f in result["files"])
    errors = result.get("errors", [])
    action = "would be removed" if dry_run else "removed"
    if removed:
        verdict = f"{plural(removed, 'unused import')} {action} in {plural(len(result['files']), 'file')}"
    else:
        verdict = f"clean -- {plural(result['filesProcessed'], 'file')} processed, no unused imports"

    if is_json(ctx):
        click.echo(
            to_json(
                json_envelope(
                    "clean-imports",
                    summary={
                        "verdict": verdict,
                        "status": result["status"],
                        "files_processed": result["filesProcessed"],
                        "imports_removed": removed,
                        "dry_run": dry_run,
                    },
                    files=result["files"],
                    errors=errors,
                )
            )
        )
    else:
        click.echo(f"VERDICT: {verdict}")
        for entry in result["files"]:
            click.echo("")
            click.echo(entry["file"])
            for imp in entry["removed"]:
                click.echo(f"  - {imp}")
        if errors:
            click.echo("")
            for err in errors:
                click.echo(f"  ERROR  {err}")

    exit_for(ctx, 0, bool(errors), fail_on_findings=False)
