"""Single-file dead-code detection: unused parameters, locals and private members.

Parses files directly; every file is analyzed on its own.

Exit codes:
  0  Analysis completed (findings are reported but do not fail the run).
  5  Findings present and --fail-on-findings was given.
  6  Some files could not be read or parsed.
"""

from __future__ import annotations

import click

from langtools.analysis.liveness import analyze_files
from langtools.commands.common import echo_findings, errored_files, exit_for, is_json, plural
from langtools.index.parser import SourceParser
from langtools.output.formatter import json_envelope, to_json


def _verdict(result: dict) -> str:
    total = result["totalFindings"]
    if total == 0:
        return f"clean -- {plural(result['filesProcessed'], 'file')} checked, no dead code"
    with_findings = sum(1 for f in result["files"] if f["findings"])
    return f"{plural(total, 'finding')} in {plural(with_findings, 'file')}"


@click.command("dead-code")
@click.argument("paths", nargs=-1, required=True)
@click.option(
    "--language",
    type=click.Choice(["java", "kotlin", "auto"]),
    default="auto",
    show_default=True,
    help="Source language; auto picks it per file from the extension.",
)
@click.option("--fail-on-findings", is_flag=True, help="Exit with code 5 when anything is reported.")
@click.pass_context
def dead_code(ctx, paths, language, fail_on_findings):
    """Find unused parameters, locals, private fields and private methods.

    Each declaration is checked inside its own method or class. A field used
    only from a separately named nested class still counts as unused;
    anonymous classes and object literals share their enclosing scope.

    \b
    Examples:
      lang-tools dead-code src/main/java
      lang-tools dead-code --language kotlin app/src
      lang-tools --json dead-code Foo.java
    """
    result = analyze_files(list(paths), language, SourceParser())
    verdict = _verdict(result)
    errors = errored_files(result["files"])

    if is_json(ctx):
        click.echo(
            to_json(
                json_envelope(
                    "dead-code",
                    summary={
                        "verdict": verdict,
                        "files_processed": result["filesProcessed"],
                        "total_findings": result["totalFindings"],
                        "files_with_errors": len(errors),
                        "clean": result["totalFindings"] == 0,
                    },
                    language=language,
                    files=result["files"],
                )
            )
        )
    else:
        click.echo(f"VERDICT: {verdict}")
        echo_findings(result["files"])

    exit_for(ctx, result["totalFindings"], bool(errors), fail_on_findings)
