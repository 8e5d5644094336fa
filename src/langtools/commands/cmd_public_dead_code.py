"""Cross-file dead-code detection for public, protected and internal declarations.

All files under the given paths are analyzed together. Framework profiles
(``--profile`` or ``activeProfiles`` in the config file) keep alive the
declarations a framework calls by convention.

Exit codes:
  0  Analysis completed.
  3  Unknown profile or malformed config file.
  5  Findings present and --fail-on-findings was given.
  6  Some files could not be read or parsed.
"""

from __future__ import annotations

import click

from langtools.analysis.reachability import analyze_paths
from langtools.commands.common import (
    echo_findings,
    errored_files,
    exit_for,
    is_json,
    load_cli_config,
    plural,
)
from langtools.config import merge_active_profiles
from langtools.exit_codes import ConfigurationError
from langtools.index.parser import SourceParser
from langtools.output.formatter import json_envelope, to_json
from langtools.rules.conditions import ProfileError
from langtools.rules.profiles import resolve_profiles


@click.command("public-dead-code")
@click.argument("paths", nargs=-1, required=True)
@click.option("--language", type=click.Choice(["java", "kotlin"]), required=True, help="Source language.")
@click.option(
    "--profile", "profiles", multiple=True,
    help="Activate a profile (repeatable). Replaces activeProfiles from the config file.",
)
@click.option("--no-config-profiles", is_flag=True, help="Ignore activeProfiles from the config file.")
@click.option("--fail-on-findings", is_flag=True, help="Exit with code 5 when anything is reported.")
@click.pass_context
def public_dead_code(ctx, paths, language, profiles, no_config_profiles, fail_on_findings):
    """Find visible classes, methods and fields that nothing references.

    Matching is by simple name across all analyzed files. Declarations
    matched by an active profile, and every direct member of a class
    matched by one, are kept.

    \b
    Examples:
      lang-tools public-dead-code --language java src/main/java
      lang-tools public-dead-code --language kotlin --profile spring --profile junit5 .
      lang-tools --json public-dead-code --language java --no-config-profiles src
    """
    config = load_cli_config(ctx)
    if profiles:
        requested = list(profiles)
    elif no_config_profiles:
        requested = []
    else:
        requested = None
    active = merge_active_profiles(config, requested)
    try:
        rules = resolve_profiles(active, config)
    except ProfileError as exc:
        raise ConfigurationError(str(exc)) from exc

    result = analyze_paths(list(paths), language, rules, active, SourceParser())
    total = result["totalFindings"]
    errors = errored_files(result["files"])
    if total == 0:
        verdict = f"clean -- {plural(result['filesAnalyzed'], 'file')} analyzed, no unused declarations"
    else:
        with_findings = sum(1 for f in result["files"] if f["findings"])
        verdict = f"{plural(total, 'unused declaration')} in {plural(with_findings, 'file')}"

    if is_json(ctx):
        click.echo(
            to_json(
                json_envelope(
                    "public-dead-code",
                    summary={
                        "verdict": verdict,
                        "files_analyzed": result["filesAnalyzed"],
                        "total_findings": total,
                        "files_with_errors": len(errors),
                        "active_profiles": active,
                        "clean": total == 0,
                    },
                    language=language,
                    source_roots=result["sourceRoots"],
                    files=[f for f in result["files"] if f["findings"] or f.get("error")],
                )
            )
        )
    else:
        click.echo(f"VERDICT: {verdict}")
        if active:
            click.echo(f"Profiles: {', '.join(active)}")
        echo_findings(result["files"])

    exit_for(ctx, total, bool(errors), fail_on_findings)
