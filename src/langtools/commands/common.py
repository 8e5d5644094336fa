"""Helpers shared by the analysis commands."""

from __future__ import annotations

import click

from langtools.config import ConfigError, load_config
from langtools.exit_codes import EXIT_GATE_FAILURE, EXIT_PARTIAL, ConfigurationError
from langtools.output.formatter import finding_line


def is_json(ctx) -> bool:
    return bool(ctx.obj.get("json")) if ctx.obj else False


def load_cli_config(ctx) -> dict:
    """Load the config named by ``--config`` (or the default location)."""
    path = ctx.obj.get("config_path") if ctx.obj else None
    try:
        return load_config(path)
    except ConfigError as exc:
        raise ConfigurationError(str(exc)) from exc


def plural(n: int, word: str) -> str:
    return f"{n} {word}{'' if n == 1 else 's'}"


def errored_files(files: list[dict]) -> list[dict]:
    return [f for f in files if f.get("error")]


def echo_findings(files: list[dict]) -> None:
    """Text rendering of ``files`` entries: findings first, then errors."""
    with_findings = [f for f in files if f.get("findings")]
    if with_findings:
        click.echo("")
        for entry in with_findings:
            for finding in entry["findings"]:
                click.echo(f"  {finding_line(entry['file'], finding)}")
    errors = errored_files(files)
    if errors:
        click.echo("")
        for entry in errors:
            click.echo(f"  {entry['file']}  ERROR  {entry['error']}")


def exit_for(ctx, total_findings: int, partial: bool, fail_on_findings: bool) -> None:
    """Exit 5 for gated findings, 6 for partial results, else return."""
    if fail_on_findings and total_findings:
        ctx.exit(EXIT_GATE_FAILURE)
    if partial:
        ctx.exit(EXIT_PARTIAL)
