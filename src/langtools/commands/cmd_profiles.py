"""List built-in and user-defined framework profiles."""

from __future__ import annotations

import click

from langtools.commands.common import is_json, load_cli_config
from langtools.config import merge_active_profiles
from langtools.output.formatter import format_table, json_envelope, to_json
from langtools.rules.profiles import list_profiles


@click.command("profiles")
@click.pass_context
def profiles(ctx):
    """Show the profiles available to `public-dead-code --profile`."""
    config = load_cli_config(ctx)
    rows = list_profiles(config)
    active = merge_active_profiles(config)
    verdict = f"{len(rows)} profiles available, {len(active)} active by default"

    if is_json(ctx):
        click.echo(
            to_json(
                json_envelope(
                    "profiles",
                    summary={"verdict": verdict, "total": len(rows), "active": active},
                    profiles=rows,
                )
            )
        )
        return

    click.echo(f"VERDICT: {verdict}\n")
    table = [
        [
            r["name"],
            "built-in" if r["builtin"] else "user",
            str(r["entrypoints"]),
            "yes" if r["keepExternalOverrides"] else "no",
            "*" if r["name"] in active else "",
        ]
        for r in rows
    ]
    click.echo(format_table(["name", "source", "entrypoints", "trust-overrides", "active"], table))
